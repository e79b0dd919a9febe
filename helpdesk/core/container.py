from dataclasses import dataclass

from ..application.services.auth_service import AuthService
from ..application.services.password_hasher import PasswordHasher
from ..application.services.ticket_service import TicketService
from ..application.services.token_service import TokenService
from ..domain.ports.persistence import PersistenceGateway
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    persistence: PersistenceGateway
    password_hasher: PasswordHasher
    token_service: TokenService
    auth_service: AuthService
    ticket_service: TicketService
