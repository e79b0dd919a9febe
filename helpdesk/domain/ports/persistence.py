from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol

from ..models import Ticket, TicketQuery, User


class UserRepository(Protocol):
    """Persistence functions related to user accounts."""

    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    def get_user_by_id(self, user_id: Any) -> Optional[User]:
        ...

    def get_users_by_ids(self, user_ids: Iterable[int]) -> Dict[int, User]:
        ...

    def create_user(self, name: str, email: str, password_hash: str) -> User:
        ...


class TicketRepository(Protocol):
    """Persistence functions related to tickets.

    Identifiers arrive as received from the client; implementations raise
    ``InvalidIdentifierError`` when one cannot be cast to the stored type.
    """

    def create_ticket(
        self,
        title: Optional[str],
        description: Optional[str],
        priority: Optional[str],
        status: Optional[str],
        due_date: Optional[datetime],
        created_by: Optional[int],
    ) -> Ticket:
        ...

    def get_ticket(self, ticket_id: Any) -> Optional[Ticket]:
        ...

    def update_ticket(self, ticket_id: Any, changes: Dict[str, Any]) -> Optional[Ticket]:
        ...

    def delete_ticket(self, ticket_id: Any) -> bool:
        ...

    def find_tickets(self, query: TicketQuery) -> List[Ticket]:
        ...

    def count_tickets(self, query: TicketQuery) -> int:
        ...


class PersistenceGateway(UserRepository, TicketRepository, Protocol):
    """Composite gateway combining every persistence concern used by the app."""

    def close(self) -> None:
        ...
