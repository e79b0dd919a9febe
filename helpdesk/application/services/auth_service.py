from __future__ import annotations

import logging
from typing import Optional, Tuple

from ...core.errors import AppError
from ...core.messages import AuthMessages
from ...domain.errors import DocumentValidationError
from ...domain.models import User
from ...domain.ports.persistence import UserRepository
from .password_hasher import PasswordHasher
from .token_service import TokenService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthService:
    """Registers users and exchanges credentials for bearer tokens."""

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self._users = users
        self._hasher = hasher
        self._tokens = tokens

    async def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> User:
        if not password:
            raise DocumentValidationError({"password": AuthMessages.PASSWORD_REQUIRED})
        if len(password) < MIN_PASSWORD_LENGTH:
            raise DocumentValidationError({"password": AuthMessages.PASSWORD_TOO_SHORT})
        hashed = self._hasher.hash(password)
        user = self._users.create_user(name=name or "", email=email or "", password_hash=hashed)
        logger.info("Registered user %s (%s)", user.id, user.email)
        return user

    async def login(self, email: str, password: str) -> Tuple[str, User]:
        user = self._users.get_user_by_email(email)
        if not user:
            raise AppError(AuthMessages.USER_NOT_FOUND, 404)
        if not self._hasher.verify(password, user.password_hash):
            raise AppError(AuthMessages.INVALID_CREDENTIALS, 401)
        return self._tokens.issue_for_user(user.id), user

    async def resolve_token(self, token: str) -> User:
        """Return the user a token was issued to.

        Raises ``TokenError`` for a bad or expired token and ``LookupError``
        when the subject no longer exists.
        """
        claims = self._tokens.verify(token)
        user = self._users.get_user_by_id(claims.get("sub"))
        if not user:
            raise LookupError(f"No user for token subject {claims.get('sub')!r}")
        return user
