from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import ExpiredSignatureError, JWTError, jwt

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Base class for bearer token verification failures."""


class InvalidTokenError(TokenError):
    pass


class ExpiredTokenError(TokenError):
    pass


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret_key: str,
        expires_in: timedelta = timedelta(days=1),
        algorithm: str = "HS256",
    ) -> None:
        if not secret_key:
            raise RuntimeError("TOKEN_SECRET is not configured.")
        self._secret_key = secret_key
        self._expires_in = expires_in
        self._algorithm = algorithm

    def issue(self, claims: Dict[str, Any]) -> str:
        now = datetime.now(tz=timezone.utc)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + self._expires_in
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def issue_for_user(self, user_id: int) -> str:
        return self.issue({"sub": str(user_id)})

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise ExpiredTokenError("Token has expired.") from exc
        except JWTError as exc:
            raise InvalidTokenError("Token signature or structure is invalid.") from exc
