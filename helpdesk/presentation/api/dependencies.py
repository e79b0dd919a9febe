import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...application.services.auth_service import AuthService
from ...core.dependencies import get_auth_service
from ...core.errors import AppError
from ...core.messages import ErrorMessages
from ...domain.models import User

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


async def authenticate(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Resolve the caller from the bearer token or reject with 401.

    Every failure produces the same response so callers cannot tell a missing
    header from an expired token or a deleted account.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        logger.debug("Rejected request to %s: missing bearer credentials", request.url.path)
        raise AppError(ErrorMessages.UNAUTHORIZED, 401)
    try:
        user = await auth_service.resolve_token(credentials.credentials)
    except Exception as exc:
        logger.debug("Rejected request to %s: %r", request.url.path, exc)
        raise AppError(ErrorMessages.UNAUTHORIZED, 401) from exc
    request.state.user = user
    request.state.token = credentials.credentials
    return user


def get_current_user(request: Request) -> User:
    user = getattr(request.state, "user", None)
    if user is None:
        raise AppError(ErrorMessages.UNAUTHORIZED, 401)
    return user
