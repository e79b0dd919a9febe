from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from ....application.services.auth_service import AuthService
from ....core.dependencies import get_auth_service
from ....core.errors import AppError
from ....core.messages import AuthMessages
from ....domain.errors import DuplicateKeyError
from ....domain.models import User
from ...api.schemas.auth import LoginPayload, RegisterPayload

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterPayload,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    try:
        user = await auth_service.register(payload.name, payload.email, payload.password)
    except DuplicateKeyError as exc:
        raise AppError(AuthMessages.EMAIL_ALREADY_EXISTS, 400) from exc
    return {"message": AuthMessages.REGISTRATION_SUCCESS, "user": serialize_user(user)}


@router.post("/login")
async def login(
    payload: LoginPayload,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    token, user = await auth_service.login(payload.email, payload.password)
    return {"message": AuthMessages.LOGIN_SUCCESS, "token": token, "user": serialize_user(user)}


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "createdAt": user.created_at.replace(microsecond=0).isoformat(),
        "updatedAt": user.updated_at.replace(microsecond=0).isoformat(),
    }
