from typing import Optional

from pydantic import BaseModel


class RegisterPayload(BaseModel):
    # Presence and format checks happen in the user schema so that every
    # failure is reported with the same messages.
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginPayload(BaseModel):
    email: str
    password: str
