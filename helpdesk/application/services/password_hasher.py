from __future__ import annotations

from passlib.context import CryptContext


class PasswordHasher:
    """One-way salted hashing of user passwords."""

    def __init__(self, schemes: tuple = ("bcrypt",)) -> None:
        self._pwd = CryptContext(schemes=list(schemes), deprecated="auto")

    def hash(self, plaintext: str) -> str:
        return self._pwd.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        try:
            return self._pwd.verify(plaintext, hashed)
        except (TypeError, ValueError):
            # Unknown or corrupted stored hash.
            return False
