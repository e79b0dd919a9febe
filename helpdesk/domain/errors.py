"""Failures raised by the persistence layer.

These mirror what a document store reports: a field that cannot be cast to
the stored identifier type, a unique index violation, or a document that does
not satisfy its schema. They carry raw details only; turning them into
client-facing messages is the job of the error model.
"""

from __future__ import annotations

from typing import Any, Dict


class PersistenceError(Exception):
    """Base class for storage-level failures."""


class InvalidIdentifierError(PersistenceError):
    def __init__(self, path: str, value: Any) -> None:
        super().__init__(f"Cast to identifier failed for value {value!r} at path {path!r}")
        self.path = path
        self.value = value


class DuplicateKeyError(PersistenceError):
    def __init__(self, field: str, value: Any) -> None:
        super().__init__(f"Duplicate key for {field}: {value!r}")
        self.field = field
        self.value = value


class DocumentValidationError(PersistenceError):
    """Schema validation failed; ``errors`` maps field name to message."""

    def __init__(self, errors: Dict[str, str]) -> None:
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
        self.errors = dict(errors)
