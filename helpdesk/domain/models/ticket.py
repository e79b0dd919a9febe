"""Ticket entity and the query types used to list tickets."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, List, Optional, Union

# Largest integer SQLite stores; bounds ids, offsets and page sizes.
MAX_INT64 = 2**63 - 1


class TicketPriority(str, Enum):
    LOW = "Low"
    HIGH = "High"


class TicketStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    CLOSED = "Closed"


@dataclass(slots=True)
class TicketAuthor:
    """Public view of the user referenced by ``Ticket.created_by``."""

    id: int
    name: str
    email: str


@dataclass(slots=True)
class Ticket:
    id: int
    title: str
    description: str
    priority: TicketPriority
    status: TicketStatus
    due_date: datetime
    created_by: int
    created_at: datetime
    updated_at: datetime
    author: Optional[TicketAuthor] = None


@dataclass(slots=True, frozen=True)
class FieldCriterion:
    field: str
    operator: str
    value: Any


@dataclass(slots=True)
class TicketQuery:
    criteria: List[FieldCriterion] = field(default_factory=list)
    sort_field: Optional[str] = None
    descending: bool = False
    skip: int = 0
    limit: int = 10


@dataclass(slots=True)
class TicketPage:
    tickets: List[Ticket]
    total_pages: int
    current_page: int
    page_size: int


def as_datetime(value: Union[datetime, date]) -> datetime:
    """Promote a calendar date to midnight UTC; datetimes pass through."""
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
