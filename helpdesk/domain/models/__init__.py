"""Domain models for the helpdesk application."""

from .ticket import (
    MAX_INT64,
    FieldCriterion,
    Ticket,
    TicketAuthor,
    TicketPage,
    TicketPriority,
    TicketQuery,
    TicketStatus,
    as_datetime,
)
from .user import User

__all__ = [
    "MAX_INT64",
    "FieldCriterion",
    "Ticket",
    "TicketAuthor",
    "TicketPage",
    "TicketPriority",
    "TicketQuery",
    "TicketStatus",
    "User",
    "as_datetime",
]
