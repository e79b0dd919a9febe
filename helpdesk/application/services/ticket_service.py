from __future__ import annotations

import json
import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from ...core.errors import AppError
from ...core.messages import TicketMessages
from ...domain.models import (
    MAX_INT64,
    FieldCriterion,
    Ticket,
    TicketAuthor,
    TicketPage,
    TicketQuery,
    as_datetime,
)
from ...domain.ports.persistence import PersistenceGateway

logger = logging.getLogger(__name__)

# Public (JSON) field names accepted in ``sort`` and ``filter``.
QUERYABLE_FIELDS: Dict[str, str] = {
    "id": "id",
    "_id": "id",
    "title": "title",
    "description": "description",
    "priority": "priority",
    "status": "status",
    "dueDate": "due_date",
    "createdBy": "created_by",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
FILTER_OPERATORS = frozenset({"$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin"})

_datetime_adapter = TypeAdapter(Union[datetime, date])


class TicketService:
    """CRUD and listing over tickets, attributing authorship to the caller."""

    def __init__(self, persistence: PersistenceGateway) -> None:
        self._persistence = persistence

    async def create_ticket(self, data: Mapping[str, Any], author_id: int) -> Ticket:
        ticket = self._persistence.create_ticket(
            title=data.get("title"),
            description=data.get("description"),
            priority=data.get("priority"),
            status=data.get("status"),
            due_date=data.get("due_date"),
            created_by=author_id,
        )
        logger.info("Ticket %s created by user %s", ticket.id, author_id)
        return ticket

    async def list_tickets(
        self,
        page: int = 1,
        limit: int = 10,
        sort: Optional[str] = None,
        filter: Optional[str] = None,
    ) -> TicketPage:
        skip = (page - 1) * limit
        if skip > MAX_INT64 or limit > MAX_INT64:
            raise AppError(TicketMessages.PAGE_OUT_OF_RANGE, 400)
        query = TicketQuery(criteria=self._parse_filter(filter), skip=skip, limit=limit)
        if sort:
            query.sort_field, query.descending = self._parse_sort(sort)

        tickets = self._persistence.find_tickets(query)
        total = self._persistence.count_tickets(query)
        self._attach_authors(tickets)
        return TicketPage(
            tickets=tickets,
            total_pages=math.ceil(total / limit),
            current_page=page,
            page_size=limit,
        )

    async def get_ticket(self, ticket_id: Any) -> Ticket:
        ticket = self._persistence.get_ticket(ticket_id)
        if not ticket:
            raise AppError(TicketMessages.TICKET_NOT_FOUND, 404)
        self._attach_authors([ticket])
        return ticket

    async def update_ticket(self, ticket_id: Any, changes: Mapping[str, Any]) -> Ticket:
        ticket = self._persistence.update_ticket(ticket_id, dict(changes))
        if not ticket:
            raise AppError(TicketMessages.TICKET_NOT_FOUND, 404)
        logger.info("Ticket %s updated (%s)", ticket.id, ", ".join(sorted(changes)) or "no fields")
        return ticket

    async def delete_ticket(self, ticket_id: Any) -> None:
        if not self._persistence.delete_ticket(ticket_id):
            raise AppError(TicketMessages.TICKET_NOT_FOUND, 404)
        logger.info("Ticket %s deleted", ticket_id)

    # ------------------------------------------------------------------
    def _attach_authors(self, tickets: Iterable[Ticket]) -> None:
        tickets = list(tickets)
        users = self._persistence.get_users_by_ids(ticket.created_by for ticket in tickets)
        for ticket in tickets:
            user = users.get(ticket.created_by)
            if user:
                ticket.author = TicketAuthor(id=user.id, name=user.name, email=user.email)

    @staticmethod
    def _parse_sort(sort: str) -> Tuple[str, bool]:
        field, _, direction = sort.partition(":")
        attribute = QUERYABLE_FIELDS.get(field.strip())
        if attribute is None:
            raise AppError(f"{TicketMessages.INVALID_SORT}: {field}", 400)
        return attribute, direction.strip().lower() == "desc"

    def _parse_filter(self, raw: Optional[str]) -> List[FieldCriterion]:
        if not raw:
            return []
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise self._filter_error("malformed JSON") from exc
        if not isinstance(document, dict):
            raise self._filter_error("expected a JSON object")

        criteria: List[FieldCriterion] = []
        for name, condition in document.items():
            attribute = QUERYABLE_FIELDS.get(name)
            if attribute is None:
                raise self._filter_error(f"unknown field {name}")
            if isinstance(condition, dict):
                if not condition:
                    raise self._filter_error(f"empty condition for {name}")
                for operator, operand in condition.items():
                    if operator not in FILTER_OPERATORS:
                        raise self._filter_error(f"unsupported operator {operator}")
                    criteria.append(FieldCriterion(attribute, operator, self._coerce(attribute, operator, operand)))
            else:
                criteria.append(FieldCriterion(attribute, "$eq", self._coerce(attribute, "$eq", condition)))
        return criteria

    def _coerce(self, attribute: str, operator: str, operand: Any) -> Any:
        if operator in ("$in", "$nin"):
            if not isinstance(operand, list):
                raise self._filter_error(f"{operator} expects a list")
            return [self._coerce_value(attribute, item) for item in operand]
        return self._coerce_value(attribute, operand)

    def _coerce_value(self, attribute: str, value: Any) -> Any:
        if attribute in ("due_date", "created_at", "updated_at"):
            try:
                moment = as_datetime(_datetime_adapter.validate_python(value))
                if moment.tzinfo is None:
                    moment = moment.replace(tzinfo=timezone.utc)
                return moment.astimezone(timezone.utc)
            except (ValidationError, OverflowError) as exc:
                raise self._filter_error(f"invalid date {value!r}") from exc
        if attribute in ("id", "created_by"):
            if isinstance(value, str) and value.isdecimal():
                value = int(value)
            if isinstance(value, int) and not isinstance(value, bool) and abs(value) <= MAX_INT64:
                return value
            raise self._filter_error(f"invalid identifier {value!r}")
        if not isinstance(value, str):
            raise self._filter_error(f"expected text for {attribute}")
        return value

    @staticmethod
    def _filter_error(reason: str) -> AppError:
        return AppError(f"{TicketMessages.INVALID_FILTER}: {reason}", 400)
