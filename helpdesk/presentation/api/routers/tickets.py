from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from ....application.services.ticket_service import TicketService
from ....core.dependencies import get_ticket_service
from ....core.messages import TicketMessages
from ....domain.models import MAX_INT64, Ticket, User
from ...api.dependencies import authenticate, get_current_user
from ...api.schemas.ticket import TicketCreatePayload, TicketUpdatePayload

router = APIRouter(
    prefix="/api/v1/tickets",
    tags=["Tickets"],
    dependencies=[Depends(authenticate)],
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: TicketCreatePayload,
    current_user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service),
) -> Dict[str, Any]:
    ticket = await service.create_ticket(payload.model_dump(), current_user.id)
    return {"message": TicketMessages.TICKET_CREATED, "ticket": serialize_ticket(ticket)}


@router.get("")
async def list_tickets(
    page: int = Query(default=1, ge=1, le=MAX_INT64),
    limit: int = Query(default=10, ge=1, le=MAX_INT64),
    sort: Optional[str] = Query(default=None),
    filter_: Optional[str] = Query(default=None, alias="filter"),
    service: TicketService = Depends(get_ticket_service),
) -> Dict[str, Any]:
    result = await service.list_tickets(page=page, limit=limit, sort=sort, filter=filter_)
    return {
        "tickets": [serialize_ticket(ticket) for ticket in result.tickets],
        "totalPages": result.total_pages,
        "currentPage": result.current_page,
        "pageSize": result.page_size,
    }


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
) -> Dict[str, Any]:
    ticket = await service.get_ticket(ticket_id)
    return serialize_ticket(ticket)


@router.patch("/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    payload: TicketUpdatePayload,
    service: TicketService = Depends(get_ticket_service),
) -> Dict[str, Any]:
    ticket = await service.update_ticket(ticket_id, payload.model_dump(exclude_unset=True))
    return {"message": TicketMessages.TICKET_UPDATED, "ticket": serialize_ticket(ticket)}


@router.delete("/{ticket_id}")
async def delete_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
) -> Dict[str, Any]:
    await service.delete_ticket(ticket_id)
    return {"message": TicketMessages.TICKET_DELETED}


def serialize_ticket(ticket: Ticket) -> Dict[str, Any]:
    if ticket.author is not None:
        created_by: Any = {
            "id": ticket.author.id,
            "name": ticket.author.name,
            "email": ticket.author.email,
        }
    else:
        created_by = ticket.created_by
    return {
        "id": ticket.id,
        "title": ticket.title,
        "description": ticket.description,
        "priority": ticket.priority.value,
        "status": ticket.status.value,
        "dueDate": ticket.due_date.isoformat(),
        "createdBy": created_by,
        "createdAt": ticket.created_at.isoformat(),
        "updatedAt": ticket.updated_at.isoformat(),
    }
