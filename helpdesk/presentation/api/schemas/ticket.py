from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from ....domain.models import as_datetime

DueDate = Annotated[Union[datetime, date], AfterValidator(as_datetime)]


class TicketCreatePayload(BaseModel):
    """Fields a client may set on a new ticket; ``createdBy`` is not one of them."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[DueDate] = Field(default=None, alias="dueDate")


class TicketUpdatePayload(TicketCreatePayload):
    pass
