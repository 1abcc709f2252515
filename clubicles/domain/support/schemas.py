"""Support domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

TicketCategory = Literal["general", "booking", "payment", "technical", "account", "other"]
TicketPriority = Literal["low", "medium", "high", "urgent"]
TicketStatus = Literal["open", "in_progress", "resolved", "closed"]


class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: TicketCategory = "general"
    priority: TicketPriority = "medium"


class TicketMessageCreate(BaseModel):
    message: str = Field(..., min_length=1)


class AdminTicketUpdate(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to: Optional[int] = None


class AdminTicketResponse(BaseModel):
    message: str = Field(..., min_length=1)
    is_internal: bool = False


class TicketMessageResponse(BaseModel):
    id: int
    ticket_id: int
    sender_id: int
    sender_type: str
    message: str
    is_internal: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TicketResponse(BaseModel):
    id: int
    ticket_number: str
    user_id: int
    user_role: str
    subject: str
    description: str
    category: str
    priority: str
    status: str
    assigned_to: Optional[int] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
