"""Support router - tickets for members and owners, plus the admin desk"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_owner, get_current_user, require_admin
from ...database import get_db
from ...models import SpaceOwner, User
from .schemas import (
    AdminTicketResponse,
    AdminTicketUpdate,
    TicketCreate,
    TicketMessageCreate,
    TicketMessageResponse,
)
from .service import SupportService, serialize_ticket

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/support", tags=["Support"])
owner_router = APIRouter(prefix="/api/owner/support", tags=["Owner", "Support"])
admin_router = APIRouter(prefix="/api/admin/support", tags=["Admin", "Support"])


def get_support_service(db: Session = Depends(get_db)) -> SupportService:
    """Dependency injection for SupportService"""
    return SupportService(db)


# ============================================================================
# MEMBER TICKETS
# ============================================================================


@router.get("/tickets")
async def list_tickets(
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    tickets = service.list_tickets(current_user)
    return {"success": True, "tickets": tickets, "total": len(tickets)}


@router.post("/tickets", status_code=201)
async def create_ticket(
    data: TicketCreate,
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    ticket = await service.create_ticket(current_user, data)
    return {"success": True, "message": "Support ticket created", "ticket": serialize_ticket(ticket)}


@router.get("/tickets/{ticket_id}")
async def get_ticket(
    ticket_id: int,
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    return {"success": True, "ticket": service.get_ticket(current_user, ticket_id)}


@router.post("/tickets/{ticket_id}/messages", status_code=201)
async def add_ticket_message(
    ticket_id: int,
    data: TicketMessageCreate,
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    message = service.add_message(current_user, ticket_id, data.message)
    return {"success": True, "message": TicketMessageResponse.model_validate(message).model_dump()}


# ============================================================================
# OWNER TICKETS
# ============================================================================


@owner_router.get("")
async def list_owner_tickets(
    owner: SpaceOwner = Depends(get_current_owner),
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    tickets = service.list_tickets(current_user, user_role="owner")
    return {"success": True, "tickets": tickets, "total": len(tickets)}


@owner_router.post("", status_code=201)
async def create_owner_ticket(
    data: TicketCreate,
    owner: SpaceOwner = Depends(get_current_owner),
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    ticket = await service.create_ticket(current_user, data, user_role="owner")
    return {"success": True, "message": "Support ticket created", "ticket": serialize_ticket(ticket)}


# ============================================================================
# ADMIN DESK
# ============================================================================


@admin_router.get("")
async def list_all_tickets(
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    user_role: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    admin: User = Depends(require_admin),
    service: SupportService = Depends(get_support_service),
):
    tickets = service.search_tickets(status, priority, user_role, category)
    return {"success": True, "tickets": tickets, "total": len(tickets)}


@admin_router.patch("/{ticket_id}")
async def update_ticket(
    ticket_id: int,
    data: AdminTicketUpdate,
    admin: User = Depends(require_admin),
    service: SupportService = Depends(get_support_service),
):
    ticket = service.update_ticket(ticket_id, data)
    return {"success": True, "message": "Ticket updated", "ticket": serialize_ticket(ticket, include_internal=True)}


@admin_router.post("/{ticket_id}/respond", status_code=201)
async def respond_to_ticket(
    ticket_id: int,
    data: AdminTicketResponse,
    admin: User = Depends(require_admin),
    service: SupportService = Depends(get_support_service),
):
    """Reply to a ticket; non-internal replies are emailed to the reporter"""
    message = await service.respond(admin, ticket_id, data)
    return {"success": True, "message": TicketMessageResponse.model_validate(message).model_dump()}
