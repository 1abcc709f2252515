"""Support service - member/owner tickets and the admin support desk"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_new_ticket_alert, send_support_reply
from ...models import User
from ...models_support import SupportTicket, SupportTicketMessage
from ...security_utils import generate_ticket_number, sanitize_text
from .repository import SupportRepository
from .schemas import (
    AdminTicketResponse,
    AdminTicketUpdate,
    TicketCreate,
    TicketMessageResponse,
    TicketResponse,
)

logger = logging.getLogger(__name__)


def serialize_ticket(ticket: SupportTicket, include_internal: bool = False) -> dict[str, Any]:
    data = TicketResponse.model_validate(ticket).model_dump()
    data["messages"] = [
        TicketMessageResponse.model_validate(message).model_dump()
        for message in ticket.messages
        if include_internal or not message.is_internal
    ]
    return data


def clean_required(text: str, field: str) -> str:
    cleaned = sanitize_text(text)
    if not cleaned:
        raise HTTPException(status_code=400, detail=f"{field} cannot be empty")
    return cleaned


class SupportService:
    """Service for support ticket operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SupportRepository()

    # ------------------------------------------------------------------
    # Ticket owner side (members and space owners)
    # ------------------------------------------------------------------

    def list_tickets(self, user: User, user_role: Optional[str] = None) -> list[dict[str, Any]]:
        return [serialize_ticket(t) for t in self.repo.get_user_tickets(self.db, user.id, user_role)]

    async def create_ticket(self, user: User, data: TicketCreate, user_role: Optional[str] = None) -> SupportTicket:
        try:
            ticket = self.repo.create_ticket(
                self.db,
                ticket_number=generate_ticket_number(),
                user_id=user.id,
                user_role=user_role or user.role,
                subject=clean_required(data.subject, "Subject"),
                description=clean_required(data.description, "Description"),
                category=data.category,
                priority=data.priority,
                status="open",
            )
        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error creating support ticket for user {user.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create support ticket") from e

        logger.info(f"🎫 Support ticket {ticket.ticket_number} opened by user {user.id} ({ticket.user_role})")

        try:
            await send_new_ticket_alert(
                ticket_number=ticket.ticket_number,
                subject=ticket.subject,
                category=ticket.category,
                priority=ticket.priority,
                reporter_email=user.email,
                user_role=ticket.user_role,
            )
        except Exception as e:
            logger.warning(f"⚠️ Admin alert for ticket {ticket.ticket_number} failed: {e}")

        return ticket

    def get_ticket(self, user: User, ticket_id: int) -> dict[str, Any]:
        ticket = self.repo.get_user_ticket(self.db, user.id, ticket_id)
        if not ticket:
            raise HTTPException(status_code=404, detail="Ticket not found")
        return serialize_ticket(ticket)

    def add_message(self, user: User, ticket_id: int, text: str) -> SupportTicketMessage:
        ticket = self.repo.get_user_ticket(self.db, user.id, ticket_id)
        if not ticket:
            raise HTTPException(status_code=404, detail="Ticket not found")
        if ticket.status == "closed":
            raise HTTPException(status_code=400, detail="Cannot add messages to a closed ticket")

        body = clean_required(text, "Message")
        try:
            message = self.repo.add_message(
                self.db,
                ticket_id=ticket.id,
                sender_id=user.id,
                sender_type="user",
                message=body,
                is_internal=False,
            )
            ticket.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(message)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error adding message to ticket {ticket_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to add message") from e

        return message

    # ------------------------------------------------------------------
    # Admin desk
    # ------------------------------------------------------------------

    def search_tickets(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        user_role: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        tickets = self.repo.search(self.db, status, priority, user_role, category)
        results = []
        for ticket in tickets:
            data = serialize_ticket(ticket, include_internal=True)
            user = ticket.user
            data["user"] = (
                {
                    "id": user.id,
                    "email": user.email,
                    "name": f"{user.first_name or ''} {user.last_name or ''}".strip(),
                }
                if user
                else None
            )
            results.append(data)
        return results

    def update_ticket(self, ticket_id: int, data: AdminTicketUpdate) -> SupportTicket:
        ticket = self.repo.get_by_id(self.db, ticket_id)
        if not ticket:
            raise HTTPException(status_code=404, detail="Ticket not found")

        updates = data.model_dump(exclude_unset=True)
        if "assigned_to" in updates and updates["assigned_to"] is not None:
            if not self.db.query(User).filter(User.id == updates["assigned_to"]).first():
                raise HTTPException(status_code=400, detail="Assignee not found")

        try:
            for key, value in updates.items():
                if value is not None or key == "assigned_to":
                    setattr(ticket, key, value)
            now = datetime.utcnow()
            if updates.get("status") == "resolved":
                ticket.resolved_at = now
            elif updates.get("status") == "closed":
                ticket.closed_at = now
            self.db.commit()
            self.db.refresh(ticket)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating ticket {ticket_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update ticket") from e

        logger.info(f"✅ Ticket {ticket.ticket_number} updated: {updates}")
        return ticket

    async def respond(self, admin: User, ticket_id: int, data: AdminTicketResponse) -> SupportTicketMessage:
        ticket = self.repo.get_by_id(self.db, ticket_id)
        if not ticket:
            raise HTTPException(status_code=404, detail="Ticket not found")

        body = clean_required(data.message, "Message")
        try:
            message = self.repo.add_message(
                self.db,
                ticket_id=ticket.id,
                sender_id=admin.id,
                sender_type="admin",
                message=body,
                is_internal=data.is_internal,
            )
            if ticket.status == "open":
                ticket.status = "in_progress"
            ticket.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(message)
            self.db.refresh(ticket)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error responding to ticket {ticket_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to add response") from e

        logger.info(f"💬 Admin {admin.id} responded to ticket {ticket.ticket_number}")

        if not data.is_internal and ticket.user:
            try:
                await send_support_reply(
                    to=ticket.user.email,
                    user_name=ticket.user.first_name or "there",
                    ticket_number=ticket.ticket_number,
                    subject=ticket.subject,
                    message=body,
                )
            except Exception as e:
                logger.warning(f"⚠️ Support reply email failed for ticket {ticket.ticket_number}: {e}")

        return message
