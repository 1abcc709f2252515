"""Support repository - Database operations for tickets and messages"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models_support import SupportTicket, SupportTicketMessage


class SupportRepository:
    """Repository for support ticket database operations"""

    @staticmethod
    def get_user_tickets(db: Session, user_id: int, user_role: Optional[str] = None) -> list[SupportTicket]:
        query = (
            db.query(SupportTicket)
            .options(joinedload(SupportTicket.messages))
            .filter(SupportTicket.user_id == user_id)
        )
        if user_role:
            query = query.filter(SupportTicket.user_role == user_role)
        return query.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc()).all()

    @staticmethod
    def get_user_ticket(db: Session, user_id: int, ticket_id: int) -> Optional[SupportTicket]:
        return (
            db.query(SupportTicket)
            .filter(SupportTicket.id == ticket_id, SupportTicket.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_by_id(db: Session, ticket_id: int) -> Optional[SupportTicket]:
        return db.query(SupportTicket).filter(SupportTicket.id == ticket_id).first()

    @staticmethod
    def search(
        db: Session,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        user_role: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[SupportTicket]:
        query = db.query(SupportTicket).options(
            joinedload(SupportTicket.user), joinedload(SupportTicket.messages)
        )
        if status:
            query = query.filter(SupportTicket.status == status)
        if priority:
            query = query.filter(SupportTicket.priority == priority)
        if user_role:
            query = query.filter(SupportTicket.user_role == user_role)
        if category:
            query = query.filter(SupportTicket.category == category)
        return query.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc()).all()

    @staticmethod
    def create_ticket(db: Session, **data) -> SupportTicket:
        ticket = SupportTicket(**data)
        db.add(ticket)
        db.commit()
        db.refresh(ticket)
        return ticket

    @staticmethod
    def add_message(db: Session, **data) -> SupportTicketMessage:
        message = SupportTicketMessage(**data)
        db.add(message)
        db.flush()
        return message
