"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import ADMIN_EMAIL, EMAIL_FROM_ADDRESS, FRONTEND_URL, RESEND_API_KEY
from .email_templates import (
    booking_confirmation_template,
    email_otp_template,
    new_ticket_alert_template,
    owner_signup_template,
    password_reset_template,
    payment_reminder_template,
    payout_notification_template,
    renewal_reminder_template,
    review_notification_template,
    support_reply_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailNotConfiguredError(Exception):
    """Raised when no email provider key is available"""

    pass


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # Newer releases return an object with .html/.errors, older ones a dict
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        errors = getattr(result, "errors", None)
        if errors:
            logger.warning(f"MJML compilation warnings: {errors}")
        return getattr(result, "html", str(result))
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailNotConfiguredError("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built emails for platform events
# ============================================


async def send_email_otp(to: str, user_name: str, otp: str) -> dict:
    return await send_email(
        to=to,
        subject="Verify Your Email - Clubicles",
        mjml_content=email_otp_template(user_name, otp),
    )


async def send_password_reset_email(to: str, token: str) -> dict:
    reset_link = f"{FRONTEND_URL}/reset-password?token={token}"
    return await send_email(
        to=to,
        subject="Reset Your Password - Clubicles",
        mjml_content=password_reset_template(reset_link),
    )


async def send_owner_signup_email(to: str, owner_name: str, business_name: Optional[str] = None) -> dict:
    return await send_email(
        to=to,
        subject="Welcome to Clubicles - Owner Account Created",
        mjml_content=owner_signup_template(owner_name, business_name),
    )


async def send_booking_confirmation(
    to: str,
    customer_name: str,
    space_name: str,
    space_address: str,
    bookings: list[dict],
    total_amount: float,
) -> dict:
    """Booking confirmation listing every booked date and its redemption code"""
    return await send_email(
        to=to,
        subject=f"Booking Confirmed - {space_name}",
        mjml_content=booking_confirmation_template(
            customer_name, space_name, space_address, bookings, total_amount
        ),
    )


async def send_payout_notification(
    to: str,
    owner_name: str,
    amount: float,
    payment_method: str,
    transaction_id: str,
    remaining_pending: float,
) -> dict:
    return await send_email(
        to=to,
        subject="Payout Processed - Clubicles",
        mjml_content=payout_notification_template(
            owner_name, amount, payment_method, transaction_id, remaining_pending
        ),
    )


async def send_review_notification(
    to: str, owner_name: str, space_name: str, rating: int, review_text: str
) -> dict:
    return await send_email(
        to=to,
        subject=f"New {rating}-star review for {space_name}",
        mjml_content=review_notification_template(owner_name, space_name, rating, review_text),
    )


async def send_payment_reminder(to: str, owner_name: str, plan: str) -> dict:
    return await send_email(
        to=to,
        subject="Payment Reminder - Clubicles",
        mjml_content=payment_reminder_template(owner_name, plan),
    )


async def send_renewal_reminder(to: str, owner_name: str, expiry_date: Optional[str]) -> dict:
    return await send_email(
        to=to,
        subject="Renew Your Premium Subscription - Clubicles",
        mjml_content=renewal_reminder_template(owner_name, expiry_date),
    )


async def send_support_reply(to: str, user_name: str, ticket_number: str, subject: str, message: str) -> dict:
    return await send_email(
        to=to,
        subject=f"Re: {subject} [{ticket_number}]",
        mjml_content=support_reply_template(user_name, ticket_number, subject, message),
    )


async def send_new_ticket_alert(
    ticket_number: str, subject: str, category: str, priority: str, reporter_email: str, user_role: str
) -> dict:
    """Alert the platform admin inbox about a newly opened ticket"""
    return await send_email(
        to=ADMIN_EMAIL,
        subject=f"[{priority.upper()}] New support ticket {ticket_number}",
        mjml_content=new_ticket_alert_template(
            ticket_number, subject, category, priority, reporter_email, user_role
        ),
    )
