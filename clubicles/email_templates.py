"""
MJML Email Templates
Transactional emails for members, space owners and admins
"""

from typing import Optional

from .config import FRONTEND_URL

# Clubicles brand colors - Indigo/Slate
THEME = {
    "primary": "#4f46e5",
    "primary_dark": "#4338ca",
    "primary_light": "#e0e7ff",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#10b981",
    "warning": "#f59e0b",
    "danger": "#ef4444",
}

LOGO_URL = f"{FRONTEND_URL}/logo.png"


def format_inr(amount: float) -> str:
    return f"₹{amount:,.2f}"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    is_user_email: bool = False,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer_notice = ""
    if is_user_email:
        footer_notice = """
        <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
          You're receiving this because you have a Clubicles account.
        </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 20px">
          <mj-column>
            <mj-image src="{LOGO_URL}" alt="Clubicles" width="140px" href="{FRONTEND_URL}" padding="0" />
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © Clubicles. Work from anywhere, belong somewhere.
            </mj-text>
            {footer_notice}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def detail_rows(rows: list[tuple[str, str]]) -> str:
    """Two-column key/value table"""
    cells = "".join(
        f"""
        <tr>
          <td style="padding: 6px 0; color: {THEME['text_muted']};">{label}</td>
          <td style="padding: 6px 0; text-align: right; color: {THEME['text_primary']}; font-weight: 600;">{value}</td>
        </tr>"""
        for label, value in rows
    )
    return f"""
    <mj-table padding="8px 0 16px 0">
      {cells}
    </mj-table>
    """


# ============================================================================
# ACCOUNT
# ============================================================================


def email_otp_template(user_name: str, otp: str) -> str:
    content = f"""
    <mj-text>Hi {user_name},</mj-text>
    <mj-text>Use this code to verify your email address. It expires in 10 minutes.</mj-text>
    <mj-text align="center" font-size="36px" font-weight="700" color="{THEME['text_primary']}" letter-spacing="8px" font-family="'Courier New', monospace">
      {otp}
    </mj-text>
    <mj-text color="{THEME['text_muted']}" font-size="14px">
      If you didn't request this code, you can safely ignore this email.
    </mj-text>
    """
    return get_base_template(
        title="Verify Your Email Address",
        preview_text=f"Your verification code is {otp}",
        content_sections=content,
        is_user_email=True,
    )


def password_reset_template(reset_link: str) -> str:
    content = """
    <mj-text>We received a request to reset your Clubicles password.</mj-text>
    <mj-text>The link below is valid for one hour. If you didn't ask for a reset, no action is needed.</mj-text>
    """
    return get_base_template(
        title="Reset Your Password",
        preview_text="Reset your Clubicles password",
        content_sections=content,
        cta_url=reset_link,
        cta_label="Reset Password",
        is_user_email=True,
    )


def owner_signup_template(owner_name: str, business_name: Optional[str]) -> str:
    business_line = f" for <strong>{business_name}</strong>" if business_name else ""
    content = f"""
    <mj-text>Hi {owner_name},</mj-text>
    <mj-text>Thanks for registering as a space owner{business_line}.</mj-text>
    <mj-text>
      Our team reviews every new partner. You'll hear from us once your business details are verified;
      until then you can finish onboarding and prepare your first listing.
    </mj-text>
    """
    return get_base_template(
        title="Welcome to Clubicles for Owners",
        preview_text="Your owner account is pending approval",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/owner",
        cta_label="Open Owner Dashboard",
        is_user_email=True,
    )


# ============================================================================
# BOOKINGS & REVIEWS
# ============================================================================


def booking_confirmation_template(
    customer_name: str,
    space_name: str,
    space_address: str,
    bookings: list[dict],
    total_amount: float,
) -> str:
    """One row per booked date with its redemption code"""
    rows = []
    for booking in bookings:
        rows.append(
            (
                f"{booking['date']} · {booking['start_time']}-{booking['end_time']} · {booking['seats']} seat(s)",
                booking["redemption_code"],
            )
        )
    rows.append(("Total paid", format_inr(total_amount)))

    content = f"""
    <mj-text>Hi {customer_name},</mj-text>
    <mj-text>Your booking at <strong>{space_name}</strong> is confirmed.</mj-text>
    <mj-text color="{THEME['text_muted']}" font-size="14px">{space_address}</mj-text>
    {detail_rows(rows)}
    <mj-text>Show the redemption code (or its QR code) at the front desk when you arrive.</mj-text>
    """
    return get_base_template(
        title="Booking Confirmed",
        preview_text=f"Your booking at {space_name} is confirmed",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/bookings",
        cta_label="View My Bookings",
        is_user_email=True,
    )


def review_notification_template(owner_name: str, space_name: str, rating: int, review_text: str) -> str:
    stars = "★" * rating + "☆" * (5 - rating)
    content = f"""
    <mj-text>Hi {owner_name},</mj-text>
    <mj-text>A member just reviewed <strong>{space_name}</strong>.</mj-text>
    <mj-text font-size="24px" color="{THEME['warning']}">{stars}</mj-text>
    <mj-text color="{THEME['text_muted']}" font-style="italic">"{review_text}"</mj-text>
    """
    return get_base_template(
        title="New Review Received",
        preview_text=f"{space_name} received a {rating}-star review",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/owner",
        cta_label="See Reviews",
        is_user_email=True,
    )


# ============================================================================
# PAYOUTS & SUBSCRIPTIONS
# ============================================================================


def payout_notification_template(
    owner_name: str,
    amount: float,
    payment_method: str,
    transaction_id: str,
    remaining_pending: float,
) -> str:
    rows = detail_rows(
        [
            ("Amount", format_inr(amount)),
            ("Method", payment_method.replace("_", " ").title()),
            ("Transaction ID", transaction_id),
            ("Remaining pending", format_inr(remaining_pending)),
        ]
    )
    content = f"""
    <mj-text>Hi {owner_name},</mj-text>
    <mj-text>A payout has been sent to your registered account.</mj-text>
    {rows}
    <mj-text color="{THEME['text_muted']}" font-size="14px">
      Bank transfers can take up to 2 working days to reflect.
    </mj-text>
    """
    return get_base_template(
        title="Payout Processed",
        preview_text=f"{format_inr(amount)} is on its way",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/owner",
        cta_label="View Earnings",
        is_user_email=True,
    )


def payment_reminder_template(owner_name: str, plan: str) -> str:
    content = f"""
    <mj-text>Hi {owner_name},</mj-text>
    <mj-text>
      Your <strong>{plan}</strong> plan payment is due. Complete it to keep premium benefits such as
      unlimited listings and a reduced platform fee.
    </mj-text>
    """
    return get_base_template(
        title="Payment Reminder",
        preview_text="Your Clubicles plan payment is due",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/pricing",
        cta_label="Pay Now",
        is_user_email=True,
    )


def renewal_reminder_template(owner_name: str, expiry_date: Optional[str]) -> str:
    expiry_line = f"expires on <strong>{expiry_date}</strong>" if expiry_date else "has expired"
    content = f"""
    <mj-text>Hi {owner_name},</mj-text>
    <mj-text>Your premium subscription {expiry_line}. Renew to avoid losing premium features.</mj-text>
    """
    return get_base_template(
        title="Renew Your Subscription",
        preview_text="Your premium subscription needs renewal",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/pricing",
        cta_label="Renew Subscription",
        is_user_email=True,
    )


# ============================================================================
# SUPPORT
# ============================================================================


def support_reply_template(user_name: str, ticket_number: str, subject: str, message: str) -> str:
    content = f"""
    <mj-text>Hi {user_name},</mj-text>
    <mj-text>Our support team replied to ticket <strong>{ticket_number}</strong> ({subject}):</mj-text>
    <mj-text padding="8px 16px" container-background-color="{THEME['primary_light']}">{message}</mj-text>
    """
    return get_base_template(
        title="New Reply on Your Ticket",
        preview_text=f"Update on {ticket_number}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/support",
        cta_label="View Ticket",
        is_user_email=True,
    )


def new_ticket_alert_template(
    ticket_number: str, subject: str, category: str, priority: str, reporter_email: str, user_role: str
) -> str:
    rows = detail_rows(
        [
            ("Ticket", ticket_number),
            ("Subject", subject),
            ("Category", category),
            ("Priority", priority),
            ("Opened by", f"{reporter_email} ({user_role})"),
        ]
    )
    content = f"""
    <mj-text>A new support ticket needs attention.</mj-text>
    {rows}
    """
    return get_base_template(
        title="New Support Ticket",
        preview_text=f"{ticket_number}: {subject}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/admin/support",
        cta_label="Open Support Desk",
        is_user_email=False,
    )
