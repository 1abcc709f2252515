import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..config import AUTH_COOKIE_NAME, COOKIE_SECURE, ENVIRONMENT, JWT_EXPIRY_DAYS
from ..database import get_db
from ..domain.owners.schemas import BusinessInfoPayload, PaymentInfoPayload
from ..email_service import send_email_otp, send_owner_signup_email, send_password_reset_email
from ..models import SpaceOwner, SpaceOwnerBusinessInfo, SpaceOwnerPaymentInfo, User
from ..rate_limiter import create_rate_limiter
from ..schemas import SpaceOwnerSummary, UserResponse
from ..security_utils import (
    build_token_claims,
    constant_time_compare,
    create_jwt_token,
    generate_otp,
    generate_password_reset_token,
    hash_password,
    verify_password,
    verify_password_reset_token,
)
from ..shared.validators import validate_email, validate_indian_phone
from ..vibgyor import is_valid_professional_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

OTP_EXPIRY_MINUTES = 10
MAX_OTP_ATTEMPTS = 5
MIN_PASSWORD_LENGTH = 8


class RegisterRequest(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    professional_role: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_indian_phone(v)

    @field_validator("professional_role")
    @classmethod
    def check_role(cls, v):
        if v and not is_valid_professional_role(v):
            raise ValueError("Unknown professional role")
        return v


class RegisterOwnerRequest(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: Optional[str] = None
    phone: Optional[str] = None
    business_info: Optional[BusinessInfoPayload] = None
    payment_info: Optional[PaymentInfoPayload] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_indian_phone(v)


class SignInRequest(BaseModel):
    email: str
    password: str
    professional_role: Optional[str] = None


class SendOtpRequest(BaseModel):
    email: str


class VerifyOtpRequest(BaseModel):
    email: str
    otp: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    password: str


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
        max_age=JWT_EXPIRY_DAYS * 24 * 60 * 60,
        path="/",
    )


def serialize_user(user: User) -> dict:
    data = UserResponse.model_validate(user).model_dump()
    if user.space_owner:
        data["space_owner"] = SpaceOwnerSummary.model_validate(user.space_owner).model_dump()
    return data


def check_password_length(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400, detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


async def issue_email_otp(db: Session, user: User) -> None:
    """Store a fresh OTP on the user and email it; delivery failures are logged only"""
    otp = generate_otp()
    user.email_otp = otp
    user.email_otp_expiry = datetime.utcnow() + timedelta(minutes=OTP_EXPIRY_MINUTES)
    user.email_otp_attempts = 0
    db.commit()

    if ENVIRONMENT == "development":
        logger.info(f"🔧 Development OTP for {user.email}: {otp}")

    try:
        await send_email_otp(user.email, user.first_name or "there", otp)
        logger.info(f"📧 OTP sent to {user.email}")
    except Exception as e:
        logger.warning(f"⚠️ Failed to send OTP email to {user.email}: {e}")


def clear_email_otp(db: Session, user: User) -> None:
    user.email_otp = None
    user.email_otp_expiry = None
    user.email_otp_attempts = 0
    db.commit()


# ============================================================================
# REGISTRATION
# ============================================================================


@router.post("/register", status_code=201)
async def register(data: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    """Create a member account. The account stays unverified until the emailed OTP is confirmed."""
    check_password_length(data.password)

    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(status_code=400, detail="User with this email already exists")

    try:
        user = User(
            email=data.email,
            password_hash=hash_password(data.password),
            first_name=data.first_name.strip(),
            last_name=data.last_name,
            phone=data.phone,
            city=data.city,
            professional_role=data.professional_role,
            role="user",
            is_active=True,
            is_email_verified=False,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create user {data.email}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create account") from e

    logger.info(f"✅ User created: {user.id}")
    await issue_email_otp(db, user)

    token = create_jwt_token(build_token_claims(user))
    set_auth_cookie(response, token)
    return {"success": True, "message": "Account created successfully", "user": serialize_user(user)}


@router.post("/register-owner", status_code=201)
async def register_owner(data: RegisterOwnerRequest, response: Response, db: Session = Depends(get_db)):
    """Create an owner account with its SpaceOwner profile and optional business/payment details"""
    check_password_length(data.password)

    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(status_code=400, detail="User with this email already exists")

    try:
        user = User(
            email=data.email,
            password_hash=hash_password(data.password),
            first_name=data.first_name.strip(),
            last_name=data.last_name,
            phone=data.phone,
            role="owner",
            is_active=True,
            is_email_verified=False,
        )
        db.add(user)
        db.flush()

        owner = SpaceOwner(
            user_id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            premium_plan="basic",
            premium_payments_enabled=False,
            approval_status="pending",
            onboarding_completed=False,
        )
        db.add(owner)
        db.flush()

        if data.business_info:
            db.add(
                SpaceOwnerBusinessInfo(
                    space_owner_id=owner.id,
                    verification_status="pending",
                    **data.business_info.model_dump(),
                )
            )
        if data.payment_info:
            db.add(SpaceOwnerPaymentInfo(space_owner_id=owner.id, **data.payment_info.model_dump()))

        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to register owner {data.email}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create owner account") from e

    logger.info(f"✅ Space owner registered: user={user.id} owner={owner.id}")

    try:
        business_name = data.business_info.business_name if data.business_info else None
        await send_owner_signup_email(user.email, user.first_name, business_name)
    except Exception as e:
        logger.warning(f"⚠️ Owner signup email failed for {user.email}: {e}")

    await issue_email_otp(db, user)

    token = create_jwt_token(build_token_claims(user))
    set_auth_cookie(response, token)
    return {"success": True, "message": "Owner account created successfully", "user": serialize_user(user)}


# ============================================================================
# EMAIL VERIFICATION
# ============================================================================

# Rate limiters, counted per client IP
rate_limit_send_otp = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="send_otp")
rate_limit_verify_otp = create_rate_limiter(limit=10, window_seconds=600, key_prefix="verify_otp")
rate_limit_signin = create_rate_limiter(limit=10, window_seconds=300, key_prefix="signin")
rate_limit_password_reset = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="password_reset")


@router.post("/send-otp")
async def send_otp(
    data: SendOtpRequest, db: Session = Depends(get_db), _: None = Depends(rate_limit_send_otp)
):
    email = data.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.is_email_verified:
        raise HTTPException(status_code=400, detail="Email is already verified")

    await issue_email_otp(db, user)
    return {"success": True, "message": "Verification code sent"}


@router.post("/verify-otp")
async def verify_otp(
    data: VerifyOtpRequest, db: Session = Depends(get_db), _: None = Depends(rate_limit_verify_otp)
):
    email = data.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if not user.email_otp:
        raise HTTPException(status_code=400, detail="No OTP request found. Please request a new code.")
    if not user.email_otp_expiry or datetime.utcnow() > user.email_otp_expiry:
        raise HTTPException(status_code=400, detail="OTP has expired")

    if not constant_time_compare(user.email_otp, data.otp.strip()):
        user.email_otp_attempts = (user.email_otp_attempts or 0) + 1
        db.commit()
        logger.warning(f"⚠️ Wrong OTP for user {user.id} (attempt {user.email_otp_attempts})")
        if user.email_otp_attempts >= MAX_OTP_ATTEMPTS:
            clear_email_otp(db, user)
            raise HTTPException(status_code=400, detail="Too many attempts. Please request a new code.")
        raise HTTPException(status_code=400, detail="Invalid OTP")

    user.is_email_verified = True
    clear_email_otp(db, user)

    logger.info(f"✅ Email verified for user {user.id}")
    return {"success": True, "message": "Email verified successfully"}


# ============================================================================
# SESSION
# ============================================================================


@router.post("/signin")
async def signin(
    data: SignInRequest,
    response: Response,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_signin),
):
    email = data.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    if not user or not verify_password(data.password, user.password_hash):
        logger.warning(f"⚠️ Failed sign-in attempt for {email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account is deactivated")
    if not user.is_email_verified:
        raise HTTPException(status_code=401, detail="Please verify your email before signing in")

    if data.professional_role:
        if not is_valid_professional_role(data.professional_role):
            raise HTTPException(status_code=400, detail="Unknown professional role")
        if data.professional_role != user.professional_role:
            user.professional_role = data.professional_role
            db.commit()
            db.refresh(user)
            logger.info(f"🔄 Professional role updated for user {user.id}: {user.professional_role}")

    token = create_jwt_token(build_token_claims(user))
    set_auth_cookie(response, token)
    logger.info(f"✅ User signed in: {user.id}")
    return {"success": True, "message": "Signed in successfully", "user": serialize_user(user)}


@router.post("/signout")
async def signout(response: Response):
    response.delete_cookie(key=AUTH_COOKIE_NAME, path="/")
    return {"success": True, "message": "Signed out successfully"}


@router.get("/me")
async def me(current_user: User = Depends(get_current_user)):
    return {"success": True, "user": serialize_user(current_user)}


# ============================================================================
# PASSWORD RESET
# ============================================================================


@router.post("/forgot-password")
async def forgot_password(
    data: ForgotPasswordRequest, db: Session = Depends(get_db), _: None = Depends(rate_limit_password_reset)
):
    """Always succeeds so the endpoint does not reveal which emails have accounts"""
    email = data.email.strip().lower()
    user = db.query(User).filter(User.email == email, User.is_active.is_(True)).first()
    if user:
        token = generate_password_reset_token(user.email)
        try:
            await send_password_reset_email(user.email, token)
        except Exception as e:
            logger.warning(f"⚠️ Password reset email failed for {user.email}: {e}")
    return {"success": True, "message": "If an account exists, a reset link has been sent"}


@router.get("/validate-reset-token")
async def validate_reset_token(token: str = Query(...), db: Session = Depends(get_db)):
    email = verify_password_reset_token(token)
    if not email or not db.query(User).filter(User.email == email).first():
        return {"valid": False}
    return {"valid": True, "email": email}


@router.post("/reset-password")
async def reset_password(
    data: ResetPasswordRequest, db: Session = Depends(get_db), _: None = Depends(rate_limit_password_reset)
):
    email = verify_password_reset_token(data.token)
    if not email:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    check_password_length(data.password)
    user.password_hash = hash_password(data.password)
    db.commit()

    logger.info(f"🔑 Password reset for user {user.id}")
    return {"success": True, "message": "Password has been reset"}
