"""
Security Utilities
Password hashing, JWT session tokens, signed reset tokens and input sanitization
"""

import logging
import secrets
import string
import time
from datetime import datetime, timedelta
from typing import Any, Optional

# Input sanitization
import bleach

# Token generation and validation
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from jose import JWTError
from jose import jwt as jose_jwt

# Password hashing
from passlib.context import CryptContext

from .config import JWT_EXPIRY_DAYS, SECRET_KEY

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
PASSWORD_RESET_SALT = "password-reset"
PASSWORD_RESET_MAX_AGE = 3600

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against bcrypt hash"""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# TOKEN GENERATION & VALIDATION
# ============================================================================


def create_jwt_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a session JWT

    Args:
        data: Claims to encode in the token
        expires_delta: Token lifetime (default JWT_EXPIRY_DAYS)
    """
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(days=JWT_EXPIRY_DAYS))
    to_encode.update({"exp": expire})
    return jose_jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_jwt_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def build_token_claims(user) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "roles": user.role,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "is_active": user.is_active,
    }


def generate_password_reset_token(email: str) -> str:
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    return serializer.dumps({"email": email}, salt=PASSWORD_RESET_SALT)


def verify_password_reset_token(token: str, max_age: int = PASSWORD_RESET_MAX_AGE) -> Optional[str]:
    """Return the email encoded in a reset token, or None if invalid or expired"""
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    try:
        data = serializer.loads(token, salt=PASSWORD_RESET_SALT, max_age=max_age)
        return data.get("email")
    except SignatureExpired:
        logger.warning("Password reset token expired")
        return None
    except BadSignature:
        logger.warning("Invalid password reset token signature")
        return None


def generate_otp() -> str:
    """6-digit numeric code for email verification"""
    return f"{secrets.randbelow(900000) + 100000}"


def constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time to prevent timing attacks"""
    return secrets.compare_digest(a.encode(), b.encode())


def random_code(length: int) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_redemption_code() -> str:
    """CLB-<epoch millis>-<6 uppercase alphanumerics>"""
    return f"CLB-{int(time.time() * 1000)}-{random_code(6)}"


def generate_ticket_number() -> str:
    return f"TKT-{int(time.time() * 1000)}-{random_code(4)}"


# ============================================================================
# INPUT SANITIZATION
# ============================================================================


def sanitize_text(text: Optional[str]) -> Optional[str]:
    """Strip all HTML from user supplied free text"""
    if text is None:
        return None
    return bleach.clean(text, tags=set(), attributes={}, strip=True).strip()


def mask_sensitive_data(data: Optional[str], visible_chars: int = 4) -> Optional[str]:
    """
    Mask sensitive data for display

    Args:
        data: Sensitive data to mask
        visible_chars: Number of characters to show at the end
    """
    if not data:
        return data
    if len(data) <= visible_chars:
        return "*" * len(data)

    return "*" * (len(data) - visible_chars) + data[-visible_chars:]
