"""
Payment Signature Verification

Razorpay signs checkout results as HMAC-SHA256("{order_id}|{payment_id}") with the
merchant key secret. Comparison is constant-time.
"""

import hashlib
import hmac
import logging
from typing import Optional

from fastapi import HTTPException

from .config import ENVIRONMENT, RAZORPAY_KEY_SECRET

logger = logging.getLogger(__name__)

MOCK_ORDER_PREFIX = "mock_order_"


class PaymentSignatureError(Exception):
    """Raised when a payment signature does not match"""

    pass


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def compute_hmac_sha256(secret: str, payload: bytes) -> str:
    """Compute HMAC-SHA256 signature of payload"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def compute_payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    return compute_hmac_sha256(secret, f"{order_id}|{payment_id}".encode("utf-8"))


def is_mock_order(order_id: str) -> bool:
    return ENVIRONMENT == "development" and order_id.startswith(MOCK_ORDER_PREFIX)


def verify_payment_signature(
    order_id: str,
    payment_id: str,
    signature: str,
    secret: Optional[str] = None,
) -> None:
    """
    Verify a checkout signature.

    Raises:
        PaymentSignatureError: If the gateway is not configured or the signature differs
    """
    secret = secret or RAZORPAY_KEY_SECRET
    if not secret:
        logger.error("❌ RAZORPAY_KEY_SECRET not configured - cannot verify payment")
        raise PaymentSignatureError("Payment gateway secret not configured")

    expected = compute_payment_signature(order_id, payment_id, secret)
    if not constant_time_compare(expected, signature):
        logger.warning(f"⚠️ Payment signature mismatch for order {order_id}")
        raise PaymentSignatureError("Invalid payment signature")

    logger.info(f"✅ Payment signature verified for order {order_id}")


def require_valid_payment(order_id: str, payment_id: str, signature: str) -> None:
    """FastAPI-facing wrapper: mock orders pass in development, everything else is verified"""
    if is_mock_order(order_id):
        logger.info(f"🔧 Development mode: accepting mock order {order_id}")
        return
    try:
        verify_payment_signature(order_id, payment_id, signature)
    except PaymentSignatureError as e:
        raise HTTPException(status_code=400, detail="Payment verification failed") from e
