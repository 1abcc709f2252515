"""Shared validation utilities"""

import re
from typing import Optional

IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
GST_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
PINCODE_PATTERN = re.compile(r"^[1-9][0-9]{5}$")
TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")
    return email


def validate_indian_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize an Indian mobile number to +91XXXXXXXXXX.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    # Handle +91 / 0 prefixes
    if digits.startswith("91") and len(digits) == 12:
        digits = digits[2:]
    elif digits.startswith("0") and len(digits) == 11:
        digits = digits[1:]

    if len(digits) != 10 or digits[0] not in "6789":
        raise ValueError("Phone number must be a valid 10 digit Indian mobile number")

    return f"+91{digits}"


def validate_pincode(pincode: Optional[str]) -> Optional[str]:
    if not pincode:
        return pincode
    pincode = pincode.strip()
    if not PINCODE_PATTERN.match(pincode):
        raise ValueError("Pincode must be 6 digits")
    return pincode


def validate_ifsc(code: Optional[str]) -> Optional[str]:
    if not code:
        return code
    code = code.strip().upper()
    if not IFSC_PATTERN.match(code):
        raise ValueError("Invalid IFSC code")
    return code


def validate_pan(pan: Optional[str]) -> Optional[str]:
    if not pan:
        return pan
    pan = pan.strip().upper()
    if not PAN_PATTERN.match(pan):
        raise ValueError("Invalid PAN number")
    return pan


def validate_gst(gst: Optional[str]) -> Optional[str]:
    if not gst:
        return gst
    gst = gst.strip().upper()
    if not GST_PATTERN.match(gst):
        raise ValueError("Invalid GST number")
    return gst


def validate_time(value: str) -> str:
    """HH:MM, 24-hour clock"""
    value = value.strip()
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM format")
    return value
