"""
OTP generation.
Codes are drawn from the secrets module; never from random.
"""
import secrets
from datetime import datetime, timedelta

OTP_LENGTH = 6
OTP_EXPIRY_MINUTES = 5


def generate_otp() -> str:
    """Six independent uniform decimal digits, fixed width."""
    return ''.join(secrets.choice('0123456789') for _ in range(OTP_LENGTH))


def otp_expires_at(now: datetime, minutes: int = OTP_EXPIRY_MINUTES) -> datetime:
    """Return expiry datetime for an OTP issued at `now`."""
    return now + timedelta(minutes=minutes)
