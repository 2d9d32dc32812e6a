"""
Input validation helpers. All checks run before any state is touched.
"""
import re

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
OTP_RE = re.compile(r"^\d{6}$")

USERNAME_MAX_LENGTH = 80
EMAIL_MAX_LENGTH = 120
PASSWORD_MIN_LENGTH = 6


def validate_email(email) -> bool:
    """Return True for a syntactically valid email address."""
    if not email or not isinstance(email, str):
        return False
    if len(email) > EMAIL_MAX_LENGTH:
        return False
    return EMAIL_RE.match(email) is not None


def validate_password(password):
    """Return (is_valid, error_message)."""
    if not password or not isinstance(password, str):
        return False, 'Password is required'
    if len(password) < PASSWORD_MIN_LENGTH:
        return False, f'Password must be at least {PASSWORD_MIN_LENGTH} characters'
    return True, None


def validate_username(username):
    """Return (is_valid, error_message)."""
    if not username or not isinstance(username, str) or not username.strip():
        return False, 'Username is required'
    if len(username) > USERNAME_MAX_LENGTH:
        return False, f'Username must be at most {USERNAME_MAX_LENGTH} characters'
    return True, None


def is_well_formed_otp(otp) -> bool:
    """Six ASCII digits."""
    return isinstance(otp, str) and OTP_RE.match(otp) is not None
