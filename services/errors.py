"""
Error kinds surfaced by the auth flows, and the response envelope they share.

Every caller-visible outcome is {"success": bool, "message": str, "data": ...}.
"""
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class AuthResult:
    """Successful outcome of an auth flow step."""
    message: str
    data: Optional[Any] = None
    success: bool = True

    def to_dict(self):
        return {"success": self.success, "message": self.message, "data": self.data}


class AuthError(Exception):
    """Base class for caller-visible auth failures."""
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message=None, data=None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    def to_dict(self):
        return {"success": False, "message": self.message, "data": self.data}


class ValidationFailed(AuthError):
    """Malformed input; data maps field name to message."""
    default_message = "Validation failed"

    def __init__(self, errors):
        super().__init__(self.default_message, data=dict(errors))


class DuplicateIdentity(AuthError):
    default_message = "Account already exists"


class InvalidCredentials(AuthError):
    """Unknown email and wrong password are deliberately the same error."""
    default_message = "Invalid email or password"


class EmailNotVerified(AuthError):
    default_message = "Email not verified. Please verify your email first."


class InvalidOrExpiredCode(AuthError):
    """Wrong, expired and already-used codes are deliberately the same error."""
    default_message = "Invalid or expired OTP"


class IdentityNotFound(AuthError):
    default_message = "Email not found"


class StoreUnavailable(AuthError):
    status_code = 500
    default_message = "Something went wrong. Please try again later."


class NotificationFailed(Exception):
    """Raised by notifiers; absorbed by the dispatcher and never shown to callers."""
