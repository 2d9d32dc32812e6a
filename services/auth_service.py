"""
Authentication flows: register -> verify email, login -> verify OTP,
resend OTP, forgot password -> reset.

Each public method validates its input before touching state, returns an
AuthResult on success and raises an AuthError subclass otherwise. Store
failures are converted to StoreUnavailable here, after rollback and logging.
"""
import logging
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.otp_record import OtpType
from services.errors import (
    AuthResult,
    DuplicateIdentity,
    EmailNotVerified,
    IdentityNotFound,
    InvalidCredentials,
    InvalidOrExpiredCode,
    StoreUnavailable,
    ValidationFailed,
)
from utils.auth_utils import hash_password, verify_password
from utils.validators import (
    is_well_formed_otp,
    validate_email,
    validate_password,
    validate_username,
)

logger = logging.getLogger(__name__)

REGISTER_SUCCESS_MSG = "Registration successful. Please check your email for OTP verification."
VERIFY_REGISTRATION_SUCCESS_MSG = "Email verified successfully. You can now login."
LOGIN_OTP_SENT_MSG = "OTP sent to your email. Please verify to complete login."
LOGIN_SUCCESS_MSG = "Login successful"
RESEND_SUCCESS_MSG = "OTP resent successfully"
FORGOT_PASSWORD_SUCCESS_MSG = "Password reset OTP sent to your email"
RESET_PASSWORD_SUCCESS_MSG = "Password reset successfully"


def _store_boundary(fn):
    """Map any SQLAlchemy failure inside a flow to StoreUnavailable."""
    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Store failure during %s: %s", fn.__name__, e, exc_info=True)
            raise StoreUnavailable() from e
    return wrapper


def _require(errors):
    if errors:
        raise ValidationFailed(errors)


def _check_email(errors, email, field='email'):
    if not email:
        errors[field] = 'Email is required'
    elif not validate_email(email):
        errors[field] = 'Invalid email format'


def _check_otp_present(errors, otp):
    if otp is None or otp == '':
        errors['otp'] = 'OTP is required'
    elif not isinstance(otp, str):
        errors['otp'] = 'OTP must be a string of 6 digits'


def _parse_otp_type(value):
    if value is None or value == '':
        return OtpType.LOGIN
    try:
        return OtpType(str(value).upper())
    except ValueError:
        raise ValidationFailed({'type': 'Type must be LOGIN or REGISTRATION'})


class AuthService:
    def __init__(self, users, otp, tokens):
        self.users = users
        self.otp = otp
        self.tokens = tokens

    # ---------- Registration ----------

    @_store_boundary
    def register(self, username, email, password):
        errors = {}
        ok, msg = validate_username(username)
        if not ok:
            errors['username'] = msg
        _check_email(errors, email)
        ok, msg = validate_password(password)
        if not ok:
            errors['password'] = msg
        _require(errors)

        # Not atomic against a concurrent duplicate; the unique constraints catch that case.
        if self.users.exists_by_email(email):
            raise DuplicateIdentity("Email already registered")
        if self.users.exists_by_username(username):
            raise DuplicateIdentity("Username already taken")

        self.users.create_user(username, email, hash_password(password))
        self.otp.issue(email, OtpType.REGISTRATION)
        return AuthResult(REGISTER_SUCCESS_MSG)

    @_store_boundary
    def verify_registration(self, email, otp):
        self._consume_code(email, otp)
        self.users.mark_email_verified(email)
        return AuthResult(VERIFY_REGISTRATION_SUCCESS_MSG)

    # ---------- Login ----------

    @_store_boundary
    def login(self, email, password):
        errors = {}
        _check_email(errors, email)
        if not password or not isinstance(password, str):
            errors['password'] = 'Password is required'
        _require(errors)

        user = self.users.find_by_email(email)
        if not verify_password(user.password_hash if user else None, password):
            logger.info("Login rejected for email: %s", email)
            raise InvalidCredentials()
        if not user.email_verified:
            raise EmailNotVerified()

        self.otp.issue(email, OtpType.LOGIN)
        return AuthResult(LOGIN_OTP_SENT_MSG)

    @_store_boundary
    def verify_login(self, email, otp):
        self._consume_code(email, otp)
        user = self.users.find_by_email(email)
        if user is None:
            raise IdentityNotFound()
        token = self.tokens.issue(user.username)
        logger.info("Login completed for user: %s", user.username)
        return AuthResult(LOGIN_SUCCESS_MSG, data={
            'token': token,
            'username': user.username,
            'email': user.email,
        })

    @_store_boundary
    def resend_otp(self, email, otp_type=None):
        errors = {}
        _check_email(errors, email)
        _require(errors)
        otp_type = _parse_otp_type(otp_type)

        if not self.users.exists_by_email(email):
            raise IdentityNotFound()
        self.otp.issue(email, otp_type)
        return AuthResult(RESEND_SUCCESS_MSG)

    # ---------- Password reset ----------

    @_store_boundary
    def forgot_password(self, email):
        errors = {}
        _check_email(errors, email)
        _require(errors)

        if not self.users.exists_by_email(email):
            raise IdentityNotFound()
        # Reset codes travel on the LOGIN channel; there is no separate reset type.
        self.otp.issue(email, OtpType.LOGIN)
        return AuthResult(FORGOT_PASSWORD_SUCCESS_MSG)

    @_store_boundary
    def reset_password(self, email, otp, new_password):
        errors = {}
        _check_email(errors, email)
        _check_otp_present(errors, otp)
        ok, msg = validate_password(new_password)
        if not ok:
            errors['newPassword'] = msg
        _require(errors)

        self._consume_code(email, otp, validated=True)
        self.users.update_password_hash(email, hash_password(new_password))
        return AuthResult(RESET_PASSWORD_SUCCESS_MSG)

    # ---------- Helpers ----------

    def _consume_code(self, email, otp, validated=False):
        if not validated:
            errors = {}
            _check_email(errors, email)
            _check_otp_present(errors, otp)
            _require(errors)
        # Malformed codes can never match a stored row; skip the store entirely.
        if not is_well_formed_otp(otp) or not self.otp.verify(email, otp):
            raise InvalidOrExpiredCode()
