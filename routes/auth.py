"""
Authentication routes: register, email verification, OTP login, resend, password reset.
JSON in, {"success", "message", "data"} out.
"""
from flask import Blueprint, jsonify, request, current_app

from services.errors import AuthError

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')

GENERIC_ERROR = "Something went wrong. Please try again later."


def _auth_service():
    return current_app.extensions['auth_service']


def _payload():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else request.form


def _respond(action, *args):
    """Run one flow step and map its outcome onto the response envelope."""
    try:
        result = action(*args)
        return jsonify(result.to_dict())
    except AuthError as e:
        if e.status_code >= 500:
            current_app.logger.error(f"{action.__name__} failed: {e.message}")
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Unexpected error in {action.__name__}: {str(e)}", exc_info=True)
        return jsonify({"success": False, "message": GENERIC_ERROR, "data": None}), 500


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an unverified account and email a registration code."""
    data = _payload()
    return _respond(
        _auth_service().register,
        data.get('username'),
        data.get('email'),
        data.get('password'),
    )


@auth_bp.route('/verify-registration', methods=['POST'])
def verify_registration():
    data = _payload()
    return _respond(_auth_service().verify_registration, data.get('email'), data.get('otp'))


@auth_bp.route('/login', methods=['POST'])
def login():
    """Password check; on success a login code is emailed."""
    data = _payload()
    return _respond(_auth_service().login, data.get('email'), data.get('password'))


@auth_bp.route('/verify-login', methods=['POST'])
def verify_login():
    """Exchange a login code for a session token."""
    data = _payload()
    return _respond(_auth_service().verify_login, data.get('email'), data.get('otp'))


@auth_bp.route('/resend-otp', methods=['POST'])
def resend_otp():
    data = _payload()
    return _respond(_auth_service().resend_otp, data.get('email'), data.get('type'))


@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    data = _payload()
    return _respond(_auth_service().forgot_password, data.get('email'))


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    data = _payload()
    return _respond(
        _auth_service().reset_password,
        data.get('email'),
        data.get('otp'),
        data.get('newPassword'),
    )
