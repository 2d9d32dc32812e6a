"""
Application factory for the OTP auth service
"""
import atexit
import logging
import os

from flask import Flask, jsonify, request

from config import Config
from models import db
from services.auth_service import AuthService
from services.otp_service import OtpAuthority
from services.user_store import UserStore
from utils.dispatch import NotificationDispatcher
from utils.mail import MailNotifier, mail
from utils.session_token import TokenIssuer


def create_app(config_class=Config, notifier=None):
    """
    Build the app and wire the auth services explicitly.
    `notifier` replaces the email notifier (any object with send_code(to, code, purpose)).
    DB init runs inside app_context; non-fatal on failure.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    mail.init_app(app)

    dispatcher = NotificationDispatcher(app)
    atexit.register(dispatcher.shutdown, wait=False)

    otp_authority = OtpAuthority(
        notifier=notifier or MailNotifier(),
        dispatcher=dispatcher,
        expiry_minutes=app.config['OTP_EXPIRY_MINUTES'],
    )
    app.extensions['otp_authority'] = otp_authority
    app.extensions['auth_service'] = AuthService(
        users=UserStore(),
        otp=otp_authority,
        tokens=TokenIssuer.from_config(app.config),
    )

    @app.errorhandler(500)
    def handle_500_error(e):
        if request.path.startswith("/auth/"):
            return jsonify({"success": False, "message": "Internal server error. Please try again later.", "data": None}), 500
        return e

    # Create tables inside app context; do not crash if DB temporarily unavailable
    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            logging.getLogger(__name__).warning("Database init skipped (non-fatal): %s", e)

    from routes import auth_bp
    app.register_blueprint(auth_bp)

    if app.config.get('OTP_CLEANUP_ENABLED'):
        from utils.scheduler import start_cleanup_scheduler
        start_cleanup_scheduler(app, otp_authority)

    return app


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    create_app().run(
        host="0.0.0.0",
        port=port,
        debug=os.environ.get("FLASK_DEBUG", "false").lower() in ("true", "1"),
        threaded=True,
    )
