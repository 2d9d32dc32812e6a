"""
Email delivery for one-time passcodes
"""
from flask_mail import Mail, Message
from flask import current_app

from services.errors import NotificationFailed

mail = Mail()

PURPOSE_LABELS = {
    'login': 'sign-in',
    'registration': 'email verification',
}


def send_email(subject, recipients, body, html=None):
    """
    Send an email

    Args:
        subject: Email subject
        recipients: List of recipient email addresses
        body: Plain text body
        html: HTML body (optional)
    """
    msg = Message(
        subject=subject,
        recipients=recipients,
        body=body,
        html=html
    )
    mail.send(msg)


def _check_mail_configured():
    if 'mail' not in current_app.extensions:
        raise NotificationFailed("Mail extension not initialized. Check app configuration.")
    if current_app.config.get('MAIL_SUPPRESS_SEND'):
        return
    if not current_app.config.get('MAIL_SERVER'):
        raise NotificationFailed("MAIL_SERVER not configured. Please set MAIL_SERVER environment variable.")


def send_otp_email(email: str, otp: str, purpose: str) -> None:
    """
    Send an OTP email with plain and HTML bodies.
    Raises NotificationFailed when mail is not configured or SMTP rejects the message.
    """
    _check_mail_configured()

    label = PURPOSE_LABELS.get(purpose, purpose)
    minutes = current_app.config.get('OTP_EXPIRY_MINUTES', 5)
    subject = "Your OTP Code"
    body = (
        f"Your OTP code for {label} is: {otp}\n\n"
        f"This code is valid for {minutes} minutes only. Do not share this code.\n\n"
        "If you didn't request this code, please ignore this email."
    )
    try:
        send_email(subject, [email], body, html=_otp_email_html(otp, label, minutes))
    except Exception as e:
        raise NotificationFailed(f"SMTP error sending OTP email: {e}") from e


def _otp_email_html(otp: str, label: str, minutes: int) -> str:
    """Clean HTML template for OTP email."""
    return f"""
    <!DOCTYPE html>
    <html>
    <head><meta charset="utf-8"><title>Your OTP Code</title></head>
    <body style="font-family: system-ui, sans-serif; max-width: 480px; margin: 0 auto; padding: 24px;">
        <h2 style="color: #1a1a2e;">Your OTP Code</h2>
        <p>Use the code below to complete {label}:</p>
        <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px; color: #16213e;">{otp}</p>
        <p style="color: #666;">This code expires in {minutes} minutes. Do not share it with anyone.</p>
        <hr style="border: none; border-top: 1px solid #eee; margin: 24px 0;">
        <p style="font-size: 12px; color: #999;">If you did not request this, you can ignore this email.</p>
    </body>
    </html>
    """


class MailNotifier:
    """Notifier that delivers codes by email through Flask-Mail."""

    def send_code(self, to_address, code, purpose):
        send_otp_email(to_address, code, purpose)
