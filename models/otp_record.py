"""
Issued one-time passcodes.
Rows are owned by services.otp_service.OtpAuthority; nothing else reads or writes them.
"""
import enum

from models import db
from utils.time_utils import utcnow


class OtpType(str, enum.Enum):
    LOGIN = "LOGIN"
    REGISTRATION = "REGISTRATION"


class OtpRecord(db.Model):
    """
    One issued challenge. At most one row per email is live
    (used is False and expiry_time is in the future); issuance marks
    every older unused row as used in the same transaction.
    """
    __tablename__ = 'otp_records'
    __table_args__ = (
        db.Index('ix_otp_records_email_used', 'email', 'used'),
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), nullable=False)
    otp = db.Column(db.String(6), nullable=False)
    expiry_time = db.Column(db.DateTime, nullable=False, index=True)
    used = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    type = db.Column(db.Enum(OtpType, name='otp_type'), nullable=False, default=OtpType.LOGIN)

    def __repr__(self):
        return f'<OtpRecord {self.email} {self.type.value} used={self.used}>'
