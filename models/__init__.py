"""
Models package for the OTP auth service
"""
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# Import all models here to ensure they're registered
from models.user import User
from models.otp_record import OtpRecord, OtpType

__all__ = [
    'db',
    'User',
    'OtpRecord',
    'OtpType',
]
