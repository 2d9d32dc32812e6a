"""
Routes package for the OTP auth service
"""
from routes.auth import auth_bp

__all__ = [
    'auth_bp',
]
