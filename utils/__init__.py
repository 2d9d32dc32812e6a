"""
Utility helpers for the OTP auth service
"""
