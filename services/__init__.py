"""
Authentication services: identity store, OTP authority and flow orchestration
"""
