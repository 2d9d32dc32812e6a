"""
Delete expired OTP records on demand (the app also does this hourly).
Run: python sweep_expired_otps.py
"""


def main():
    from app import create_app
    from config import Config

    class _OneShotConfig(Config):
        OTP_CLEANUP_ENABLED = False
        NOTIFY_ASYNC = False

    app = create_app(_OneShotConfig)
    with app.app_context():
        try:
            deleted = app.extensions['otp_authority'].sweep_expired()
            print(f"[SUCCESS] Removed {deleted} expired OTP record(s).")
        except Exception as e:
            print("[ERROR]", e)


if __name__ == '__main__':
    main()
