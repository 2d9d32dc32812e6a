"""
Background housekeeping: hourly removal of expired OTP rows.
Verification never depends on this job; expired rows already fail the time check.
"""
import atexit
import logging

from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = 'sweep-expired-otps'


def start_cleanup_scheduler(app, otp_authority):
    """Start a BackgroundScheduler running the sweep on a fixed interval. Returns it."""
    interval = app.config.get('OTP_CLEANUP_INTERVAL_MINUTES', 60)

    def _sweep():
        with app.app_context():
            try:
                deleted = otp_authority.sweep_expired()
                logger.info("Expired OTP sweep removed %d rows", deleted)
            except Exception:
                logger.exception("Expired OTP sweep failed")

    scheduler = BackgroundScheduler(daemon=True)
    scheduler.add_job(
        func=_sweep,
        trigger='interval',
        minutes=interval,
        id=SWEEP_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    atexit.register(stop_cleanup_scheduler, scheduler)
    app.extensions['otp_cleanup_scheduler'] = scheduler
    logger.info("OTP cleanup scheduled every %d minutes", interval)
    return scheduler


def stop_cleanup_scheduler(scheduler):
    if scheduler.running:
        scheduler.shutdown(wait=False)
