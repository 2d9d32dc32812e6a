"""
OTP authority: the only component that issues, consumes and sweeps one-time passcodes.

Invariants kept here:
  * at most one live challenge per email (issuance retires all unused ones first),
  * a code verifies successfully at most once,
  * nothing past expiry_time verifies, swept or not.
"""
import hashlib
import logging

from sqlalchemy import delete, select, text, update

from models import db
from models.otp_record import OtpRecord, OtpType
from utils.db_helper import atomic
from utils.otp_helper import OTP_EXPIRY_MINUTES, generate_otp, otp_expires_at
from utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def _email_lock_key(email):
    """Stable signed 64-bit key for pg_advisory_xact_lock."""
    digest = hashlib.sha256(email.encode('utf-8')).digest()
    return int.from_bytes(digest[:8], 'big', signed=True)


class OtpAuthority:
    def __init__(self, notifier, dispatcher, expiry_minutes=OTP_EXPIRY_MINUTES, clock=utcnow):
        self.notifier = notifier
        self.dispatcher = dispatcher
        self.expiry_minutes = expiry_minutes
        self.clock = clock

    def issue(self, email, otp_type=OtpType.LOGIN):
        """
        Retire every unused code for `email`, persist a fresh one and queue its delivery.

        Retirement and insert share one transaction, so the new row is never visible
        alongside an older live one. Delivery is queued only after commit and its
        failure does not affect the result.
        """
        otp_type = OtpType(otp_type)
        with atomic() as session:
            self._lock_email(session, email)
            session.execute(
                update(OtpRecord)
                .where(OtpRecord.email == email, OtpRecord.used.is_(False))
                .values(used=True)
                .execution_options(synchronize_session=False)
            )
            now = self.clock()
            code = generate_otp()
            record = OtpRecord(
                email=email,
                otp=code,
                expiry_time=otp_expires_at(now, self.expiry_minutes),
                used=False,
                created_at=now,
                type=otp_type,
            )
            session.add(record)

        self.dispatcher.submit(self.notifier.send_code, email, code, otp_type.value.lower())
        logger.info("OTP generated and queued for email: %s type=%s", email, otp_type.value)
        return record

    def verify(self, email, presented_code):
        """
        Consume the live code matching (email, presented_code).

        Returns True for exactly one caller per issued code. Wrong, expired and
        already-used codes all return False. Lookup and consumption run in one
        transaction; the conditional UPDATE decides the winner when callers race.
        """
        if not presented_code:
            return False
        with atomic() as session:
            now = self.clock()
            record_id = session.execute(
                select(OtpRecord.id)
                .where(
                    OtpRecord.email == email,
                    OtpRecord.otp == presented_code,
                    OtpRecord.used.is_(False),
                    OtpRecord.expiry_time > now,
                )
                .order_by(OtpRecord.created_at.desc())
                .limit(1)
                .with_for_update()
            ).scalar_one_or_none()
            if record_id is None:
                logger.warning("OTP verification failed for email: %s", email)
                return False

            result = session.execute(
                update(OtpRecord)
                .where(OtpRecord.id == record_id, OtpRecord.used.is_(False))
                .values(used=True)
                .execution_options(synchronize_session=False)
            )
            consumed = result.rowcount == 1

        if consumed:
            logger.info("OTP verified successfully for email: %s", email)
        else:
            logger.warning("OTP already consumed by a concurrent request for email: %s", email)
        return consumed

    def has_valid_otp(self, email):
        now = self.clock()
        row = db.session.execute(
            select(OtpRecord.id)
            .where(
                OtpRecord.email == email,
                OtpRecord.used.is_(False),
                OtpRecord.expiry_time > now,
            )
            .limit(1)
        ).first()
        return row is not None

    def sweep_expired(self, now=None):
        """Delete rows whose expiry_time is before `now`. Returns the number deleted."""
        now = now or self.clock()
        with atomic() as session:
            result = session.execute(
                delete(OtpRecord)
                .where(OtpRecord.expiry_time < now)
                .execution_options(synchronize_session=False)
            )
            deleted = result.rowcount or 0
        logger.debug("Cleaned up %d expired OTPs", deleted)
        return deleted

    @staticmethod
    def _lock_email(session, email):
        # Serialises concurrent issuance for one email on PostgreSQL; SQLite already
        # serialises writers and other backends rely on the retire-then-insert order.
        if session.get_bind().dialect.name == 'postgresql':
            session.execute(
                text("SELECT pg_advisory_xact_lock(:key)"),
                {"key": _email_lock_key(email)},
            )
