"""
Identity records: lookup and mutation by email or username.

Lookups are exact, case-sensitive matches on the stored value.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import User
from services.errors import DuplicateIdentity, IdentityNotFound
from utils.db_helper import atomic

logger = logging.getLogger(__name__)


class UserStore:

    def find_by_email(self, email):
        return db.session.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()

    def find_by_username(self, username):
        return db.session.execute(
            select(User).where(User.username == username)
        ).scalar_one_or_none()

    def exists_by_email(self, email):
        return db.session.execute(
            select(User.id).where(User.email == email).limit(1)
        ).first() is not None

    def exists_by_username(self, username):
        return db.session.execute(
            select(User.id).where(User.username == username).limit(1)
        ).first() is not None

    def create_user(self, username, email, password_hash):
        """
        Insert a new unverified identity.
        A concurrent registration that slips past the existence checks hits the
        unique constraints and surfaces here as DuplicateIdentity.
        """
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            email_verified=False,
            enabled=True,
        )
        try:
            with atomic() as session:
                session.add(user)
        except IntegrityError:
            logger.info("Duplicate identity rejected at insert: username=%s", username)
            raise DuplicateIdentity("Username or email already registered")
        logger.info("User created successfully with email: %s", email)
        return user

    def mark_email_verified(self, email):
        self._update_by_email(email, email_verified=True)
        logger.info("Email verified for user: %s", email)

    def update_password_hash(self, email, password_hash):
        self._update_by_email(email, password_hash=password_hash)
        logger.info("Password updated for user: %s", email)

    def _update_by_email(self, email, **values):
        with atomic() as session:
            result = session.execute(
                update(User).where(User.email == email).values(**values)
            )
            if result.rowcount == 0:
                raise IdentityNotFound()
