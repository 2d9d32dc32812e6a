"""
Transaction scoping for multi-step store mutations.
"""
from contextlib import contextmanager

from models import db


@contextmanager
def atomic():
    """
    Run a block as one unit of work on the request-scoped session.
    Commits when the block exits normally; rolls back and re-raises on any exception.

    Usage:
        with atomic() as session:
            session.add(row)
    """
    session = db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
