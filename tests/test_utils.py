"""
Tests for hashing, session tokens, dispatch, mail and the cleanup scheduler.
"""
import logging
import threading
from datetime import timedelta

import jwt
import pytest

from services.errors import NotificationFailed
from utils.auth_utils import hash_password, verify_password
from utils.dispatch import NotificationDispatcher
from utils.session_token import TokenIssuer

SECRET = "unit-test-secret-that-is-long-enough-for-hs256"


class TestPasswordHashing:

    def test_hash_is_salted_scrypt(self):
        first = hash_password("p1pass")
        second = hash_password("p1pass")

        assert first.startswith("scrypt:32768:8:1$")
        assert first != second

    def test_verify(self):
        hashed = hash_password("p1pass")

        assert verify_password(hashed, "p1pass") is True
        assert verify_password(hashed, "p2pass") is False

    def test_missing_hash_never_verifies(self):
        assert verify_password(None, "p1pass") is False
        assert verify_password("", "p1pass") is False


class TestTokenIssuer:

    def test_subject_is_username(self):
        issuer = TokenIssuer(SECRET)

        token = issuer.issue("al")

        assert issuer.subject(token) == "al"
        assert "exp" not in issuer.decode(token)

    def test_ttl_adds_expiry(self):
        issuer = TokenIssuer(SECRET, ttl_minutes=30)

        claims = issuer.decode(issuer.issue("al"))

        assert claims["exp"] - claims["iat"] == int(timedelta(minutes=30).total_seconds())

    def test_foreign_signature_rejected(self):
        token = TokenIssuer(SECRET).issue("al")

        with pytest.raises(jwt.InvalidSignatureError):
            TokenIssuer(SECRET + "-other").decode(token)

    def test_expired_token_rejected(self):
        issuer = TokenIssuer(SECRET, ttl_minutes=1)
        token = jwt.encode({"sub": "al", "exp": 1}, SECRET, algorithm="HS256")

        with pytest.raises(jwt.ExpiredSignatureError):
            issuer.decode(token)

    def test_secret_required(self):
        with pytest.raises(ValueError):
            TokenIssuer("")


class TestNotificationDispatcher:

    def test_async_dispatch_runs_off_the_calling_thread(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "NOTIFY_ASYNC", True)
        dispatcher = NotificationDispatcher(app)

        done = threading.Event()
        seen = {}

        def task(value):
            from flask import current_app
            seen["thread"] = threading.current_thread()
            seen["app"] = current_app._get_current_object()
            seen["value"] = value
            done.set()

        future = dispatcher.submit(task, 42)

        assert done.wait(timeout=5)
        future.result(timeout=5)
        assert seen["thread"] is not threading.current_thread()
        assert seen["app"] is app
        assert seen["value"] == 42
        dispatcher.shutdown()

    def test_failures_are_logged_not_raised(self, app, caplog):
        dispatcher = app.extensions["notification_dispatcher"]

        def task():
            raise NotificationFailed("smtp down")

        with caplog.at_level(logging.ERROR, logger="utils.dispatch"):
            assert dispatcher.submit(task) is None

        assert "dispatch failed" in caplog.text

    def test_submit_after_shutdown_runs_inline(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "NOTIFY_ASYNC", True)
        dispatcher = NotificationDispatcher(app)
        dispatcher.shutdown()
        calls = []

        assert dispatcher.submit(calls.append, "late") is None
        assert calls == ["late"]

    def test_refused_submit_never_reaches_caller(self, app, monkeypatch, caplog):
        monkeypatch.setitem(app.config, "NOTIFY_ASYNC", True)
        dispatcher = NotificationDispatcher(app)
        executor = dispatcher._executor

        def refuse(*args, **kwargs):
            raise RuntimeError("cannot schedule new futures after interpreter shutdown")

        monkeypatch.setattr(executor, "submit", refuse)
        calls = []

        with caplog.at_level(logging.WARNING, logger="utils.dispatch"):
            assert dispatcher.submit(calls.append, "late") is None

        assert calls == ["late"]
        assert "running" in caplog.text
        executor.shutdown()


class TestMailNotifier:

    def test_code_is_emailed(self, app):
        from utils.mail import MailNotifier, mail

        with mail.record_messages() as outbox:
            MailNotifier().send_code("a@x.com", "123456", "login")

        assert len(outbox) == 1
        assert outbox[0].recipients == ["a@x.com"]
        assert "123456" in outbox[0].body

    def test_unconfigured_mail_raises_notification_failed(self, app, monkeypatch):
        from utils.mail import MailNotifier

        monkeypatch.setitem(app.config, "MAIL_SUPPRESS_SEND", False)
        monkeypatch.setitem(app.config, "MAIL_SERVER", None)

        with pytest.raises(NotificationFailed):
            MailNotifier().send_code("a@x.com", "123456", "login")


class TestCleanupScheduler:

    def test_sweep_job_registered_and_stopped(self, app):
        from utils.scheduler import SWEEP_JOB_ID, start_cleanup_scheduler, stop_cleanup_scheduler

        scheduler = start_cleanup_scheduler(app, app.extensions["otp_authority"])
        try:
            job = scheduler.get_job(SWEEP_JOB_ID)
            assert job is not None
            assert job.trigger.interval == timedelta(minutes=app.config["OTP_CLEANUP_INTERVAL_MINUTES"])
        finally:
            stop_cleanup_scheduler(scheduler)
        assert scheduler.running is False
