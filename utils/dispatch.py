"""
Fire-and-forget notification dispatch.

Tasks run on a small thread pool inside their own app context and outlive the
request that queued them. Failures are logged here and never reach the caller.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(self, app=None, async_mode=True, max_workers=4):
        self.async_mode = async_mode
        self.max_workers = max_workers
        self._app = None
        self._executor = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self._app = app
        self.async_mode = app.config.get('NOTIFY_ASYNC', self.async_mode)
        self.max_workers = app.config.get('NOTIFY_MAX_WORKERS', self.max_workers)
        if self.async_mode:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix='otp-notify',
            )
        app.extensions['notification_dispatcher'] = self

    def submit(self, fn, *args, **kwargs):
        """
        Queue fn(*args, **kwargs). Returns the Future in async mode, None inline.
        Never raises on behalf of fn.
        """
        if self._executor is None:
            self._run(fn, args, kwargs)
            return None
        try:
            return self._executor.submit(self._run, fn, args, kwargs)
        except RuntimeError:
            # Executor already shut down (process teardown); deliver inline.
            logger.warning("[notify] executor unavailable, running %s inline",
                           getattr(fn, '__qualname__', fn))
            self._run(fn, args, kwargs)
            return None

    def _run(self, fn, args, kwargs):
        app = self._app
        try:
            if app is None:
                fn(*args, **kwargs)
                return
            with app.app_context():
                fn(*args, **kwargs)
        except Exception:
            logger.exception("[notify] dispatch failed: %s", getattr(fn, '__qualname__', fn))

    def shutdown(self, wait=True):
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
