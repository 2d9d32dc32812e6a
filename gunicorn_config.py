"""
Gunicorn config: bind to 0.0.0.0 and PORT for Railway/Render.
Threaded workers; each request runs on its own thread.
"""
import os

bind = "0.0.0.0:{}".format(os.environ.get("PORT", "8080"))
worker_class = "gthread"
workers = int(os.environ.get("WEB_CONCURRENCY", "1"))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
timeout = 120
