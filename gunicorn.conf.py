"""
Gunicorn configuration for the LifeClock API server.

    gunicorn -c gunicorn.conf.py

Log level comes from lifeclock settings (.env / environment).
Env vars that only the server reads:
  PORT     — TCP port to bind (default: 8000)
  WORKERS  — number of worker processes (default: 1)
"""
import os

from lifeclock.core.config import settings

wsgi_app = "lifeclock.main:app"

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# The session (choice cache, in-memory fallback, countdown timer) lives in the
# worker process. Several workers would each hold their own copy.
workers = int(os.environ.get("WORKERS", "1"))

# Uvicorn's event loop drives the countdown ticks.
worker_class = "uvicorn.workers.UvicornWorker"

timeout = 120
keepalive = 5

# Same level as the application loggers; everything goes to stdout.
loglevel = settings.LOG_LEVEL.lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

# The lifespan handler stops the countdown before the worker exits.
graceful_timeout = 30


def on_starting(server):
    server.log.info(
        "LifeClock starting (env=%s, database=%s, workers=%s)",
        settings.APP_ENV,
        settings.DATABASE_URL.split("://", 1)[0],
        workers,
    )
