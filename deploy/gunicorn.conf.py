"""Gunicorn configuration for the multimodal gateway.

Usage:
    gunicorn main:app -c deploy/gunicorn.conf.py

The service is I/O-bound: generation calls take seconds, and the video
route waits on remote processing for as long as the provider needs, so
worker timeouts are generous and keep-alive is long.
"""

import multiprocessing
import os

# ─── Server socket ──────────────────────────────────────────────

bind = os.getenv("BIND", "0.0.0.0:7001")
backlog = 2048

# ─── Worker processes ───────────────────────────────────────────
#
# For async ASGI: 1 worker per core. Each worker's event loop carries many
# concurrent polling loops, since waits are asyncio.sleep suspensions.

workers = int(os.getenv("WORKERS", min(multiprocessing.cpu_count(), 4)))
worker_class = "uvicorn.workers.UvicornWorker"

# ─── Timeouts ───────────────────────────────────────────────────
#
# Video uploads poll every VIDEO_POLL_INTERVAL seconds until READY; a long
# clip can take minutes.  The heartbeat timeout only kills a worker whose
# event loop is stuck, not one with slow requests in flight.

timeout = int(os.getenv("WORKER_TIMEOUT", "600"))
graceful_timeout = 120   # let in-flight uploads finish
keepalive = 120

# ─── Worker recycling ──────────────────────────────────────────

max_requests = 3000
max_requests_jitter = 500

# ─── Logging ────────────────────────────────────────────────────

accesslog = "-"                     # stdout
errorlog = "-"                      # stderr
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = (
    '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" %(D)sμs'
)

# ─── Process naming ─────────────────────────────────────────────

proc_name = "multimodal-gateway"

# ─── Server hooks ───────────────────────────────────────────────


def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info(
        "Starting multimodal gateway — workers=%d, timeout=%ds, bind=%s",
        workers,
        timeout,
        bind,
    )


def post_fork(server, worker):
    server.log.info("Worker spawned (pid: %s)", worker.pid)


def worker_exit(server, worker):
    server.log.info("Worker exit (pid: %s)", worker.pid)
