import os

# Server socket - bind to localhost only (reverse proxy in front)
bind = os.getenv("GUNICORN_BIND", "127.0.0.1:8000")

# SQLite has a single writer; keep the worker count small
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 120
keepalive = 5

max_requests = 1000
max_requests_jitter = 50

# Logging ("-" is stdout/stderr)
accesslog = os.getenv("GUNICORN_ACCESS_LOG", "-")
errorlog = os.getenv("GUNICORN_ERROR_LOG", "-")
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

proc_name = "dayflow-hrm"
