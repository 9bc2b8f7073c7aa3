# Gunicorn configuration for the Artechway blog
# Run with: gunicorn -c gunicorn.conf.py

import multiprocessing
import os

wsgi_app = "artechway:create_app()"
bind = os.getenv("GUNICORN_BIND", f"0.0.0.0:{os.getenv('PORT', '8000')}")

# Threads keep workers responsive while a request waits on Gemini
workers = int(os.getenv("GUNICORN_WORKERS", multiprocessing.cpu_count() + 1))
worker_class = "gthread"
threads = int(os.getenv("GUNICORN_THREADS", "4"))

# Image generation can take close to a minute
timeout = int(os.getenv("GUNICORN_TIMEOUT", "120"))
graceful_timeout = 30
keepalive = 5
max_requests = 1000
max_requests_jitter = 100

# Each worker opens its own database pool after fork
preload_app = False

# Uploads go through the form body; headers stay small
limit_request_line = 4096
limit_request_fields = 100

# structlog writes JSON to stdout; keep gunicorn's logs beside it
accesslog = os.getenv("GUNICORN_ACCESS_LOG", "-")
errorlog = os.getenv("GUNICORN_ERROR_LOG", "-")
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
