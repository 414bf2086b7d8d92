from __future__ import annotations

import os

_default_host = "0.0.0.0"
_default_port = 5000  # Default port for Correction Service

host = os.getenv("CORRECTION_SERVICE_HOST", _default_host)
port = int(os.getenv("CORRECTION_SERVICE_HTTP_PORT", _default_port))
bind = f"{host}:{port}"
workers = int(os.getenv("WEB_CONCURRENCY", 1))
worker_class = "asyncio"

loglevel = os.getenv("CORRECTION_SERVICE_LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"

graceful_timeout = int(os.getenv("GRACEFUL_TIMEOUT", 30))
keepalive_timeout = int(os.getenv("KEEP_ALIVE_TIMEOUT", 5))
