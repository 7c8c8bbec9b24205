from __future__ import annotations

import os
import sys

chdir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "avatar_app")
if chdir not in sys.path:
    sys.path.insert(0, chdir)

from config.logging_config import build_logging_config  # noqa: E402

wsgi_app = "config.wsgi:application"
bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))

accesslog = "-"
errorlog = "-"
capture_output = True
loglevel = "info"
forwarded_allow_ips = "*"
access_log_format = '%({x-forwarded-for}i)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

logconfig_dict = build_logging_config(os.environ.get("LOG_LEVEL", "INFO"))
