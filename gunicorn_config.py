"""Gunicorn configuration for the geoblock service.

Run with: gunicorn -c gunicorn_config.py 'geoblock.app:create_app()'
"""
import logging

from geoblock.utils import HealthCheckFilter


def on_starting(server):
    """Called just before the master process is initialized."""
    # Keep /health probes out of the access log
    logging.getLogger('gunicorn.access').addFilter(HealthCheckFilter())


# Bind configuration
bind = '0.0.0.0:9876'
workers = 2
# Threads share one read-only database reader per worker
threads = 2
timeout = 30

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = 'info'

access_log_format = 'INFO: %(h)s - - [%(t)s] "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'
