"""
Utility functions for IP handling, response rendering and log filtering.
"""

import ipaddress
import json
import uuid
import logging
from flask import Response

logger = logging.getLogger(__name__)

FORWARDED_HEADERS = ('X-Forwarded-For', 'X-Real-IP')


def is_valid_ip(ip_str):
    """Check if the string is an IPv4 or IPv6 address."""
    try:
        ipaddress.ip_address(ip_str)
        return True
    except ValueError:
        return False


def is_private_ip(ip_str):
    """
    Check if IP address is private/local.

    Args:
        ip_str: IP address as string

    Returns:
        True if IP is not globally routable (private, loopback, link-local,
        shared CGNAT space, reserved) or is multicast
    """
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return False

    # ::ffff:10.0.0.1 is checked as 10.0.0.1
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped:
        ip = ip.ipv4_mapped

    # is_global excludes 100.64.0.0/10 but not multicast
    return not ip.is_global or ip.is_multicast


def get_candidate_ips(headers):
    """
    Collect candidate client IPs from proxy forwarding headers.
    Both X-Forwarded-For and X-Real-IP may carry comma-separated lists.

    Args:
        headers: Case-insensitive header mapping (e.g. werkzeug Headers)

    Returns:
        Set of distinct, trimmed, non-empty address strings. Not validated.
    """
    ips = set()
    for name in FORWARDED_HEADERS:
        value = headers.get(name, '')
        if not value:
            continue
        for ip in value.split(','):
            ip = ip.strip()
            if ip:
                ips.add(ip)
    return ips


def new_request_id():
    """Short opaque id tying a rejection to its log line."""
    return uuid.uuid4().hex[:8]


def render_forbidden(request_id):
    """
    Build the generic 403 response returned for denied requests.

    The body carries no decision detail (country, address or cause), only
    the request id the operator can match against the log.

    Args:
        request_id: Id from new_request_id()

    Returns:
        Flask Response object with 403 status code
    """
    body = json.dumps({"error": "Forbidden", "request_id": request_id})
    return Response(body, status=403, mimetype='application/json')


class HealthCheckFilter(logging.Filter):
    """Filter to suppress /health endpoint logs"""
    def filter(self, record):
        return '/health' not in record.getMessage()
