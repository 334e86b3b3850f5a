"""
Error types raised by the geoblock filter.
"""

import builtins


class GeoblockError(Exception):
    """Base class for all geoblock errors."""


class ConfigurationError(GeoblockError):
    """Invalid configuration or a database that cannot be opened."""


class LookupError(GeoblockError, builtins.LookupError):
    """An IP address could not be resolved to a country."""

    def __init__(self, ip, message):
        super().__init__(f"lookup of {ip} failed: {message}")
        self.ip = ip
