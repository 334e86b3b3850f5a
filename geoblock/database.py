"""
GeoIP2 country database access.
Opens a MaxMind GeoIP2/GeoLite2 Country database and answers country lookups.
"""

import os
import logging
import geoip2.database

from .errors import ConfigurationError
from .utils import is_private_ip, is_valid_ip

logger = logging.getLogger(__name__)

# Returned for addresses that cannot be attributed to a country
PRIVATE_SENTINEL = '-'
INVALID_ADDRESS = 'Invalid IP address'


class CountryDatabase:
    """
    Read-only country lookups backed by a geoip2 Reader.

    lookup() returns a two-letter country code, PRIVATE_SENTINEL for private
    or otherwise non-global addresses, or an 'Invalid'-prefixed message for
    strings that are not IP addresses. Addresses the database has no record
    for raise geoip2.errors.AddressNotFoundError.
    """

    def __init__(self, reader):
        self.reader = reader

    def lookup(self, ip):
        if not is_valid_ip(ip):
            return f"{INVALID_ADDRESS}: {ip!r}"

        if is_private_ip(ip):
            return PRIVATE_SENTINEL

        response = self.reader.country(ip)
        return response.country.iso_code

    def close(self):
        self.reader.close()


def open_database(path):
    """
    Load GeoIP2 Country database.

    Args:
        path: Path to a .mmdb country database

    Returns:
        CountryDatabase wrapping the opened reader

    Raises:
        ConfigurationError: if the path is empty, missing or unreadable
    """
    if not path:
        raise ConfigurationError("no database file path defined")

    if not os.path.exists(path):
        logger.error(f"Country database not found at {path}")
        raise ConfigurationError(f"database file not found: {path}")

    try:
        reader = geoip2.database.Reader(path)
    except Exception as e:
        logger.error(f"Failed to load Country database: {e}")
        raise ConfigurationError(f"failed to open database: {e}") from e

    logger.info(f"Loaded Country database from {path} "
                f"({reader.metadata().database_type})")
    return CountryDatabase(reader)
