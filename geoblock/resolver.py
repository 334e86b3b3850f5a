"""
Country resolution for candidate client IPs.
"""

import logging

from .database import PRIVATE_SENTINEL
from .errors import LookupError

logger = logging.getLogger(__name__)

# Country code for addresses no country can be attributed to
PRIVATE = 'PRIVATE'


class CountryResolver:
    """
    Resolve IP address strings to country codes.

    Wraps a single database handle for the lifetime of the filter. The handle
    must provide lookup(ip) returning a country code, an 'invalid'-prefixed
    message, or the private sentinel.
    """

    def __init__(self, database):
        self.database = database

    def resolve(self, ip):
        """
        Resolve an IP address to a country.

        Returns:
            Upper-case country code, or PRIVATE

        Raises:
            LookupError: malformed address, database-reported invalid query,
                address unknown to the database, or a database failure
        """
        try:
            country = self.database.lookup(ip)
        except Exception as e:
            raise LookupError(ip, str(e) or type(e).__name__) from e

        if not country:
            raise LookupError(ip, "no country in database record")

        if country.lower().startswith('invalid'):
            raise LookupError(ip, country)

        if country == PRIVATE_SENTINEL:
            logger.debug(f"{ip} is a private address")
            return PRIVATE

        return country.upper()

    def close(self):
        self.database.close()
