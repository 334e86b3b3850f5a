"""
Core verification logic for country-based blocking.
"""

import logging
from collections import namedtuple
from werkzeug.wrappers import Request

from .config import Config
from .database import open_database
from .errors import ConfigurationError, LookupError
from .resolver import CountryResolver, PRIVATE
from .utils import get_candidate_ips, new_request_id, render_forbidden

logger = logging.getLogger(__name__)

Decision = namedtuple('Decision', ['allow', 'country', 'reason', 'ip'], defaults=(None,))


def evaluate(country, config):
    """
    Apply the country policy to a resolved country.

    Private-address policy takes precedence over the country lists. At most
    one of the two lists is non-empty.

    Args:
        country: Country code or PRIVATE
        config: Config object

    Returns:
        Decision for this country
    """
    if country == PRIVATE:
        if config.allow_private:
            return Decision(True, country, "private address allowed")
        return Decision(False, country, "private address not allowed")

    if config.allowed_countries:
        if country in config.allowed_countries:
            return Decision(True, country, "country in allowed list")
        return Decision(False, country, "country not in allowed list")

    if config.disallowed_countries:
        if country in config.disallowed_countries:
            return Decision(False, country, "country in disallowed list")
        return Decision(True, country, "country not in disallowed list")

    return Decision(True, country, "no country restrictions")


class GeoblockFilter:
    """
    WSGI middleware allowing or rejecting requests by client country.

    Allowed requests are passed to next_app untouched; denied requests get a
    generic 403 and next_app is never called.
    """

    def __init__(self, next_app, config, database=None, name='geoblock'):
        if next_app is None or not callable(next_app):
            raise ConfigurationError("no next handler provided")
        if config is None:
            raise ConfigurationError("no config provided")

        self.next_app = next_app
        self.config = config
        self.name = name
        self.resolver = None

        if not config.enabled:
            logger.info(f"{name}: disabled")
            return

        if database is None:
            database = open_database(config.database_path)
        self.resolver = CountryResolver(database)

    @property
    def database(self):
        return self.resolver.database if self.resolver else None

    def check(self, headers, host=''):
        """
        Decide whether a request may proceed.

        Args:
            headers: Case-insensitive header mapping of the request
            host: Requested host, for logging only

        Returns:
            Aggregate Decision; any denied candidate denies the request
        """
        if not self.config.enabled:
            return Decision(True, None, "filter disabled")

        ips = get_candidate_ips(headers)
        if not ips:
            # Missing forwarding headers are not a policy violation
            logger.debug(f"{self.name}: {host} - no client address to check")
            return Decision(True, None, "no client address to check")

        for ip in ips:
            try:
                country = self.resolver.resolve(ip)
            except LookupError as e:
                logger.warning(f"{self.name}: {host} - {e}")
                return Decision(False, None, f"lookup failed: {e}", ip)

            decision = evaluate(country, self.config)._replace(ip=ip)
            if not decision.allow:
                logger.info(f"{self.name}: {host} - access denied for {ip} "
                            f"({country}): {decision.reason}")
                return decision

            logger.debug(f"{self.name}: {host} - {ip} ({country}): {decision.reason}")

        return Decision(True, None, "all addresses allowed")

    def __call__(self, environ, start_response):
        if not self.config.enabled:
            return self.next_app(environ, start_response)

        request = Request(environ)
        decision = self.check(request.headers, request.host)
        if decision.allow:
            return self.next_app(environ, start_response)

        request_id = new_request_id()
        logger.info(f"{self.name}: rejected request {request_id} ({decision.reason})")
        return render_forbidden(request_id)(environ, start_response)


def create_filter(next_app, config=None, name='geoblock'):
    """
    Build a GeoblockFilter, loading configuration when none is given.

    Raises:
        ConfigurationError: invalid configuration or unusable database
    """
    if config is None:
        config = Config.load()
    config.log()
    return GeoblockFilter(next_app, config, name=name)
