"""
Configuration management for geoblock service.
Handles loading, parsing, and validating configuration from YAML files
and environment variables.
"""

import os
import logging
import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Configuration paths
CONFIG_PATH = os.getenv('CONFIG_PATH', '/app/config.yaml')
CONFIG_EXAMPLE_PATH = '/app/config.example.yaml'


def _parse_bool(value):
    return str(value).strip().lower() == 'true'


def _parse_countries(value):
    """Normalize a list or comma-separated string of country codes."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = value.split(',')
    elif not isinstance(value, (list, tuple, set, frozenset)):
        raise ConfigurationError(f"country list must be a list of codes, got {value!r}")

    countries = set()
    for entry in value:
        # Unquoted NO/ON/Y in YAML load as booleans
        if not isinstance(entry, str):
            raise ConfigurationError(
                f"invalid country code {entry!r}, quote it in the config file (e.g. 'NO')")
        code = entry.strip().upper()
        if not code:
            continue
        if len(code) != 2 or not code.isalpha():
            raise ConfigurationError(f"invalid country code {entry!r}, expected 2 letters")
        countries.add(code)
    return frozenset(countries)


class Config:
    """
    Immutable configuration container for the geoblock filter.

    Attributes:
        enabled: When false the filter passes every request through
        database_path: Path to the GeoIP2 country database
        allowed_countries: Only these countries pass (allow-list mode)
        disallowed_countries: These countries are rejected (deny-list mode)
        allow_private: Whether private/non-global addresses pass
    """

    __slots__ = ('enabled', 'database_path', 'allowed_countries',
                 'disallowed_countries', 'allow_private')

    def __init__(self, enabled=False, database_path='', allowed_countries=None,
                 disallowed_countries=None, allow_private=False):
        if database_path is None:
            database_path = ''
        if not isinstance(database_path, str):
            raise ConfigurationError(f"database path must be a string, got {database_path!r}")

        object.__setattr__(self, 'enabled', bool(enabled))
        object.__setattr__(self, 'database_path', database_path.strip())
        object.__setattr__(self, 'allowed_countries', _parse_countries(allowed_countries))
        object.__setattr__(self, 'disallowed_countries', _parse_countries(disallowed_countries))
        object.__setattr__(self, 'allow_private', bool(allow_private))

        self._validate_config()

    def __setattr__(self, name, value):
        raise AttributeError(f"Config is read-only, cannot set '{name}'")

    def __repr__(self):
        return (f"Config(enabled={self.enabled}, database_path={self.database_path!r}, "
                f"allowed_countries={sorted(self.allowed_countries)}, "
                f"disallowed_countries={sorted(self.disallowed_countries)}, "
                f"allow_private={self.allow_private})")

    @classmethod
    def load(cls, path=None):
        """
        Load configuration from YAML, then apply environment overrides.

        Args:
            path: Config file to read (default: CONFIG_PATH, then the example file)

        Returns:
            Validated Config

        Raises:
            ConfigurationError: unreadable/invalid YAML or invalid settings
        """
        if path:
            config_paths = [path]
        else:
            config_paths = [os.getenv('CONFIG_PATH', CONFIG_PATH), CONFIG_EXAMPLE_PATH]
        raw = _load_yaml_config(config_paths)

        enabled = os.getenv('GEOBLOCK_ENABLED', str(raw.get('enabled', False)))
        database_path = os.getenv('DATABASE_PATH', raw.get('database_path') or '')
        allowed = os.getenv('ALLOWED_COUNTRIES')
        disallowed = os.getenv('DISALLOWED_COUNTRIES')
        allow_private = os.getenv('ALLOW_PRIVATE', str(raw.get('allow_private', False)))

        return cls(
            enabled=_parse_bool(enabled),
            database_path=database_path,
            allowed_countries=allowed if allowed is not None else raw.get('allowed_countries'),
            disallowed_countries=disallowed if disallowed is not None else raw.get('disallowed_countries'),
            allow_private=_parse_bool(allow_private),
        )

    def _validate_config(self):
        """Validate configuration settings."""
        if self.allowed_countries and self.disallowed_countries:
            logger.error("Both allowed and disallowed countries are configured")
            raise ConfigurationError(
                "either allowed countries or disallowed countries could be set at once")

        if self.enabled and not self.database_path:
            logger.error("Filter is enabled but no database path is configured")
            raise ConfigurationError("no database file path defined")

    @property
    def mode(self):
        """Active country list mode: 'allowlist', 'denylist' or 'disabled'."""
        if self.allowed_countries:
            return 'allowlist'
        if self.disallowed_countries:
            return 'denylist'
        return 'disabled'

    def to_dict(self):
        return {
            "enabled": self.enabled,
            "mode": self.mode,
            "allowed_countries": sorted(self.allowed_countries),
            "disallowed_countries": sorted(self.disallowed_countries),
            "allow_private": self.allow_private,
        }

    def log(self):
        """Log configuration details."""
        logger.info("Configuration:")
        logger.info(f"  Enabled: {self.enabled}")
        logger.info(f"  Database: {self.database_path or '-'}")
        logger.info(f"  Country mode: {self.mode}")
        logger.info(f"  Allowed countries: {sorted(self.allowed_countries)}")
        logger.info(f"  Disallowed countries: {sorted(self.disallowed_countries)}")
        logger.info(f"  ALLOW_PRIVATE: {self.allow_private}")


def _load_yaml_config(config_paths):
    """Load configuration from the first YAML file found."""
    for path in config_paths:
        if not os.path.exists(path):
            continue
        try:
            with open(path, 'r') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config from {path}: {e}")
            raise ConfigurationError(f"failed to load config from {path}: {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"config file {path} must contain a mapping")

        logger.info(f"Loaded configuration from {path}")
        return config

    logger.warning("No config file found, using empty defaults")
    return {}
