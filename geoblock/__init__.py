"""
Geoblock - country-based access control for forwarded HTTP requests.
"""

from .errors import GeoblockError, ConfigurationError, LookupError
from .config import Config
from .verification import GeoblockFilter, Decision, create_filter, evaluate

__all__ = [
    'Config',
    'ConfigurationError',
    'Decision',
    'GeoblockError',
    'GeoblockFilter',
    'LookupError',
    'create_filter',
    'evaluate',
]
