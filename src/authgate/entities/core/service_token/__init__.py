"""Service token entity module.

Holds the single cached Google service-account bearer token.
"""

from .entity import ServiceTokenRecord
from .repository import ServiceTokenRepository
from .table import ServiceTokenTable

__all__ = ["ServiceTokenRecord", "ServiceTokenTable", "ServiceTokenRepository"]
