"""User entity module.

This module contains all User-related classes organized by responsibility:
- User: Domain entity (one local account, password or OAuth2 backed)
- UserTable: Database persistence model
- UserRepository: The user directory (lookup, example match, insert, partial update)
"""

from .entity import PROVIDERS, User
from .repository import UserRepository
from .table import UserTable

__all__ = ["PROVIDERS", "User", "UserTable", "UserRepository"]
