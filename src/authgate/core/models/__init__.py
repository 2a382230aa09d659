"""Session models."""

from .session import GatewaySession

__all__ = ["GatewaySession"]
