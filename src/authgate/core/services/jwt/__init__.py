"""Service-account assertion signing."""

from .jwt_gen import AssertionGenerator
