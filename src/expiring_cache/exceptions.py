"""Domain exception hierarchy for the expiring cache."""

from __future__ import annotations


class ExpiringCacheError(RuntimeError):
    """Base class for all domain-level cache errors."""


class InvalidArgumentError(ExpiringCacheError, ValueError):
    """Raised when a key, TTL, event name, or callback violates the contract."""


class ConfigValidationError(ExpiringCacheError):
    """Raised when configuration cannot be validated safely."""


class EvictionError(ExpiringCacheError):
    """Raised when an eviction selector cannot name a stored key to remove."""
