"""Eviction strategies for a capacity-bounded cache.

Each strategy is a pure function over the live entries returning the key to
evict. ``min()`` walks the mapping in insertion order, so ties go to the
earliest-inserted key.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .cache import CacheEntry

Selector = Callable[[Mapping[str, "CacheEntry"]], "str | None"]


class EvictionStrategy(str, Enum):
    """Closed set of supported eviction policies."""

    LRU = "LRU"
    FIFO = "FIFO"
    LFU = "LFU"

    @classmethod
    def parse(cls, value: Any) -> EvictionStrategy:
        """Resolve a strategy from an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        choices = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown eviction strategy {value!r}; expected one of {choices}.")


def least_recently_used(entries: Mapping[str, CacheEntry]) -> str | None:
    if not entries:
        return None
    return min(entries, key=lambda key: entries[key].last_accessed_at)


def first_in_first_out(entries: Mapping[str, CacheEntry]) -> str | None:
    if not entries:
        return None
    return min(entries, key=lambda key: entries[key].created_at)


def least_frequently_used(entries: Mapping[str, CacheEntry]) -> str | None:
    if not entries:
        return None
    return min(entries, key=lambda key: entries[key].access_count)


DEFAULT_SELECTORS: Mapping[EvictionStrategy, Selector] = MappingProxyType(
    {
        EvictionStrategy.LRU: least_recently_used,
        EvictionStrategy.FIFO: first_in_first_out,
        EvictionStrategy.LFU: least_frequently_used,
    }
)


def build_selectors(
    overrides: Mapping[Any, Selector] | None = None,
) -> Mapping[EvictionStrategy, Selector]:
    """Return a read-only selector table with ``overrides`` laid over the defaults.

    The defaults themselves are never modified, so each caller gets its own table.
    """
    if not overrides:
        return DEFAULT_SELECTORS
    table = dict(DEFAULT_SELECTORS)
    for strategy, selector in overrides.items():
        if not callable(selector):
            raise TypeError("selector must be callable")
        table[EvictionStrategy.parse(strategy)] = selector
    return MappingProxyType(table)


def select_victim(
    strategy: EvictionStrategy,
    entries: Mapping[str, CacheEntry],
    selectors: Mapping[EvictionStrategy, Selector] = DEFAULT_SELECTORS,
) -> str | None:
    """Return the key ``strategy`` would evict, or ``None`` when empty."""
    return selectors[EvictionStrategy.parse(strategy)](entries)
