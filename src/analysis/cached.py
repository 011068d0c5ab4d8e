"""Memoized versions of the dashboard computations.

Views re-run filtering and aggregation on every render. Inputs are treated
as immutable snapshots, so a result can be reused for as long as the caller
passes the very same collection objects again:

- Collections, states and rule sets are compared by identity
- Scalars (``now``, flags, field names) are compared by equality
- One entry per memo, replaced on the next miss; no TTL
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import update_wrapper
from typing import Any, Callable, Dict, Optional, Tuple

from config.logging_config import get_logger
from src.filters import FilterConfig, FilterEngine, FilterState
from .classifiers import resolve_now
from .metrics import MetricsAggregator, MetricsSnapshot, RuleSet

logger = get_logger("cached")

_SCALAR_TYPES = (str, bytes, int, float, bool, Decimal, date, datetime, Enum, type(None))

_MISS = object()


def _same(a: Any, b: Any) -> bool:
    if isinstance(a, _SCALAR_TYPES) and isinstance(b, _SCALAR_TYPES):
        return type(a) is type(b) and a == b
    return a is b


class IdentityMemo:
    """
    Single-entry memo keyed on argument identity.

    Example:
        memo = IdentityMemo(aggregate)
        memo(collections, now=now)  # computed
        memo(collections, now=now)  # reused: same objects, same time
    """

    def __init__(self, func: Callable[..., Any]):
        self.func = func
        self._args: Tuple[Any, ...] = ()
        self._kwargs: Dict[str, Any] = {}
        self._result: Any = _MISS
        self.hits = 0
        self.misses = 0
        update_wrapper(self, func)

    def _matches(self, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> bool:
        if self._result is _MISS:
            return False
        if len(args) != len(self._args) or kwargs.keys() != self._kwargs.keys():
            return False
        if not all(_same(a, b) for a, b in zip(args, self._args)):
            return False
        return all(_same(kwargs[k], self._kwargs[k]) for k in kwargs)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self._matches(args, kwargs):
            self.hits += 1
            return self._result

        self.misses += 1
        result = self.func(*args, **kwargs)
        # References are held so identity cannot be reused by a new object
        self._args = args
        self._kwargs = dict(kwargs)
        self._result = result
        return result

    def clear(self) -> None:
        """Drop the cached entry."""
        self._args = ()
        self._kwargs = {}
        self._result = _MISS

    def cache_info(self) -> Dict[str, int]:
        """Get hit/miss counters."""
        return {"hits": self.hits, "misses": self.misses, "cached": int(self._result is not _MISS)}


def memoize_by_identity(func: Callable[..., Any]) -> IdentityMemo:
    """Decorator form of ``IdentityMemo``."""
    return IdentityMemo(func)


class CachedDashboard:
    """
    Memoized filter and aggregation entry points for one dashboard view.

    Each view keeps its own instance so memo entries never evict each other.
    """

    def __init__(self, rules: Optional[RuleSet] = None):
        self.aggregator = MetricsAggregator(rules)
        self._aggregate = IdentityMemo(self.aggregator.aggregate)
        self._filters: Dict[str, IdentityMemo] = {}

    def metrics(self, collections, now: Optional[datetime] = None) -> MetricsSnapshot:
        """
        Get the metrics snapshot, reusing it while inputs are unchanged.

        An omitted ``now`` is read from the clock before the memo lookup, so a
        new reference time always recomputes.
        """
        return self._aggregate(collections, now=resolve_now(now))

    def filtered(self, records, state: FilterState, config: FilterConfig):
        """Get the filtered view of a table, reusing it while inputs are unchanged."""
        memo = self._filters.get(config.entity)
        if memo is None:
            memo = IdentityMemo(_filter_with)
            self._filters[config.entity] = memo
        return memo(records, state, config)

    def clear(self) -> None:
        """Drop all memo entries."""
        self._aggregate.clear()
        for memo in self._filters.values():
            memo.clear()
        logger.debug("Cleared dashboard memo entries")


def _filter_with(records, state: FilterState, config: FilterConfig):
    return FilterEngine(config).filter(records, state)
