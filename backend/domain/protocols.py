from typing import Any, Optional, Protocol, runtime_checkable

from domain.entities import DateRange, RateSeries


@runtime_checkable
class RateCache(Protocol):
    """Key/value cache with per-entry TTL. Writes are best-effort."""

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None on miss or read failure."""
        ...

    def set(self, key: str, value: Any, ttl: int) -> None:
        """Store value for ttl seconds; must never raise."""
        ...


@runtime_checkable
class RateSource(Protocol):
    """Interface for exchange-rate upstreams."""

    def fetch_latest(self, source: str, target: str) -> float:
        """Latest rate: 1 source = ? target."""
        ...

    def fetch_range(self, source: str, target: str, date_range: DateRange) -> RateSeries:
        """Daily rates over date_range, ordered by date."""
        ...

