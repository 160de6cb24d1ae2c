"""
Shared test fixtures — TestClient, in-memory rate source, fixed clock.
"""

import os
import tempfile

# Set environment variables BEFORE any app imports to avoid /app filesystem access
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "fx_brief_test_logs"))
os.environ.setdefault(
    "DISK_CACHE_DIR", os.path.join(tempfile.gettempdir(), "fx_brief_test_cache")
)

import domain.constants  # noqa: E402

domain.constants.DISK_CACHE_DIR = os.environ["DISK_CACHE_DIR"]

from collections.abc import Callable, Generator  # noqa: E402
from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from api.routes.rate_routes import get_today  # noqa: E402
from domain.entities import DateRange, RateSeries  # noqa: E402
from domain.errors import UpstreamUnavailableError  # noqa: E402
from infrastructure.providers import get_rate_source  # noqa: E402
from main import app  # noqa: E402

# Monday; keeps weekday counts predictable
FIXED_TODAY = date(2025, 6, 16)


def weekday_series(
    start: date, end: date, rate: float = 1.0, step: float = 0.0
) -> RateSeries:
    """Mon–Fri rates from start to end (inclusive), rate increasing by step per day."""
    series: RateSeries = {}
    day, value = start, rate
    while day <= end:
        if day.weekday() < 5:
            series[day] = round(value, 6)
            value += step
        day += timedelta(days=1)
    return series


class FakeRateSource:
    """
    In-memory RateSource. fetch_range returns the stored series clipped to the
    requested range; fail_when(source, target, date_range) simulates upstream errors.
    Every call is recorded in `calls` as (kind, source, target, date_range).
    """

    def __init__(
        self,
        latest: dict[tuple[str, str], float] | None = None,
        series: dict[tuple[str, str], RateSeries] | None = None,
        fail_when: Callable[[str, str, DateRange | None], bool] | None = None,
    ) -> None:
        self.latest = dict(latest or {})
        self.series = dict(series or {})
        self.fail_when = fail_when or (lambda *_: False)
        self.calls: list[tuple] = []

    def fetch_latest(self, source: str, target: str) -> float:
        self.calls.append(("latest", source, target, None))
        if self.fail_when(source, target, None):
            raise UpstreamUnavailableError(
                f"fake://latest?from={source}&to={target}", "HTTP 503", 503
            )
        return self.latest[(source, target)]

    def fetch_range(self, source: str, target: str, date_range: DateRange) -> RateSeries:
        self.calls.append(("range", source, target, date_range))
        if self.fail_when(source, target, date_range):
            raise UpstreamUnavailableError(
                f"fake://{date_range.start}..{date_range.end}?from={source}&to={target}",
                "timeout",
            )
        full = self.series.get((source, target), {})
        return {
            day: rate
            for day, rate in full.items()
            if date_range.start <= day <= date_range.end
        }

    def range_calls(self) -> list[tuple[str, str, DateRange]]:
        return [(s, t, r) for kind, s, t, r in self.calls if kind == "range"]


@pytest.fixture()
def fake_source() -> FakeRateSource:
    return FakeRateSource()


@pytest.fixture()
def client(fake_source: FakeRateSource) -> Generator[TestClient, None, None]:
    """TestClient with the upstream replaced by fake_source and a fixed 'today'."""
    app.dependency_overrides[get_rate_source] = lambda: fake_source
    app.dependency_overrides[get_today] = lambda: FIXED_TODAY

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
