"""
Application — History Service：歷史匯率統計與降級策略。

降級順序（任一步驟資料點數達門檻即採用）：
1. 直接查詢請求區間
2. 交叉換算：from→樞紐貨幣、樞紐貨幣→to 兩條腿並行查詢後同日相乘
3. 縮短區間：依序改查過去 5 / 3 / 1 年（僅在比請求區間更短時）
全部失敗時：皆為上游錯誤 → UpstreamUnavailableError；否則 → InsufficientHistoricalDataError。
"""

import contextvars
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date

from application.conversion_service import resolve_currency
from domain import constants
from domain.constants import (
    DEFAULT_TIME_RANGE,
    MIN_HISTORY_POINTS,
    MIN_REDUCED_HISTORY_POINTS,
    REDUCED_RANGE_YEARS,
    TRIANGULATION_POOL_SIZE,
)
from domain.entities import DateRange, HistoryOutcome, HistoryQuery, RateSeries
from domain.enums import FallbackStrategy
from domain.errors import (
    InsufficientHistoricalDataError,
    SameCurrencyError,
    UpstreamUnavailableError,
)
from domain.protocols import RateSource
from domain.statistics import aggregate, cross_series
from domain.time_range import required_points, resolve_time_range, trailing_years
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class _FallbackTrace:
    """降級過程的紀錄：嘗試次數、上游失敗次數、最多資料點數。"""

    attempts: int = 0
    failures: list[UpstreamUnavailableError] = field(default_factory=list)
    best_points: int = 0

    @property
    def all_failed(self) -> bool:
        return self.attempts > 0 and len(self.failures) == self.attempts


def prepare_query(
    from_raw: str | None,
    to_raw: str | None,
    range_raw: str | None,
    today: date,
) -> HistoryQuery:
    """
    驗證輸入並解析時間區間；任何網路呼叫之前執行。

    Raises:
        UnrecognizedCurrencyError: 貨幣無法辨識
        SameCurrencyError: 來源與目標貨幣相同
    """
    source = resolve_currency(from_raw)
    target = resolve_currency(to_raw)
    if source == target:
        raise SameCurrencyError(source)
    requested = resolve_time_range(range_raw or DEFAULT_TIME_RANGE, today)
    return HistoryQuery(source=source, target=target, requested_range=requested)


def fetch_triangulated(
    source: RateSource,
    query: HistoryQuery,
    pivot: str,
    date_range: DateRange,
) -> RateSeries:
    """
    兩條腿並行查詢後交叉相乘；任一腿失敗即拋出，不回傳部分結果。
    每條腿在呼叫端 context 的副本中執行，保留 request_id。
    """
    with ThreadPoolExecutor(max_workers=TRIANGULATION_POOL_SIZE) as executor:
        first = executor.submit(
            contextvars.copy_context().run, source.fetch_range, query.source, pivot, date_range
        )
        second = executor.submit(
            contextvars.copy_context().run, source.fetch_range, pivot, query.target, date_range
        )
        first_leg, second_leg = first.result(), second.result()
    return cross_series(first_leg, second_leg)


def _attempt(trace: _FallbackTrace, label: str, fetch) -> RateSeries:
    trace.attempts += 1
    try:
        series = fetch()
    except UpstreamUnavailableError as e:
        trace.failures.append(e)
        logger.warning("歷史匯率查詢失敗（%s）：%s", label, e.reason)
        return {}
    trace.best_points = max(trace.best_points, len(series))
    return series


def run_history(
    query: HistoryQuery,
    source: RateSource,
    today: date,
    pivot: str | None = None,
) -> HistoryOutcome:
    """
    依降級順序取得歷史序列並彙總為報表。

    Raises:
        UpstreamUnavailableError: 所有步驟皆因上游錯誤失敗
        InsufficientHistoricalDataError: 有資料但皆未達門檻
    """
    pivot = pivot or constants.PIVOT_CURRENCY
    requested = query.requested_range
    trace = _FallbackTrace()

    def outcome(series: RateSeries, effective: DateRange, strategy, used_pivot=None):
        return HistoryOutcome(
            source=query.source,
            target=query.target,
            report=aggregate(series, query.target),
            requested_range=requested,
            effective_range=effective,
            strategy=strategy,
            pivot=used_pivot,
        )

    # === 1. 直接查詢 ===
    threshold = required_points(requested, MIN_HISTORY_POINTS)
    series = _attempt(
        trace,
        "direct",
        lambda: source.fetch_range(query.source, query.target, requested),
    )
    if len(series) >= threshold:
        return outcome(series, requested, FallbackStrategy.DIRECT)
    logger.info(
        "%s %s 直接查詢僅 %d 筆（門檻 %d），改用交叉換算",
        query.pair,
        requested.label,
        len(series),
        threshold,
    )

    # === 2. 交叉換算 ===
    if pivot not in (query.source, query.target):
        series = _attempt(
            trace,
            f"via {pivot}",
            lambda: fetch_triangulated(source, query, pivot, requested),
        )
        if len(series) >= threshold:
            logger.info("%s 以 %s 交叉換算取得 %d 筆", query.pair, pivot, len(series))
            return outcome(series, requested, FallbackStrategy.TRIANGULATED, pivot)

    # === 3. 縮短區間 ===
    for years in REDUCED_RANGE_YEARS:
        reduced = trailing_years(today, years)
        if reduced.start <= requested.start:
            continue
        series = _attempt(
            trace,
            reduced.label,
            lambda r=reduced: source.fetch_range(query.source, query.target, r),
        )
        if len(series) >= required_points(reduced, MIN_REDUCED_HISTORY_POINTS):
            logger.info("%s 縮短為%s，取得 %d 筆", query.pair, reduced.label, len(series))
            return outcome(series, reduced, FallbackStrategy.REDUCED_RANGE)

    if trace.all_failed:
        logger.error("%s 歷史匯率所有降級步驟皆失敗（上游不可用）", query.pair)
        raise trace.failures[-1]
    logger.warning(
        "%s 歷史匯率資料不足：最多 %d 筆", query.pair, trace.best_points
    )
    raise InsufficientHistoricalDataError(query.pair, trace.best_points)


def get_history(
    from_raw: str | None,
    to_raw: str | None,
    range_raw: str | None,
    source: RateSource,
    today: date,
    pivot: str | None = None,
) -> HistoryOutcome:
    """驗證輸入後執行降級查詢。"""
    query = prepare_query(from_raw, to_raw, range_raw, today)
    return run_history(query, source, today, pivot)
