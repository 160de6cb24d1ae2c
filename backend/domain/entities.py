"""
Domain — 實體與值物件。
皆為請求範圍內建立、用完即棄的資料結構，不涉及持久化。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from domain.enums import FallbackStrategy, TimeUnit

# 依日期排序的 日期 → 匯率 映射；取得後視為不可變
RateSeries = dict[date, float]


@dataclass(frozen=True)
class DateRange:
    """歷史查詢區間（含首尾），start <= end。"""

    start: date
    end: date
    label: str
    amount: int = 0
    unit: TimeUnit = TimeUnit.YEAR

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")

    @property
    def days(self) -> int:
        return (self.end - self.start).days


@dataclass
class YearlyStat:
    """單一年度的折疊累計值；僅在 aggregate() 折疊期間變動。"""

    year: int
    min: float
    max: float
    sum: float
    count: int

    @classmethod
    def first(cls, year: int, rate: float) -> YearlyStat:
        return cls(year=year, min=rate, max=rate, sum=rate, count=1)

    def add(self, rate: float) -> None:
        self.min = min(self.min, rate)
        self.max = max(self.max, rate)
        self.sum += rate
        self.count += 1

    @property
    def avg(self) -> float:
        return self.sum / self.count

    @property
    def volatility_pct(self) -> float:
        return (self.max - self.min) / self.min * 100


@dataclass(frozen=True)
class YearSummary:
    year: int
    min: float
    max: float
    avg: float
    volatility_pct: float
    count: int


@dataclass(frozen=True)
class OverallSummary:
    min: float
    max: float
    avg: float
    volatility_pct: float
    min_year: int
    max_year: int
    first_date: date
    last_date: date
    point_count: int


@dataclass(frozen=True)
class HistoryReport:
    """aggregate() 的結果；無資料時 overall 為 None、years 為空。"""

    target: str
    years: tuple[YearSummary, ...] = ()
    overall: OverallSummary | None = None

    @property
    def has_data(self) -> bool:
        return self.overall is not None


@dataclass(frozen=True)
class ConversionResult:
    source: str
    target: str
    amount: float
    rate: float
    converted: float


@dataclass(frozen=True)
class HistoryOutcome:
    """歷史查詢的最終結果：報表 + 實際使用的區間與策略。"""

    source: str
    target: str
    report: HistoryReport
    requested_range: DateRange
    effective_range: DateRange
    strategy: FallbackStrategy = FallbackStrategy.DIRECT
    pivot: str | None = None

    @property
    def is_reduced(self) -> bool:
        return self.strategy == FallbackStrategy.REDUCED_RANGE


@dataclass(frozen=True)
class HistoryQuery:
    """已驗證的歷史查詢：正規化後的貨幣對與請求區間。"""

    source: str
    target: str
    requested_range: DateRange

    @property
    def pair(self) -> str:
        return f"{self.source}/{self.target}"
