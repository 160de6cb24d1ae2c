"""
Domain — 歷史匯率統計純函式。
將每日匯率序列依年度折疊為 最低 / 最高 / 平均 / 波動 統計，並產生整體摘要。
波動定義為 (max - min) / min × 100，為區間離散度而非統計變異數。
"""

from __future__ import annotations

import math
from datetime import date

from domain.entities import (
    HistoryReport,
    OverallSummary,
    RateSeries,
    YearlyStat,
    YearSummary,
)


def _valid_rate(value) -> float | None:
    """僅接受正的有限數值；None / NaN / 非數字 / 非正數一律略過。"""
    if value is None or isinstance(value, bool):
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(rate) or math.isinf(rate) or rate <= 0:
        return None
    return rate


def extract_series(payload: dict | None, target: str) -> RateSeries:
    """
    從上游回應 {"rates": {"YYYY-MM-DD": {CUR: rate}}} 取出 target 的序列。
    回傳依日期升序的 dict；無效日期或無效匯率會被略過。
    """
    rates = (payload or {}).get("rates") or {}
    series: RateSeries = {}
    for day_str in sorted(rates):
        day_rates = rates[day_str]
        if not isinstance(day_rates, dict):
            continue
        rate = _valid_rate(day_rates.get(target))
        if rate is None:
            continue
        try:
            day = date.fromisoformat(day_str)
        except (TypeError, ValueError):
            continue
        series[day] = rate
    return series


def cross_series(first_leg: RateSeries, second_leg: RateSeries) -> RateSeries:
    """
    交叉換算：A→B 與 B→C 同日相乘得 A→C。
    僅保留兩條腿皆有資料的日期。
    """
    return {
        day: first_leg[day] * second_leg[day]
        for day in sorted(first_leg.keys() & second_leg.keys())
    }


def aggregate(series: RateSeries, target: str) -> HistoryReport:
    """
    將匯率序列折疊為年度統計與整體摘要。

    空序列（或過濾後無有效匯率）回傳 has_data=False 的報表，不會拋錯或除以零。
    年度依西元年升序排列；整體最低/最高所在年份取第一個符合者。
    """
    yearly: dict[int, YearlyStat] = {}
    valid_days: list[date] = []
    for day in sorted(series):
        rate = _valid_rate(series[day])
        if rate is None:
            continue
        valid_days.append(day)
        stat = yearly.get(day.year)
        if stat is None:
            yearly[day.year] = YearlyStat.first(day.year, rate)
        else:
            stat.add(rate)

    if not yearly:
        return HistoryReport(target=target)

    years = tuple(
        YearSummary(
            year=s.year,
            min=s.min,
            max=s.max,
            avg=s.avg,
            volatility_pct=s.volatility_pct,
            count=s.count,
        )
        for s in (yearly[y] for y in sorted(yearly))
    )

    overall_min = min(y.min for y in years)
    overall_max = max(y.max for y in years)
    total = sum(s.sum for s in yearly.values())
    count = sum(s.count for s in yearly.values())

    overall = OverallSummary(
        min=overall_min,
        max=overall_max,
        avg=total / count,
        volatility_pct=(overall_max - overall_min) / overall_min * 100,
        min_year=next(y.year for y in years if y.min == overall_min),
        max_year=next(y.year for y in years if y.max == overall_max),
        first_date=valid_days[0],
        last_date=valid_days[-1],
        point_count=count,
    )
    return HistoryReport(target=target, years=years, overall=overall)
