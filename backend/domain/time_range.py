"""
Domain — 相對時間片語解析（「过去5年」、「最近3个月」、「过去10天」）。
將片語轉為具體的日曆區間，並以固定規則處理閏日與月底：

- 年：2/29 往回推到非閏年時，固定為 2/28（不滾到 3/1）。
- 月：目標月份天數不足時，固定為該月最後一天（不滾到下個月）。
- 天：直接減去天數。

不依賴任何外部服務或框架。
"""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta

from domain.constants import DEFAULT_HISTORY_YEARS, MIN_RANGE_YEARS
from domain.entities import DateRange
from domain.enums import TIME_UNIT_ALIASES, TimeUnit

_PHRASE_PATTERN = re.compile(r"(过去|最近)?\s*(\d+)\s*(年|个月|月|天)")

_LABEL_SUFFIX = {
    TimeUnit.YEAR: "年",
    TimeUnit.MONTH: "个月",
    TimeUnit.DAY: "天",
}


def shift_years(anchor: date, years: int) -> date:
    """anchor 往前推 years 年；2/29 落在非閏年時固定為 2/28。"""
    target_year = anchor.year - years
    if anchor.month == 2 and anchor.day == 29 and not calendar.isleap(target_year):
        return date(target_year, 2, 28)
    return anchor.replace(year=target_year)


def shift_months(anchor: date, months: int) -> date:
    """anchor 往前推 months 個月（自動借位跨年）；日期超出目標月份時取該月最後一天。"""
    total = anchor.year * 12 + (anchor.month - 1) - months
    target_year, target_month_index = divmod(total, 12)
    target_month = target_month_index + 1
    last_day = calendar.monthrange(target_year, target_month)[1]
    return date(target_year, target_month, min(anchor.day, last_day))


def build_label(amount: int, unit: TimeUnit) -> str:
    """產生顯示用標籤，例如「过去5年」。"""
    return f"过去{amount}{_LABEL_SUFFIX[unit]}"


def _shift(anchor: date, amount: int, unit: TimeUnit) -> date:
    if unit == TimeUnit.YEAR:
        return shift_years(anchor, amount)
    if unit == TimeUnit.MONTH:
        return shift_months(anchor, amount)
    return anchor - timedelta(days=amount)


def resolve_time_range(phrase: str | None, now: date) -> DateRange:
    """
    解析相對時間片語為 [start, end] 區間，end 固定為 now。

    無法解析的片語預設為過去 10 年。若計算結果早於可表示的最小日期
    或晚於 end，則重設為 end 往前 1 年（標籤一併改為「过去1年」）。

    Examples:
        >>> resolve_time_range("过去1年", date(2024, 2, 29)).start
        datetime.date(2023, 2, 28)
        >>> resolve_time_range("过去1个月", date(2024, 1, 31)).start
        datetime.date(2023, 12, 31)
    """
    match = _PHRASE_PATTERN.search(phrase or "")
    if match:
        amount = int(match.group(2))
        unit = TIME_UNIT_ALIASES[match.group(3)]
    else:
        amount, unit = DEFAULT_HISTORY_YEARS, TimeUnit.YEAR

    try:
        start = _shift(now, amount, unit)
    except (ValueError, OverflowError):
        start = None

    if start is None or start > now:
        return trailing_years(now, MIN_RANGE_YEARS)

    return DateRange(
        start=start, end=now, label=build_label(amount, unit), amount=amount, unit=unit
    )


def trailing_years(now: date, years: int) -> DateRange:
    """以 now 為終點的最近 years 年區間（供降級縮短區間使用）。"""
    return DateRange(
        start=shift_years(now, years),
        end=now,
        label=build_label(years, TimeUnit.YEAR),
        amount=years,
        unit=TimeUnit.YEAR,
    )


def count_weekdays(date_range: DateRange) -> int:
    """區間內（含首尾）的週一至週五天數。"""
    total_days = date_range.days + 1
    full_weeks, remainder = divmod(total_days, 7)
    weekdays = full_weeks * 5
    start_weekday = date_range.start.weekday()
    for offset in range(remainder):
        if (start_weekday + offset) % 7 < 5:
            weekdays += 1
    return weekdays


def required_points(date_range: DateRange, ceiling: int) -> int:
    """
    區間可接受的最低資料點數。

    長區間以 ceiling 為門檻；短區間（如過去 10 天）的交易日本就不足，
    改以交易日數的一半為門檻，至少 1 點。
    """
    return max(1, min(ceiling, count_weekdays(date_range) // 2))
