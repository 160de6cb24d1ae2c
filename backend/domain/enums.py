"""
Domain — 列舉定義。
時間單位與歷史資料取得策略。
"""

from enum import Enum


class TimeUnit(str, Enum):
    """相對時間片語的單位：年 / 月 / 天"""

    YEAR = "year"
    MONTH = "month"
    DAY = "day"


class FallbackStrategy(str, Enum):
    """歷史匯率實際採用的取得策略"""

    DIRECT = "direct"
    TRIANGULATED = "triangulated"
    REDUCED_RANGE = "reduced_range"


# 片語單位字串 → TimeUnit
TIME_UNIT_ALIASES: dict[str, TimeUnit] = {
    "年": TimeUnit.YEAR,
    "个月": TimeUnit.MONTH,
    "月": TimeUnit.MONTH,
    "天": TimeUnit.DAY,
}
