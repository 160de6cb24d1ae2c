"""
Domain — 輸入正規化純函式。
將自由文字的貨幣別名轉為 ISO 代碼，並解析帶單位縮寫的金額（如「3万」、「1.5K」）。
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping

from domain.constants import AMOUNT_UNITS, CURRENCY_ALIASES, DEFAULT_AMOUNT

_NON_ALIAS_CHARS = re.compile(r"[^A-Z一-龥]")

# 數字前綴（允許千分位逗號）+ 可選單位；較長的單位優先比對
_AMOUNT_PATTERN = re.compile(
    r"^\s*([0-9][0-9,]*(?:\.[0-9]*)?|\.[0-9]+)\s*("
    + "|".join(re.escape(u) for u in sorted(AMOUNT_UNITS, key=len, reverse=True))
    + r")?"
)


def clean_currency_input(raw: str | None) -> str:
    """大寫並移除所有非英文字母、非漢字字元。"""
    if not raw:
        return ""
    return _NON_ALIAS_CHARS.sub("", str(raw).upper())


def currency_candidates(
    raw: str | None, aliases: Mapping[str, str] = CURRENCY_ALIASES
) -> tuple[str, ...]:
    """
    回傳 raw 可能對應的所有 ISO 代碼（去重、依字母排序）。

    先做完全比對；未命中時，以「別名包含輸入」或「輸入包含別名」的
    子字串比對找出候選。
    """
    cleaned = clean_currency_input(raw)
    if not cleaned:
        return ()
    if cleaned in aliases:
        return (aliases[cleaned],)
    matched = {
        code for key, code in aliases.items() if cleaned in key or key in cleaned
    }
    return tuple(sorted(matched))


def normalize_currency(
    raw: str | None, aliases: Mapping[str, str] = CURRENCY_ALIASES
) -> str | None:
    """
    將貨幣代碼或別名正規化為 ISO 代碼。

    無法辨識，或子字串比對出多個不同代碼（語意不明）時回傳 None。

    Examples:
        >>> normalize_currency("美金")
        'USD'
        >>> normalize_currency(" rmb ")
        'CNY'
    """
    candidates = currency_candidates(raw, aliases)
    return candidates[0] if len(candidates) == 1 else None


def parse_amount(raw: str | None) -> float:
    """
    解析金額字串，支援千分位與單位縮寫（万/亿/千/百/W/K/M）。

    空值預設為 1；缺少數字前綴時回傳 NaN。

    Examples:
        >>> parse_amount("3万")
        30000.0
        >>> parse_amount("1.5K")
        1500.0
    """
    if raw is None or not str(raw).strip():
        return DEFAULT_AMOUNT
    match = _AMOUNT_PATTERN.match(str(raw))
    if not match:
        return math.nan
    number = float(match.group(1).replace(",", ""))
    unit = match.group(2)
    if unit:
        number *= AMOUNT_UNITS[unit]
    return number
