"""
Domain — 純格式化函式（無副作用，僅依賴 domain 常數與 i18n）。
將換算結果與歷史統計報表轉為使用者可讀的純文字。
"""

from __future__ import annotations

import calendar
from datetime import date

from domain.constants import (
    CURRENCY_SYMBOLS,
    DEFAULT_LANGUAGE,
    LOW_DATA_WARNING_POINTS,
)
from domain.entities import ConversionResult, DateRange, HistoryOutcome
from domain.enums import FallbackStrategy
from domain.errors import (
    FXBriefError,
    InvalidAmountError,
    SameCurrencyError,
    UnrecognizedCurrencyError,
    UpstreamUnavailableError,
)
from i18n import t


# ---------------------------------------------------------------------------
# Number / Date helpers
# ---------------------------------------------------------------------------


def format_amount(value: float) -> str:
    """千分位、最多 3 位小數（去除尾端 0），例如 30000 → '30,000'。"""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text or "0"


def format_money(currency: str, value: float) -> str:
    """貨幣金額（2 位小數）；有符號者前置符號，否則後置 ISO 代碼。"""
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        sign = "-" if value < 0 else ""
        return f"{sign}{symbol}{abs(value):,.2f}"
    return f"{value:,.2f} {currency}"


def format_date_long(day: date, lang: str = DEFAULT_LANGUAGE) -> str:
    return t(
        "date.long",
        lang=lang,
        year=day.year,
        month=day.month,
        day=day.day,
        month_name=calendar.month_name[day.month],
    )


def format_date_short(day: date, lang: str = DEFAULT_LANGUAGE) -> str:
    return t("date.short", lang=lang, year=day.year, month=day.month, day=day.day)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def render_conversion(result: ConversionResult, lang: str = DEFAULT_LANGUAGE) -> str:
    """即時換算回應：換算結果、單位匯率、歷史查詢提示。"""
    return "\n".join(
        [
            t(
                "conversion.result",
                lang=lang,
                amount=format_amount(result.amount),
                source=result.source,
                converted=format_money(result.target, round(result.converted, 2)),
            ),
            t(
                "conversion.rate",
                lang=lang,
                source=result.source,
                rate=f"{result.rate:.6f}",
                target=result.target,
            ),
            t("conversion.hint", lang=lang),
        ]
    )


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


def _display_label(outcome: HistoryOutcome, lang: str) -> str:
    if outcome.strategy == FallbackStrategy.REDUCED_RANGE:
        return t("history.reduced_label", lang=lang, label=outcome.effective_range.label)
    return outcome.effective_range.label


def render_history(outcome: HistoryOutcome, lang: str = DEFAULT_LANGUAGE) -> str:
    """
    歷史統計回應：標題、資料範圍、年度明細、整體趨勢分析。
    資料點偏少時前置警示；縮短區間或交叉換算時附加說明。
    """
    report = outcome.report
    source, target = outcome.source, outcome.target
    overall = report.overall
    if overall is None:
        return t("history.no_data", lang=lang, source=source, target=target)

    lines: list[str] = []
    if overall.point_count < LOW_DATA_WARNING_POINTS:
        lines += [
            t(
                "history.low_data_warning",
                lang=lang,
                source=source,
                target=target,
                count=overall.point_count,
            ),
            "",
        ]

    lines += [
        t(
            "history.title",
            lang=lang,
            source=source,
            target=target,
            label=_display_label(outcome, lang),
        ),
        t(
            "history.date_range",
            lang=lang,
            start=format_date_long(overall.first_date, lang),
            end=format_date_long(overall.last_date, lang),
        ),
        t("history.points", lang=lang, count=f"{overall.point_count:,}"),
        "",
        t("history.yearly_header", lang=lang),
        "",
    ]
    lines += [
        t(
            "history.year_line",
            lang=lang,
            year=y.year,
            min=f"{y.min:.4f}",
            max=f"{y.max:.4f}",
            avg=f"{y.avg:.4f}",
            volatility=f"{y.volatility_pct:.1f}",
        )
        for y in report.years
    ]

    first_year, last_year = report.years[0].year, report.years[-1].year
    lines += [
        "",
        t("history.overall_header", lang=lang),
        t(
            "history.overall_min",
            lang=lang,
            value=f"{overall.min:.4f}",
            target=target,
            year=overall.min_year,
        ),
        t(
            "history.overall_max",
            lang=lang,
            value=f"{overall.max:.4f}",
            target=target,
            year=overall.max_year,
        ),
        t("history.overall_avg", lang=lang, value=f"{overall.avg:.4f}", target=target),
        t(
            "history.overall_volatility",
            lang=lang,
            value=f"{overall.volatility_pct:.2f}",
        ),
        t(
            "history.year_span",
            lang=lang,
            first=first_year,
            last=last_year,
            count=len(report.years),
        ),
        t("history.latest", lang=lang, date=format_date_short(overall.last_date, lang)),
        "",
        t("history.hint", lang=lang),
    ]

    if outcome.strategy == FallbackStrategy.TRIANGULATED:
        lines += ["", t("history.triangulated_note", lang=lang, pivot=outcome.pivot)]
    elif outcome.strategy == FallbackStrategy.REDUCED_RANGE:
        lines += [
            "",
            t("history.reduced_note", lang=lang, label=outcome.effective_range.label),
        ]

    return "\n".join(lines)


def render_unavailable(
    source: str,
    target: str,
    requested: DateRange,
    lang: str = DEFAULT_LANGUAGE,
    points_found: int | None = None,
) -> str:
    """所有降級策略皆失敗時的說明與建議。"""
    headline = t(
        "history.unavailable",
        lang=lang,
        source=source,
        target=target,
        label=requested.label,
    )
    if points_found:
        headline += t("history.unavailable_points", lang=lang, count=points_found)
    return "\n".join(
        [
            headline,
            "",
            t("history.suggest_header", lang=lang),
            t("history.suggest_shorter", lang=lang),
            t("history.suggest_major", lang=lang),
        ]
    )


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def render_error(error: FXBriefError, lang: str = DEFAULT_LANGUAGE) -> str:
    """業務錯誤 → 使用者訊息；未知錯誤一律回傳通用訊息，不外洩細節。"""
    if isinstance(error, UnrecognizedCurrencyError):
        if error.candidates:
            return t(
                "errors.ambiguous_currency",
                lang=lang,
                raw=error.raw,
                candidates=" / ".join(error.candidates),
            )
        if not error.raw.strip():
            return t("errors.missing_currency", lang=lang)
        return t("errors.unrecognized_currency", lang=lang, raw=error.raw)
    if isinstance(error, InvalidAmountError):
        return t("errors.invalid_amount", lang=lang, raw=error.raw)
    if isinstance(error, SameCurrencyError):
        return t("errors.same_currency", lang=lang, code=error.code)
    if isinstance(error, UpstreamUnavailableError):
        return t("errors.upstream_unavailable", lang=lang)
    return t("errors.internal", lang=lang)
