"""
API — 匯率路由（純文字回應）。
- GET /history...?from=&to=&range=   歷史匯率統計（路徑以 /history 開頭者皆屬此端點）
- GET /...?from=&to=&amount=          即時換算（其餘所有 GET 路徑）
回應一律為 text/plain; charset=utf-8，並帶 Access-Control-Allow-Origin。
"""

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from application.conversion_service import convert
from application.history_service import prepare_query, run_history
from domain import constants
from domain.errors import (
    InsufficientHistoricalDataError,
    InvalidAmountError,
    SameCurrencyError,
    UnrecognizedCurrencyError,
    UpstreamUnavailableError,
)
from domain.formatters import (
    render_conversion,
    render_error,
    render_history,
    render_unavailable,
)
from domain.protocols import RateSource
from i18n import resolve_language
from infrastructure.providers import get_rate_source
from logging_config import get_logger

router = APIRouter(tags=["FX"])
logger = get_logger(__name__)

_INPUT_ERRORS = (UnrecognizedCurrencyError, InvalidAmountError, SameCurrencyError)


def get_today() -> date:
    """FastAPI dependency：今日（UTC）日期，作為時間區間的終點。"""
    return datetime.now(timezone.utc).date()


def text_response(body: str, status_code: int = 200) -> PlainTextResponse:
    return PlainTextResponse(
        body,
        status_code=status_code,
        media_type=constants.TEXT_CONTENT_TYPE,
        headers={"Access-Control-Allow-Origin": constants.CORS_ALLOW_ORIGIN},
    )


@router.get(
    "/history{suffix:path}",
    response_class=PlainTextResponse,
    summary="Historical rate summary",
)
def history_endpoint(
    suffix: str,
    from_: str | None = Query(default=None, alias="from"),
    to: str | None = Query(default=None),
    range_: str | None = Query(default=None, alias="range"),
    lang: str | None = Query(default=None),
    source: RateSource = Depends(get_rate_source),
    today: date = Depends(get_today),
) -> PlainTextResponse:
    """歷史匯率年度統計；資料不足時依序降級（交叉換算、縮短區間）。"""
    lang = resolve_language(lang)
    try:
        query = prepare_query(from_, to, range_, today)
    except _INPUT_ERRORS as e:
        logger.info("歷史查詢輸入無效：%s", e)
        return text_response(render_error(e, lang), 400)

    try:
        outcome = run_history(query, source, today)
    except UpstreamUnavailableError:
        return text_response(
            render_unavailable(query.source, query.target, query.requested_range, lang),
            502,
        )
    except InsufficientHistoricalDataError as e:
        return text_response(
            render_unavailable(
                query.source,
                query.target,
                query.requested_range,
                lang,
                points_found=e.points_found,
            ),
            503,
        )
    return text_response(render_history(outcome, lang))


@router.get(
    "/{path:path}",
    response_class=PlainTextResponse,
    summary="Real-time conversion",
)
def conversion_endpoint(
    path: str,
    from_: str | None = Query(default=None, alias="from"),
    to: str | None = Query(default=None),
    amount: str | None = Query(default=None),
    lang: str | None = Query(default=None),
    source: RateSource = Depends(get_rate_source),
) -> PlainTextResponse:
    """即時換算；輸入錯誤 400，上游不可用 502。"""
    lang = resolve_language(lang)
    try:
        result = convert(from_, to, amount, source)
    except _INPUT_ERRORS as e:
        logger.info("換算輸入無效：%s", e)
        return text_response(render_error(e, lang), 400)
    except UpstreamUnavailableError as e:
        return text_response(render_error(e, lang), 502)
    return text_response(render_conversion(result, lang))
