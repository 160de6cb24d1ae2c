"""
Application — Conversion Service：即時匯率換算。
輸入驗證（貨幣、金額）一律在呼叫上游之前完成。
"""

import math

from domain.entities import ConversionResult
from domain.errors import InvalidAmountError, UnrecognizedCurrencyError
from domain.normalizer import currency_candidates, parse_amount
from domain.protocols import RateSource
from logging_config import get_logger

logger = get_logger(__name__)


def resolve_currency(raw: str | None) -> str:
    """
    將使用者輸入正規化為 ISO 代碼。

    Raises:
        UnrecognizedCurrencyError: 無法辨識，或比對出多個候選代碼
    """
    candidates = currency_candidates(raw)
    if len(candidates) == 1:
        return candidates[0]
    if candidates:
        logger.info("貨幣別名語意不明：%r → %s", raw, candidates)
    raise UnrecognizedCurrencyError(raw, candidates)


def resolve_amount(raw: str | None) -> float:
    """
    解析金額；NaN、無窮大與負數皆視為無效。

    Raises:
        InvalidAmountError: 金額格式無效
    """
    amount = parse_amount(raw)
    if math.isnan(amount) or math.isinf(amount) or amount < 0:
        raise InvalidAmountError(raw or "")
    return amount


def convert(
    from_raw: str | None,
    to_raw: str | None,
    amount_raw: str | None,
    source: RateSource,
) -> ConversionResult:
    """
    即時換算 amount 單位的 from 貨幣為 to 貨幣。

    相同貨幣直接以匯率 1.0 回傳，不呼叫上游。

    Raises:
        UnrecognizedCurrencyError / InvalidAmountError: 輸入錯誤
        UpstreamUnavailableError: 上游不可用
    """
    from_code = resolve_currency(from_raw)
    to_code = resolve_currency(to_raw)
    amount = resolve_amount(amount_raw)

    if from_code == to_code:
        rate = 1.0
    else:
        rate = source.fetch_latest(from_code, to_code)

    result = ConversionResult(
        source=from_code,
        target=to_code,
        amount=amount,
        rate=rate,
        converted=amount * rate,
    )
    logger.info(
        "換算 %s %s → %s（rate=%.6f）", amount, from_code, to_code, rate
    )
    return result
