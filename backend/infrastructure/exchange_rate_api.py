"""
Infrastructure — 上游匯率 API 適配器（Frankfurter 相容格式）。
負責外部 API 呼叫、讀穿快取、逾時與重試。
- GET /latest?from=&to=            → {"base", "date", "rates": {CUR: rate}}
- GET /{start}..{end}?from=&to=    → {"base", "start_date", "end_date", "rates": {date: {CUR: rate}}}
非 2xx、逾時或連線錯誤（重試用盡後）一律拋出 UpstreamUnavailableError。
"""

from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from domain.constants import (
    FX_RETRY_ATTEMPTS,
    FX_RETRY_WAIT_MAX,
    FX_RETRY_WAIT_MIN,
    FX_RETRYABLE_STATUS,
    FX_UPSTREAM_BASE_URL,
    FX_UPSTREAM_TIMEOUT,
    HISTORY_RATE_TTL,
    LATEST_RATE_TTL,
)
from domain.entities import DateRange, RateSeries
from domain.errors import UpstreamUnavailableError
from domain.protocols import RateCache
from domain.statistics import extract_series
from logging_config import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Retry Policy：針對暫時性網路錯誤 / 5xx 自動指數退避重試
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetryPolicy:
    """上游呼叫的重試策略：最多嘗試次數與指數退避區間（秒）。"""

    max_attempts: int = FX_RETRY_ATTEMPTS
    wait_min: float = FX_RETRY_WAIT_MIN
    wait_max: float = FX_RETRY_WAIT_MAX

    def build(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(max(1, self.max_attempts)),
            wait=wait_exponential(min=self.wait_min, max=self.wait_max),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )


NO_RETRY = RetryPolicy(max_attempts=1, wait_min=0, wait_max=0)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.TransportError, httpx.TimeoutException)):
        return True
    return (
        isinstance(exc, httpx.HTTPStatusError)
        and exc.response.status_code in FX_RETRYABLE_STATUS
    )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class ExchangeRateClient:
    """
    讀穿快取的上游匯率客戶端。快取與重試策略皆由呼叫端注入。

    Args:
        cache: RateCache 實作；None 表示不快取。
        base_url: 上游 API 根網址。
        timeout: 單次呼叫逾時秒數。
        retry_policy: 重試策略。
        transport: 可選的 httpx transport（測試用 MockTransport）。
    """

    def __init__(
        self,
        cache: RateCache | None = None,
        base_url: str = FX_UPSTREAM_BASE_URL,
        timeout: float = FX_UPSTREAM_TIMEOUT,
        retry_policy: RetryPolicy = RetryPolicy(),
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._cache = cache
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retry_policy = retry_policy
        self._transport = transport

    # -- URLs ---------------------------------------------------------------

    def latest_url(self, source: str, target: str) -> str:
        return f"{self._base_url}/latest?{urlencode({'from': source, 'to': target})}"

    def range_url(self, source: str, target: str, date_range: DateRange) -> str:
        span = f"{date_range.start.isoformat()}..{date_range.end.isoformat()}"
        return f"{self._base_url}/{span}?{urlencode({'from': source, 'to': target})}"

    # -- Public API ---------------------------------------------------------

    def fetch_latest(self, source: str, target: str) -> float:
        """最新匯率：1 source = ? target。"""
        url = self.latest_url(source, target)
        payload = self._get_json(url, LATEST_RATE_TTL)
        try:
            rate = float(payload["rates"][target])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamUnavailableError(url, f"malformed payload: {e}") from e
        if rate <= 0:
            raise UpstreamUnavailableError(url, f"non-positive rate {rate}")
        logger.info("匯率 %s → %s = %.6f", source, target, rate)
        return rate

    def fetch_range(self, source: str, target: str, date_range: DateRange) -> RateSeries:
        """區間每日匯率，依日期升序；上游無資料時回傳空 dict。"""
        url = self.range_url(source, target, date_range)
        payload = self._get_json(url, HISTORY_RATE_TTL)
        if not isinstance(payload, dict):
            raise UpstreamUnavailableError(url, "malformed payload")
        series = extract_series(payload, target)
        logger.info(
            "匯率歷史 %s → %s（%s..%s）取得 %d 筆",
            source,
            target,
            date_range.start,
            date_range.end,
            len(series),
        )
        return series

    # -- HTTP ---------------------------------------------------------------

    def _get_json(self, url: str, ttl: int):
        if self._cache is not None:
            cached = self._cache.get(url)
            if cached is not None:
                logger.debug("命中快取：%s", url)
                return cached

        try:
            payload = self._retry_policy.build()(self._http_get_json, url)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("上游回應 HTTP %d：%s", status, url)
            raise UpstreamUnavailableError(url, f"HTTP {status}", status) from e
        except httpx.TimeoutException as e:
            logger.warning("上游逾時（%.1fs）：%s", self._timeout, url)
            raise UpstreamUnavailableError(url, "timeout") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("上游呼叫失敗：%s (%s)", url, e)
            raise UpstreamUnavailableError(url, type(e).__name__) from e

        if self._cache is not None:
            self._cache.set(url, payload, ttl)
        return payload

    def _http_get_json(self, url: str):
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            resp = client.get(url, headers={"Accept": "application/json"})
            resp.raise_for_status()
            return resp.json()
