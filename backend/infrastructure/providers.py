"""
Infrastructure — RateSource 的 FastAPI 依賴提供者。
程序內共用一個 ExchangeRateClient（含二層快取）；設定於首次呼叫時讀取，
因此必須在 init_settings() 之後才會建立。
"""

import threading

from domain import constants
from domain.protocols import RateSource
from infrastructure.cache import TieredCache
from infrastructure.exchange_rate_api import ExchangeRateClient, RetryPolicy
from logging_config import get_logger

logger = get_logger(__name__)

_client: ExchangeRateClient | None = None
_lock = threading.Lock()


def build_rate_source() -> ExchangeRateClient:
    """依目前的 domain 常數建立新的上游客戶端。"""
    cache = TieredCache(disk_dir=constants.DISK_CACHE_DIR)
    logger.info(
        "建立匯率客戶端：%s（timeout=%.1fs, attempts=%d, cache=%s）",
        constants.FX_UPSTREAM_BASE_URL,
        constants.FX_UPSTREAM_TIMEOUT,
        constants.FX_RETRY_ATTEMPTS,
        constants.DISK_CACHE_DIR,
    )
    return ExchangeRateClient(
        cache=cache,
        base_url=constants.FX_UPSTREAM_BASE_URL,
        timeout=constants.FX_UPSTREAM_TIMEOUT,
        retry_policy=RetryPolicy(max_attempts=constants.FX_RETRY_ATTEMPTS),
    )


def get_rate_source() -> RateSource:
    """FastAPI dependency：回傳程序內共用的 RateSource。"""
    global _client
    if _client is None:
        with _lock:
            if _client is None:
                _client = build_rate_source()
    return _client
