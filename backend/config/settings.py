"""
Config — 從環境變數覆寫 domain 常數。
在應用程式啟動時呼叫一次 init_settings()（需在建立 rate client 之前）。
"""

import math
import os

from domain import constants
from logging_config import get_logger

logger = get_logger(__name__)


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("環境變數 %s=%r 不是數字，忽略。", name, raw)
        return None
    if not math.isfinite(value):
        logger.warning("環境變數 %s=%r 不是有限數值，忽略。", name, raw)
        return None
    return value


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("環境變數 %s=%r 不是整數，忽略。", name, raw)
        return None


def init_settings() -> None:
    """Override domain constants from environment. Call once at startup."""
    data_dir = os.getenv("DATA_DIR")
    if data_dir:
        constants.DATA_DIR = data_dir
        constants.DISK_CACHE_DIR = os.path.join(data_dir, "fx_cache")

    disk_cache_dir = os.getenv("DISK_CACHE_DIR")
    if disk_cache_dir:
        constants.DISK_CACHE_DIR = disk_cache_dir

    base_url = os.getenv("FX_UPSTREAM_BASE_URL")
    if base_url:
        constants.FX_UPSTREAM_BASE_URL = base_url.rstrip("/")

    timeout = _env_float("FX_UPSTREAM_TIMEOUT")
    if timeout is not None and timeout > 0:
        constants.FX_UPSTREAM_TIMEOUT = timeout

    attempts = _env_int("FX_RETRY_ATTEMPTS")
    if attempts is not None and attempts >= 1:
        constants.FX_RETRY_ATTEMPTS = attempts

    pivot = os.getenv("FX_PIVOT_CURRENCY")
    if pivot:
        constants.PIVOT_CURRENCY = pivot.strip().upper()

    cors_origin = os.getenv("CORS_ALLOW_ORIGIN")
    if cors_origin:
        constants.CORS_ALLOW_ORIGIN = cors_origin
