"""
Infrastructure — 二層讀穿快取（L1 記憶體 + L2 磁碟）。
以上游請求 URL 為 key，每筆資料各自帶 TTL。
快取僅為加速用途：讀寫失敗一律吞下並記錄，絕不讓請求失敗。
"""

import contextlib
import threading
import time
from typing import Any, NamedTuple

import diskcache
from cachetools import TLRUCache

from domain.constants import DISK_CACHE_SIZE_LIMIT, RATE_CACHE_MAXSIZE
from logging_config import get_logger

logger = get_logger(__name__)


class _Entry(NamedTuple):
    value: Any
    ttl: int


def _entry_expiry(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class TieredCache:
    """
    L1 (cachetools.TLRUCache，每筆 TTL) → L2 (diskcache，expire=ttl)。
    L2 命中時回填 L1；L2 僅在提供 disk_dir 時啟用。
    """

    def __init__(
        self,
        disk_dir: str | None = None,
        maxsize: int = RATE_CACHE_MAXSIZE,
        size_limit: int = DISK_CACHE_SIZE_LIMIT,
    ) -> None:
        self._l1: TLRUCache = TLRUCache(
            maxsize=maxsize, ttu=_entry_expiry, timer=time.monotonic
        )
        self._lock = threading.Lock()
        self._disk: diskcache.Cache | None = None
        if disk_dir:
            try:
                self._disk = diskcache.Cache(disk_dir, size_limit=size_limit)
            except Exception as e:
                logger.warning("無法開啟磁碟快取 %s：%s，僅使用 L1。", disk_dir, e)

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._l1.get(key)
        if entry is not None:
            logger.debug("命中 L1 快取：%s", key)
            return entry.value

        if self._disk is None:
            return None
        try:
            value = self._disk.get(key)
        except Exception as e:
            logger.debug("讀取 L2 快取失敗（%s）：%s", key, e)
            return None
        if value is None:
            return None

        logger.debug("命中 L2 磁碟快取：%s", key)
        ttl = self._remaining_disk_ttl(key)
        if ttl > 0:
            with self._lock:
                self._l1[key] = _Entry(value, ttl)
        return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        if value is None or ttl <= 0:
            return
        try:
            with self._lock:
                self._l1[key] = _Entry(value, ttl)
        except Exception as e:
            logger.debug("寫入 L1 快取失敗（%s）：%s", key, e)
        if self._disk is not None:
            with contextlib.suppress(Exception):
                self._disk.set(key, value, expire=ttl)

    def clear(self) -> dict:
        """清除 L1 與 L2 快取。"""
        with self._lock:
            self._l1.clear()
        if self._disk is not None:
            with contextlib.suppress(Exception):
                self._disk.clear()
        logger.info("已清除匯率快取（L1 + L2）。")
        return {"l1_cleared": True, "l2_cleared": self._disk is not None}

    def _remaining_disk_ttl(self, key: str) -> int:
        """L2 剩餘存活秒數；無法取得時回傳 0（不回填 L1）。"""
        try:
            _, expire_time = self._disk.get(key, expire_time=True)  # type: ignore[union-attr]
        except Exception:
            return 0
        if expire_time is None:
            return 0
        return int(expire_time - time.time())
