"""
Domain — 集中管理所有常數與閾值。
避免散落在各模組中的 magic numbers / magic strings。
別名表、單位表為唯讀結構，於匯入時建立一次，執行期不得修改。
"""

import os as _os
from types import MappingProxyType

# ---------------------------------------------------------------------------
# Currency Aliases：別名（已大寫、去除非字母/漢字）→ ISO 4217 代碼
# ---------------------------------------------------------------------------
CURRENCY_ALIASES: MappingProxyType = MappingProxyType(
    {
        "USD": "USD",
        "美金": "USD",
        "美元": "USD",
        "CNY": "CNY",
        "RMB": "CNY",
        "人民币": "CNY",
        "JPY": "JPY",
        "日元": "JPY",
        "日币": "JPY",
        "EUR": "EUR",
        "欧元": "EUR",
        "GBP": "GBP",
        "英镑": "GBP",
        "HKD": "HKD",
        "港币": "HKD",
        "港元": "HKD",
        "TWD": "TWD",
        "新台币": "TWD",
        "台币": "TWD",
        "AUD": "AUD",
        "澳元": "AUD",
        "CAD": "CAD",
        "加元": "CAD",
        "加币": "CAD",
        "CHF": "CHF",
        "瑞郎": "CHF",
        "瑞士法郎": "CHF",
        "KRW": "KRW",
        "韩元": "KRW",
        "SGD": "SGD",
        "新加坡元": "SGD",
        "新币": "SGD",
    }
)

# 顯示用貨幣符號；未列出者以 ISO 代碼呈現
CURRENCY_SYMBOLS: MappingProxyType = MappingProxyType(
    {
        "USD": "$",
        "CNY": "CN¥",
        "JPY": "¥",
        "EUR": "€",
        "GBP": "£",
        "HKD": "HK$",
        "TWD": "NT$",
        "AUD": "A$",
        "CAD": "CA$",
        "KRW": "₩",
    }
)

# ---------------------------------------------------------------------------
# Amount Units：金額縮寫單位 → 倍數
# ---------------------------------------------------------------------------
AMOUNT_UNITS: MappingProxyType = MappingProxyType(
    {
        "亿": 1e8,
        "万": 1e4,
        "千": 1e3,
        "百": 1e2,
        "W": 1e4,
        "w": 1e4,
        "K": 1e3,
        "k": 1e3,
        "M": 1e6,
        "m": 1e6,
    }
)
DEFAULT_AMOUNT = 1.0

# ---------------------------------------------------------------------------
# Time Range
# ---------------------------------------------------------------------------
DEFAULT_HISTORY_YEARS = 10
DEFAULT_TIME_RANGE = f"{DEFAULT_HISTORY_YEARS}年"
MIN_RANGE_YEARS = 1  # start > end 時重設為 end 往前 1 年

# ---------------------------------------------------------------------------
# Historical Fallback Chain
# ---------------------------------------------------------------------------
MIN_HISTORY_POINTS = 100  # 直接查詢 / 交叉換算的最低資料點數
MIN_REDUCED_HISTORY_POINTS = 50  # 縮短區間後的最低資料點數
LOW_DATA_WARNING_POINTS = 50  # 少於此數量時附加資料量警示
REDUCED_RANGE_YEARS: tuple[int, ...] = (5, 3, 1)
PIVOT_CURRENCY = "EUR"  # 上游資料源為 ECB，以 EUR 為交叉換算基準
TRIANGULATION_POOL_SIZE = 2

# ---------------------------------------------------------------------------
# Upstream Exchange-Rate API (Frankfurter)
# ---------------------------------------------------------------------------
FX_UPSTREAM_BASE_URL = "https://api.frankfurter.app"
FX_UPSTREAM_TIMEOUT = 5.0  # seconds, per call
FX_RETRY_ATTEMPTS = 2
FX_RETRY_WAIT_MIN = 0.5  # seconds
FX_RETRY_WAIT_MAX = 2.0  # seconds
FX_RETRYABLE_STATUS: frozenset = frozenset({429, 500, 502, 503, 504})

# ---------------------------------------------------------------------------
# Cache Configuration
# ---------------------------------------------------------------------------
LATEST_RATE_TTL = 300  # 5 minutes
HISTORY_RATE_TTL = 3600  # 1 hour
RATE_CACHE_MAXSIZE = 256

# ---------------------------------------------------------------------------
# Persistent Data Directory: root for all app-written state files
# ---------------------------------------------------------------------------
DATA_DIR = _os.getenv("DATA_DIR", "/app/data")

# ---------------------------------------------------------------------------
# Disk Cache (L2)：持久化快取，容器重啟後仍可使用
# ---------------------------------------------------------------------------
DISK_CACHE_DIR = "/app/data/fx_cache"
DISK_CACHE_SIZE_LIMIT = 50 * 1024 * 1024  # 50 MB

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
CORS_ALLOW_ORIGIN = "*"
REQUEST_ID_HEADER = "X-Request-ID"

# ---------------------------------------------------------------------------
# i18n
# ---------------------------------------------------------------------------
DEFAULT_LANGUAGE = "zh-CN"
SUPPORTED_LANGUAGES: tuple[str, ...] = ("zh-CN", "en")

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
# 未預期錯誤的通用訊息 i18n key（避免外洩內部細節）
GENERIC_ERROR_MESSAGE = "errors.internal"
