"""
i18n — Internationalization module for backend.
Provides translation function with fallback chain and string interpolation.
"""

import json
from pathlib import Path
from typing import Any

from domain.constants import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from logging_config import get_logger

logger = get_logger(__name__)

# Load all locale files at module import time
_LOCALES_DIR = Path(__file__).parent / "locales"
_TRANSLATIONS: dict[str, dict] = {}

for locale_file in _LOCALES_DIR.glob("*.json"):
    lang_code = locale_file.stem
    try:
        with open(locale_file, encoding="utf-8") as f:
            _TRANSLATIONS[lang_code] = json.load(f)
        logger.info("已載入語言包：%s", lang_code)
    except Exception as e:
        logger.error("載入語言包失敗：%s (%s)", lang_code, e)


def resolve_language(lang: str | None) -> str:
    """
    Map a requested language (query param) to a supported language code.

    Matching is case-insensitive and accepts a bare prefix ("EN", "zh").
    Unknown or empty values resolve to DEFAULT_LANGUAGE.
    """
    if not lang:
        return DEFAULT_LANGUAGE
    requested = lang.strip().lower()
    for code in SUPPORTED_LANGUAGES:
        if requested == code.lower():
            return code
    for code in SUPPORTED_LANGUAGES:
        if code.lower().split("-")[0] == requested.split("-")[0]:
            return code
    return DEFAULT_LANGUAGE


def t(key: str, lang: str = DEFAULT_LANGUAGE, **kwargs: Any) -> str:
    """
    Translate a key to the specified language with optional formatting.

    Fallback chain: requested lang -> zh-CN -> raw key string

    Args:
        key: Dot-notation key (e.g., "history.title")
        lang: Language code ("zh-CN" or "en")
        **kwargs: Optional format arguments for string interpolation

    Returns:
        Translated string with interpolated values

    Examples:
        >>> t("errors.invalid_amount", lang="en", raw="abc")
        '❌ Invalid amount: abc'
    """
    # Try requested language
    if lang in _TRANSLATIONS:
        value = _get_nested_value(_TRANSLATIONS[lang], key)
        if value:
            return _safe_format(value, **kwargs)

    # Fallback to Simplified Chinese
    if lang != DEFAULT_LANGUAGE and DEFAULT_LANGUAGE in _TRANSLATIONS:
        value = _get_nested_value(_TRANSLATIONS[DEFAULT_LANGUAGE], key)
        if value:
            logger.warning("翻譯鍵 '%s' 在 '%s' 中未找到，使用簡體中文後備", key, lang)
            return _safe_format(value, **kwargs)

    # Last resort: return the key itself
    logger.warning("翻譯鍵 '%s' 未找到（語言：%s），返回鍵本身", key, lang)
    return key


def _get_nested_value(data: dict, dot_key: str) -> str | None:
    """
    Retrieve nested dict value using dot notation.

    Args:
        data: Translation dict
        dot_key: "parent.child.key" notation

    Returns:
        String value or None if not found
    """
    keys = dot_key.split(".")
    current = data
    for k in keys:
        if not isinstance(current, dict) or k not in current:
            return None
        current = current[k]
    return current if isinstance(current, str) else None


def _safe_format(template: str, **kwargs: Any) -> str:
    """
    Safely format a template string with given kwargs.

    Falls back to raw template if formatting fails.
    """
    try:
        return template.format(**kwargs)
    except (KeyError, ValueError) as e:
        logger.warning("字串格式化失敗：%s（模板：%s，參數：%s）", e, template, kwargs)
        return template
