#!/usr/bin/env python3
"""
Locale parity checker for the response templates.

Verifies that every file in backend/i18n/locales carries exactly the same keys
as the default locale (zh-CN). Exits non-zero on any mismatch.

Usage:
    python scripts/check_locale_parity.py
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
LOCALES_DIR = REPO_ROOT / "backend" / "i18n" / "locales"
REFERENCE_LOCALE = "zh-CN"


def _flatten(obj: dict, prefix: str = "") -> dict[str, str]:
    """Collect leaf templates keyed by dot-notation path."""
    leaves: dict[str, str] = {}
    for k, v in obj.items():
        full = f"{prefix}.{k}" if prefix else k
        if isinstance(v, dict):
            leaves.update(_flatten(v, full))
        else:
            leaves[full] = str(v)
    return leaves


def check_locales(directory: Path = LOCALES_DIR) -> list[str]:
    """Return error messages for keys missing from, or extra to, the reference locale."""
    locale_files = sorted(directory.glob("*.json"))
    if not locale_files:
        return [f"No locale files found in {directory}"]

    locales: dict[str, dict[str, str]] = {}
    for path in locale_files:
        with open(path, encoding="utf-8") as f:
            locales[path.stem] = _flatten(json.load(f))

    reference = locales.get(REFERENCE_LOCALE)
    if reference is None:
        return [f"Reference locale {REFERENCE_LOCALE}.json is missing"]

    errors: list[str] = []
    for locale, templates in sorted(locales.items()):
        if locale == REFERENCE_LOCALE:
            continue
        errors.extend(
            f"[{locale}] Missing key: {key}" for key in sorted(reference.keys() - templates.keys())
        )
        errors.extend(
            f"[{locale}] Extra key: {key}" for key in sorted(templates.keys() - reference.keys())
        )
    return errors


def main() -> int:
    errors = check_locales()
    if errors:
        print("Locale parity check FAILED:\n", file=sys.stderr)
        for err in errors:
            print(f"  {err}", file=sys.stderr)
        print(f"\n{len(errors)} issue(s) found.", file=sys.stderr)
        return 1

    count = len(list(LOCALES_DIR.glob("*.json")))
    print(f"Locale parity check PASSED: {count} locale files checked.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
