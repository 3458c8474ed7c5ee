"""Parsing and normalization helpers for configuration values.

Each helper returns ``None`` for unusable input so callers can log a warning
and keep the current value.
"""

from typing import Any, Optional

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _try_parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in {"true", "1", "yes", "on"}:
        return True
    if normalized in {"false", "0", "no", "off"}:
        return False
    return None


def _try_parse_positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _try_parse_positive_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        parsed = float(str(value).strip())
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _normalize_log_level(value: Any) -> Optional[str]:
    normalized = str(value).strip().upper()
    if normalized == "WARN":
        normalized = "WARNING"
    if normalized not in _VALID_LOG_LEVELS:
        return None
    return normalized


def _mask_secret(value: str, visible: int = 12) -> str:
    """Show the first *visible* characters of a secret followed by ``...``."""
    if not value:
        return ""
    return value[:visible] + "..."
