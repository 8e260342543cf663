from __future__ import annotations

import os
import re
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Fallback clean-up for strings datetime can't parse: drop the seconds field.
_FRACTION_SECONDS_RE = re.compile(r":\d{2}\.\d{3}Z$")
_SECONDS_RE = re.compile(r":\d{2}Z$")
_SECONDS_WITH_ZONE_RE = re.compile(r":\d{2}\s+(UTC|GMT|[+-]\d{4})")


def _target_zone(tz_name: Optional[str]):
    name = tz_name if tz_name is not None else os.getenv("NITAN_TIMEZONE", "")
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def _strip_seconds(value: str) -> str:
    value = _FRACTION_SECONDS_RE.sub("Z", value)
    value = _SECONDS_RE.sub("Z", value)
    return _SECONDS_WITH_ZONE_RE.sub(r" \1", value)


def format_timestamp(value: Optional[str], tz_name: Optional[str] = None) -> Optional[str]:
    """
    Format an ISO 8601 timestamp as "YYYY-MM-DD HH:MM".

    Example: "2025-09-20T14:03:25.000Z" -> "2025-09-20 14:03" (UTC by default,
    NITAN_TIMEZONE or `tz_name` selects another zone). Naive timestamps are
    treated as UTC. Unparseable input is returned with its seconds stripped.
    """
    if not value:
        return value

    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return _strip_seconds(value)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(_target_zone(tz_name)).strftime("%Y-%m-%d %H:%M")


__all__ = ["format_timestamp"]
