"""Durations and timestamps in the textual forms used by resource manifests."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

_SECOND = 1_000_000_000
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE
_NANOS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}
_UNIT = "ns|us|\u00b5s|\u03bcs|ms|s|m|h"
_WHOLE = re.compile(rf"(?:(?:\d+(?:\.\d*)?|\.\d+)(?:{_UNIT}))+")
_COMPONENT = re.compile(rf"(\d*)(?:\.(\d*))?({_UNIT})")
_MAX_NANOS = 2**63 - 1


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``"1h30m"`` or ``"1.5s"``; sub-microsecond precision is dropped."""
    negative = text[:1] == "-"
    body = text[1:] if text[:1] in ("+", "-") else text
    if body == "0":
        return timedelta(0)
    if not _WHOLE.fullmatch(body):
        raise ValueError(f"invalid duration {text!r}")
    total = 0
    for whole, fraction, unit in _COMPONENT.findall(body):
        scale = _NANOS[unit]
        total += int(whole or "0") * scale
        if fraction:
            total += int(fraction) * scale // 10 ** len(fraction)
    if total > _MAX_NANOS:
        raise ValueError(f"invalid duration {text!r}: out of range")
    micros = total // 1_000
    return timedelta(microseconds=-micros if negative else micros)


def _decimal(value: int, precision: int) -> str:
    whole, fraction = divmod(value, 10**precision)
    if not fraction:
        return str(whole)
    return f"{whole}." + str(fraction).zfill(precision).rstrip("0")


def format_duration(value: timedelta) -> str:
    """Render a duration in the canonical form, e.g. ``"1h0m0s"`` or ``"500ms"``."""
    nanos = (value // timedelta(microseconds=1)) * 1_000
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)
    if nanos < _SECOND:
        if nanos < 1_000_000:
            return f"{sign}{_decimal(nanos, 3)}\u00b5s"
        return f"{sign}{_decimal(nanos, 6)}ms"
    hours, rest = divmod(nanos, _HOUR)
    minutes, rest = divmod(rest, _MINUTE)
    text = f"{_decimal(rest, 9)}s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as RFC 3339 in UTC; a naive datetime is taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp into a UTC datetime."""
    try:
        parsed = datetime.fromisoformat(re.sub(r"[Zz]$", "+00:00", text))
    except ValueError as exc:
        raise ValueError(f"invalid timestamp {text!r}") from exc
    if parsed.tzinfo is None:
        raise ValueError(f"invalid timestamp {text!r}: missing time zone")
    return parsed.astimezone(timezone.utc)