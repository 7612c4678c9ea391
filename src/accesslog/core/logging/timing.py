"""Clock readings and duration/timestamp rendering used by the time and latency tags."""

import time
from datetime import datetime, timezone

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND


def monotonic_ns() -> int:
    return time.perf_counter_ns()


def _fraction(value: int, digits: int) -> str:
    """Render `value` as a decimal fraction of `digits` digits, trailing zeros trimmed."""
    text = f"{value:0{digits}d}".rstrip("0")
    return f".{text}" if text else ""


def format_duration(ns: int) -> str:
    """
    Human-readable duration, e.g. "850ns", "12.5µs", "52.3ms", "1.5s", "2m3.5s", "1h0m0s".

    Sub-second values use the largest unit that keeps the integer part
    non-zero; longer values are split into hours, minutes and fractional
    seconds. The rendering is exact: no digit of `ns` is rounded away.
    """
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    u = abs(ns)

    if u < MICROSECOND:
        return f"{sign}{u}ns"
    if u < MILLISECOND:
        whole, frac = divmod(u, MICROSECOND)
        return f"{sign}{whole}{_fraction(frac, 3)}µs"
    if u < SECOND:
        whole, frac = divmod(u, MILLISECOND)
        return f"{sign}{whole}{_fraction(frac, 6)}ms"

    total_seconds, frac = divmod(u, SECOND)
    minutes, seconds = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)
    text = f"{seconds}{_fraction(frac, 9)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{text}"
    if minutes:
        return f"{sign}{minutes}m{text}"
    return f"{sign}{text}"


_UNITS = {"h": 3600 * SECOND, "m": 60 * SECOND, "s": SECOND, "ms": MILLISECOND, "µs": MICROSECOND, "ns": NANOSECOND}


def parse_duration(text: str) -> int:
    """
    Inverse of format_duration for its own output. Returns nanoseconds.

    Raises:
        ValueError: when `text` is not a duration produced by format_duration.
    """
    sign = -1 if text.startswith("-") else 1
    text = text.lstrip("-")
    if text == "0s":
        return 0
    total = 0
    number = ""
    i = 0
    while i < len(text):
        ch = text[i]
        if ch.isdigit() or ch == ".":
            number += ch
            i += 1
            continue
        unit = next((u for u in ("ms", "µs", "ns") if text.startswith(u, i)), ch)
        if unit not in _UNITS or not number:
            raise ValueError(f"invalid duration: {text!r}")
        whole, _, frac = number.partition(".")
        scale = _UNITS[unit]
        total += int(whole) * scale
        if frac:
            total += int(frac) * scale // 10 ** len(frac)
        number = ""
        i += len(unit)
    if number:
        raise ValueError(f"missing unit in duration: {text!r}")
    return sign * total


def _local_now(now_ns: int) -> datetime:
    seconds, _ = divmod(now_ns, SECOND)
    return datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone()


def _offset(dt: datetime) -> str:
    offset = dt.strftime("%z")
    if offset in ("+0000", ""):
        return "Z"
    return f"{offset[:3]}:{offset[3:]}"


def format_rfc3339(now_ns: int) -> str:
    """RFC 3339 in local time with seconds precision: 2024-05-01T10:20:30+02:00."""
    dt = _local_now(now_ns)
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + _offset(dt)


def format_rfc3339_nano(now_ns: int) -> str:
    """RFC 3339 with a nanosecond fraction, trailing zeros trimmed."""
    dt = _local_now(now_ns)
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + _fraction(now_ns % SECOND, 9) + _offset(dt)


def format_custom(now_ns: int, layout: str) -> str:
    """strftime `layout` applied to local time, with microsecond resolution for %f."""
    seconds, frac = divmod(now_ns, SECOND)
    dt = datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone()
    return dt.replace(microsecond=frac // MICROSECOND).strftime(layout)
