# -*- coding: utf-8 -*-

import datetime as dt
import math
import time
from typing import Optional

HOUR_SECONDS = 60 * 60


def now_ts() -> float:
    return time.time()


def to_iso(ts: float) -> str:
    """Epoch seconds -> UTC ISO8601 with milliseconds and a Z suffix."""
    d = dt.datetime.fromtimestamp(ts, tz=dt.timezone.utc)
    return d.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def local_datetime(ts: float) -> Optional[dt.datetime]:
    """Local datetime for epoch seconds, or None outside the platform's range."""
    try:
        return dt.datetime.fromtimestamp(ts)
    except (ValueError, OverflowError, OSError):
        return None


def parse_iso(text: str) -> Optional[float]:
    """
    ISO8601 -> epoch seconds, or None when unparseable. Naive input is local time.
    Instants that cannot be shown as a local date (year 10000 after offsets) are None too.
    """
    if not isinstance(text, str) or not text.strip():
        return None
    raw = text.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        ts = dt.datetime.fromisoformat(raw).timestamp()
        dt.datetime.fromtimestamp(ts, tz=dt.timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None
    if local_datetime(ts) is None:
        return None
    return ts


def to_date_key(d: dt.datetime) -> str:
    return d.strftime("%Y-%m-%d")


def date_key_for_ts(ts: float) -> str:
    d = local_datetime(ts)
    return to_date_key(d) if d is not None else ""


def local_today_key() -> str:
    return to_date_key(dt.datetime.now())


def minutes_from_start_of_day(iso: str) -> float:
    ts = parse_iso(iso)
    d = local_datetime(ts) if ts is not None else None
    if d is None:
        return 0.0
    return d.hour * 60 + d.minute + d.second / 60


def to_local_hm(iso: str) -> str:
    ts = parse_iso(iso)
    d = local_datetime(ts) if ts is not None else None
    if d is None:
        return "--:--"
    return d.strftime("%H:%M")


def to_local_datetime(iso: str) -> str:
    ts = parse_iso(iso)
    d = local_datetime(ts) if ts is not None else None
    if d is None:
        return ""
    return d.strftime("%Y-%m-%d %H:%M")


def format_remaining(seconds: float) -> str:
    safe = max(0, int(math.floor(seconds)))
    return f"{safe // 60:02d}:{safe % 60:02d}"


def format_wall_clock(ts: Optional[float] = None) -> str:
    d = dt.datetime.fromtimestamp(now_ts() if ts is None else ts)
    return d.strftime("%H:%M:%S")


def countdown_title(mode: str, status: str, remaining_sec: int) -> Optional[str]:
    """
    Window title while counting; None means "show the default title".
    """
    if mode == "break" or status in ("running", "paused"):
        return f"{format_remaining(remaining_sec)} {mode}"
    return None


# ---- dial ----
def calc_red_ratio(remaining_sec: float, total_sec: float) -> float:
    if total_sec <= 0:
        return 0.0
    return min(1.0, max(0.0, remaining_sec / total_sec))


def calc_hour_cap_ratio(remaining_sec: float) -> float:
    if remaining_sec <= 0:
        return 0.0
    return min(1.0, remaining_sec / HOUR_SECONDS)


def calc_minute_hand_angle(remaining_sec: float) -> float:
    if remaining_sec <= 0:
        return 0.0
    normalized = remaining_sec % HOUR_SECONDS
    if normalized == 0:
        return 360.0
    return (normalized / HOUR_SECONDS) * 360
