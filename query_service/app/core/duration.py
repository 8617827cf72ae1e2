"""
Relative-duration tokens and explicit timestamps to absolute query windows.

A duration token is ``<N>h`` or ``<N>d`` (``"3h"``, ``"7d"``), always
anchored at "now".  A magnitude that is not a plain run of digits falls back
to ``1`` instead of failing: ``"xh"`` resolves to the last hour, and so
does a magnitude whose window would not fit in signed 64-bit seconds.  That
leniency silently changes the requested window on malformed input and
dashboards rely on it, so it stays.  An unknown suffix yields the
``INVALID_WINDOW`` sentinel, which callers must reject before querying.
"""

import re
import time

from .models import INVALID_WINDOW, TimeWindow

HOUR = 3600
DAY = 24 * HOUR

UNIT_SECONDS = {"h": HOUR, "d": DAY}

DEFAULT_LOOKBACK_SECONDS = HOUR

_DIGITS = re.compile(r"[0-9]+")

# Window edges are signed 64-bit unix seconds on the wire
INT64_MAX = 2**63 - 1


def resolve_duration(token: str | None, now: int | None = None) -> TimeWindow:
    """Resolve *token* into ``[now - N units, now]``.

    Args:
        token: Duration token such as ``"3h"`` or ``"2d"``.
        now: Anchor in unix seconds; sampled once from the wall clock when
            omitted so both window edges share the same instant.

    Returns:
        The resolved window, or ``INVALID_WINDOW`` for an unknown suffix.
    """
    if not token:
        return INVALID_WINDOW

    unit = UNIT_SECONDS.get(token[-1])
    if unit is None:
        return INVALID_WINDOW

    magnitude_text = token[:-1]
    magnitude = int(magnitude_text) if _DIGITS.fullmatch(magnitude_text) else 1
    if magnitude * unit > INT64_MAX:
        magnitude = 1

    if now is None:
        now = int(time.time())
    return TimeWindow(now - magnitude * unit, now)


def parse_timestamp(value: str | int | None, default: int) -> int:
    """Parse an explicit unix timestamp, falling back to *default*."""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def explicit_window(start: str | int | None, end: str | int | None, now: int | None = None) -> TimeWindow:
    """Window from optional ``start``/``end`` parameters.

    Missing or unparseable edges default to the last hour ending now.
    """
    if now is None:
        now = int(time.time())
    return TimeWindow(
        parse_timestamp(start, now - DEFAULT_LOOKBACK_SECONDS),
        parse_timestamp(end, now),
    )
