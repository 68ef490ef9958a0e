# src/schedule_sync/util/display.py

"""Stateless display helpers (no store access)."""

from __future__ import annotations

import re

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

BLACK = "#000000"
WHITE = "#FFFFFF"


def format_duration(minutes: int) -> str:
    """45 -> "45 min", 60 -> "1 hour", 90 -> "1 hour 30 min"."""
    hours, mins = divmod(int(minutes), 60)
    if hours == 0:
        return f"{mins} min"
    unit = "hour" if hours == 1 else "hours"
    if mins == 0:
        return f"{hours} {unit}"
    return f"{hours} {unit} {mins} min"


def format_duration_short(minutes: int) -> str:
    """45 -> "45 min", 120 -> "2h", 90 -> "1h 30m"."""
    hours, mins = divmod(int(minutes), 60)
    if hours == 0:
        return f"{mins} min"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def contrast_color(background: str) -> str:
    """Black text on light backgrounds, white text on dark ones."""
    m = _HEX_RE.match((background or "").strip())
    if not m:
        raise ValueError(f"not a hex color: {background!r}")
    hex_digits = m.group(1)
    if len(hex_digits) == 3:
        hex_digits = "".join(c * 2 for c in hex_digits)

    r = int(hex_digits[0:2], 16)
    g = int(hex_digits[2:4], 16)
    b = int(hex_digits[4:6], 16)

    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return BLACK if luminance > 0.5 else WHITE
