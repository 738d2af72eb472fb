"""choreosync.common — shared numeric, time and path helpers.

Contains: clamping and linear interpolation, frame snapping, timecode
formatting, decimal parsing for persisted records, and ${var} path
resolution for manifests.
"""

import math
import re


# ── Numeric helpers ────────────────────────────────────────────────

def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value into [lo, hi]."""
    return min(max(value, lo), hi)


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation from a to b at fraction t."""
    return a + (b - a) * t


def parse_number(value, field: str) -> float:
    """Parse a float that may arrive as a decimal string.

    Persisted records carry decimals as strings ("12.500"). Booleans and
    non-finite values are rejected.
    """
    if isinstance(value, bool):
        raise ValueError(f"{field}: expected a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field}: expected a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"{field}: must be finite, got {value!r}")
    return number


# ── Time helpers ───────────────────────────────────────────────────

def snap_to_frame(time_sec: float, fps: int) -> float:
    """Snap a time to the nearest frame boundary of an fps grid."""
    return round(time_sec * fps) / fps


def format_time_ms(seconds: float) -> str:
    """Format seconds as MM:SS.cc (hundredths)."""
    total = round(seconds * 100)
    mins, rest = divmod(total, 6000)
    secs, hundredths = divmod(rest, 100)
    return f"{mins:02d}:{secs:02d}.{hundredths:02d}"


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return paths[key]
    return re.sub(r"\$\{(\w+)\}", _replace, text)
