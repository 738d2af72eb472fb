"""Stage-position interpolation from sparse keyframes.

Performers hold a mark, then move on cue. Between two consecutive Holds
H[i] and H[i+1] the performer stays at H[i] until a Transition marker
inside (H[i].time, H[i+1].time] opens the glide window, then moves
linearly to arrive at H[i+1] exactly at H[i+1].time. Without a
Transition in the bracket the move is an instantaneous jump at
H[i+1].time.

Before the first Hold and after the last one the position is clamped to
that Hold. Inputs are never mutated; every query sorts a copy.
"""

from bisect import bisect_right

import numpy as np

from .common import clamp, lerp
from .models import Hold, Transition


def _split(keyframes) -> tuple[list[Hold], list[float]]:
    """Holds sorted by time, and sorted Transition times."""
    holds = sorted((k for k in keyframes if isinstance(k, Hold)), key=lambda k: k.time)
    cues = sorted(k.time for k in keyframes if isinstance(k, Transition))
    return holds, cues


def _glide_start(cues: list[float], t0: float, t1: float) -> float | None:
    """Earliest Transition time m with t0 < m <= t1, or None."""
    j = bisect_right(cues, t0)
    if j < len(cues) and cues[j] <= t1:
        return cues[j]
    return None


def position_at(keyframes, t: float) -> tuple[float, float] | None:
    """Stage position (x, y) of a performer at time t.

    Returns None when there is no Hold to anchor on.
    """
    holds, cues = _split(keyframes)
    if not holds:
        return None

    first, last = holds[0], holds[-1]
    if t <= first.time:
        return first.position
    if t >= last.time:
        return last.position

    # first.time < t < last.time, so i is in [0, n-2].
    times = [h.time for h in holds]
    i = bisect_right(times, t) - 1
    a, b = holds[i], holds[i + 1]

    start = _glide_start(cues, a.time, b.time)
    if start is None or t < start:
        return a.position

    span = b.time - start
    progress = 1.0 if span <= 0 else clamp((t - start) / span, 0.0, 1.0)
    return (lerp(a.x, b.x, progress), lerp(a.y, b.y, progress))


def sample_positions(keyframes, times) -> np.ndarray:
    """Vectorized position_at over many times.

    Args:
        keyframes: Hold / Transition keyframes of one performer.
        times: 1-D array-like of timeline times in seconds.

    Returns:
        Float array of shape (len(times), 2). Rows are NaN when the
        keyframes contain no Hold.
    """
    times = np.asarray(times, dtype=float).reshape(-1)
    out = np.full((times.size, 2), np.nan)

    holds, cues = _split(keyframes)
    if not holds or times.size == 0:
        return out

    ht = np.array([h.time for h in holds])
    hxy = np.array([h.position for h in holds])
    n = len(holds)
    if n == 1:
        out[:] = hxy[0]
        return out

    # Glide start per bracket; +inf marks "no transition" (hold, then jump).
    glide = np.full(n - 1, np.inf)
    for i in range(n - 1):
        cue = _glide_start(cues, ht[i], ht[i + 1])
        if cue is not None:
            glide[i] = cue

    idx = np.clip(np.searchsorted(ht, times, side="right") - 1, 0, n - 2)
    start = glide[idx]
    end = ht[idx + 1]

    with np.errstate(divide="ignore", invalid="ignore"):
        span = end - start
        progress = np.where(span > 0, (times - start) / span, 1.0)
    progress = np.where(times >= start, np.clip(progress, 0.0, 1.0), 0.0)

    a = hxy[idx]
    b = hxy[idx + 1]
    out = a + (b - a) * progress[:, None]

    out[times <= ht[0]] = hxy[0]
    out[times >= ht[-1]] = hxy[-1]
    return out


def path_points(keyframes) -> list[tuple[float, float]]:
    """Hold positions in time order: the route a performer walks."""
    holds, _ = _split(keyframes)
    return [h.position for h in holds]
