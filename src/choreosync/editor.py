"""Keyframe editor — the only writer of stage-position keyframes.

Every command validates its input before touching anything and returns
a new PerformerTrack; the track passed in is never modified. Malformed
keyframes (a Hold without x/y, coordinates outside [0, 1], negative
times) raise ValueError and never reach a stored collection.

commit_hold is the main editing gesture: the user places a performer at
the clock's current time. When the new mark is far enough from the
previous one, a Transition is inserted a fixed lead time before it so
the performer glides into place instead of jumping.
"""

import logging
from dataclasses import replace

from .models import Hold, PerformerTrack, Transition
from .settings import EngineSettings

logger = logging.getLogger(__name__)


def _hold_near(track: PerformerTrack, t: float, epsilon: float) -> Hold | None:
    for hold in track.holds():
        if abs(hold.time - t) < epsilon:
            return hold
    return None


def _check_unique_holds(keyframes, epsilon: float) -> None:
    """At most one Hold per timestamp (within epsilon)."""
    times = sorted(k.time for k in keyframes if isinstance(k, Hold))
    for a, b in zip(times, times[1:]):
        if b - a < epsilon:
            raise ValueError(
                f"Two holds at the same time: {a:.3f}s and {b:.3f}s "
                f"(tolerance {epsilon}s)"
            )


def commit_hold(
    track: PerformerTrack,
    t: float,
    x: float,
    y: float,
    settings: EngineSettings | None = None,
) -> PerformerTrack:
    """Place the performer at (x, y) from time t.

    An existing Hold within epsilon of t keeps its id and time and takes
    the new position. Otherwise a new Hold is inserted, and if the
    preceding Hold is more than transition_duration earlier (and no
    Transition already sits at that lead time) a Transition is inserted
    at t - transition_duration.

    Raises:
        ValueError: Missing or out-of-range coordinates, negative time.
    """
    settings = settings or EngineSettings()
    candidate = Hold(t, x, y)

    existing = _hold_near(track, t, settings.epsilon)
    if existing is not None:
        updated = replace(existing, x=x, y=y)
        return track.with_keyframes(
            updated if k.id == existing.id else k for k in track.keyframes
        )

    keyframes = list(track.keyframes) + [candidate]

    earlier = [h for h in track.holds() if h.time < t]
    if earlier:
        prev = max(earlier, key=lambda h: h.time)
        lead = settings.transition_duration
        if t - prev.time > lead:
            cue_time = t - lead
            has_cue = any(
                isinstance(k, Transition) and abs(k.time - cue_time) < settings.epsilon
                for k in track.keyframes
            )
            if not has_cue:
                keyframes.append(Transition(cue_time))
                logger.debug(
                    "Slot %d: auto transition at %.2fs (%.2fs before hold)",
                    track.slot, cue_time, lead,
                )

    return track.with_keyframes(keyframes)


def remove_keyframe(track: PerformerTrack, keyframe_id: str) -> PerformerTrack:
    """Drop one keyframe by id."""
    track.keyframe(keyframe_id)
    return track.with_keyframes(k for k in track.keyframes if k.id != keyframe_id)


def move_keyframe(
    track: PerformerTrack,
    keyframe_id: str,
    t: float,
    settings: EngineSettings | None = None,
) -> PerformerTrack:
    """Retime one keyframe, keeping its id and position.

    Raises:
        ValueError: Unknown id, negative time, or a Hold landing on
            another Hold's timestamp.
    """
    settings = settings or EngineSettings()
    moved = replace(track.keyframe(keyframe_id), time=t)
    keyframes = [moved if k.id == keyframe_id else k for k in track.keyframes]
    _check_unique_holds(keyframes, settings.epsilon)
    return track.with_keyframes(keyframes)


def replace_keyframes(
    track: PerformerTrack,
    keyframes,
    settings: EngineSettings | None = None,
) -> PerformerTrack:
    """Swap in a whole keyframe set (bulk load or undo).

    Raises:
        ValueError: Non-keyframe entries, or duplicate Hold timestamps.
    """
    settings = settings or EngineSettings()
    keyframes = list(keyframes)
    for i, kf in enumerate(keyframes):
        if not isinstance(kf, (Hold, Transition)):
            raise ValueError(f"Keyframe {i}: expected Hold or Transition, got {kf!r}")
    _check_unique_holds(keyframes, settings.epsilon)
    return track.with_keyframes(keyframes)
