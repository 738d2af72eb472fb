"""Playback clock — the single source of truth for "current time".

Two states: STOPPED_AT(t) and PLAYING_FROM(t). The clock starts at
STOPPED_AT(0), advances only through tick() while playing, and stops by
itself when it reaches the end of the timeline (no looping). Misuse is
clamped or ignored, never fatal.

Exactly one scheduler should call tick() for a clock. External
transports (an audio element) follow the clock through on_sync()
listeners, which fire on every seek and every playback start.
"""

import logging
import math
from typing import Callable

from .common import clamp

logger = logging.getLogger(__name__)


class Clock:
    def __init__(self, duration: float = 0.0):
        self._duration = max(0.0, float(duration))
        self._time = 0.0
        self._playing = False
        self._listeners: list[Callable[[float], None]] = []

    def __repr__(self):
        state = "PLAYING_FROM" if self._playing else "STOPPED_AT"
        return f"Clock({state}({self._time:.3f}), duration={self._duration:.3f})"

    @property
    def current_time(self) -> float:
        return self._time

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def at_end(self) -> bool:
        return self._time >= self._duration

    def on_sync(self, callback: Callable[[float], None]) -> None:
        """Register a listener called with the time on seek and on play."""
        self._listeners.append(callback)

    def _sync(self) -> None:
        for callback in self._listeners:
            callback(self._time)

    # ── Transitions ────────────────────────────────────────────────

    def play(self) -> None:
        """STOPPED_AT(t) -> PLAYING_FROM(t). No-op when already playing."""
        if self._playing:
            return
        self._playing = True
        self._sync()

    def pause(self) -> None:
        """PLAYING_FROM(t) -> STOPPED_AT(t), freezing the last time."""
        self._playing = False

    def toggle(self) -> None:
        if self._playing:
            self.pause()
        else:
            self.play()

    def seek(self, t: float) -> None:
        """Move the cursor in either state, clamped to [0, duration].

        A NaN target is ignored.
        """
        t = float(t)
        if math.isnan(t):
            return
        self._time = clamp(t, 0.0, self._duration)
        self._sync()

    def tick(self, elapsed: float) -> None:
        """Advance by elapsed real seconds while playing.

        Reaching or passing the end clamps to the duration and stops.
        Ticks while stopped, and elapsed values that are not positive
        (including NaN), are ignored.
        """
        if not self._playing or not elapsed > 0:
            return
        new_time = self._time + elapsed
        if new_time >= self._duration:
            self._time = self._duration
            self._playing = False
            logger.debug("Clock reached end of timeline at %.3fs", self._duration)
            return
        self._time = new_time

    def set_duration(self, duration: float) -> None:
        """Replace the timeline duration; the cursor is clamped into it."""
        self._duration = max(0.0, float(duration))
        if self._time > self._duration:
            self._time = self._duration
