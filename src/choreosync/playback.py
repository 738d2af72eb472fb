"""Per-frame resolution and the editing session that drives it.

resolve_frame() is what a renderer calls once per displayed frame: for
every performer slot it returns the active layer, the time inside that
layer's clip, the clip frame to show, and the stage position.

Session owns one open project. It is the single writer of the project
(commands swap in a whole new track at once) and the single driver of
its clock.
"""

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np

from . import editor, layers
from .clock import Clock
from .interpolate import position_at, sample_positions
from .models import Layer, PerformerTrack, Project
from .resolver import active_layer_at, local_time, source_frame_index
from .settings import EngineSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformerFrame:
    slot: int
    layer: Layer | None
    local_time: float | None
    frame_index: int | None
    position: tuple[float, float] | None


def resolve_track(track: PerformerTrack, t: float, ready_only: bool = False) -> PerformerFrame:
    candidates = track.layers
    if ready_only:
        candidates = [c for c in candidates if c.source is not None and c.source.is_ready]
    layer = active_layer_at(candidates, t)
    return PerformerFrame(
        slot=track.slot,
        layer=layer,
        local_time=local_time(layer, t) if layer else None,
        frame_index=source_frame_index(layer, t) if layer else None,
        position=position_at(track.keyframes, t),
    )


def resolve_frame(project: Project, t: float, ready_only: bool = False) -> list[PerformerFrame]:
    """Resolve every performer at timeline time t.

    With ready_only, layers whose source is missing or not READY are
    ignored, so a clip still processing never blanks the one under it.
    """
    return [resolve_track(track, t, ready_only) for track in project.tracks]


def frame_times(start: float, end: float, fps: float) -> np.ndarray:
    """Frame-grid times from start to end inclusive (when end is on the grid)."""
    if fps <= 0:
        raise ValueError(f"fps must be > 0, got {fps!r}")
    if end < start:
        raise ValueError(f"end ({end}) must be >= start ({start})")
    count = int(np.floor((end - start) * fps + 1e-9)) + 1
    return start + np.arange(count) / fps


def sample_timeline(
    project: Project,
    fps: float,
    start: float = 0.0,
    end: float | None = None,
    ready_only: bool = False,
) -> dict:
    """Resolve every performer on a regular frame grid.

    Positions are computed in one vectorized pass per performer; layers
    are resolved frame by frame.

    Returns:
        {"fps", "start", "end", "times": ndarray,
         "performers": {slot: {"positions": ndarray (n, 2),
                               "layers": [layer id or None, ...]}}}
    """
    if end is None:
        end = project.timeline_duration
    times = frame_times(start, end, fps)

    performers = {}
    for track in project.tracks:
        candidates = track.layers
        if ready_only:
            candidates = [c for c in candidates if c.source is not None and c.source.is_ready]
        active = [active_layer_at(candidates, t) for t in times]
        performers[track.slot] = {
            "positions": sample_positions(track.keyframes, times),
            "layers": [layer.id if layer else None for layer in active],
        }
    return {"fps": fps, "start": start, "end": end, "times": times, "performers": performers}


# Commands a Session can apply to one track. Each takes the track first
# and returns a new track.
TRACK_COMMANDS: dict[str, Callable[..., PerformerTrack]] = {
    "commit_hold": editor.commit_hold,
    "remove_keyframe": editor.remove_keyframe,
    "move_keyframe": editor.move_keyframe,
    "replace_keyframes": editor.replace_keyframes,
    "add_layer": layers.add_layer,
    "add_patch": layers.add_patch,
    "update_layer": layers.update_layer,
    "move_layer": layers.move_layer,
    "remove_layer": layers.remove_layer,
    "bring_to_front": layers.bring_to_front,
    "bring_forward": layers.bring_forward,
    "send_backward": layers.send_backward,
    "send_to_back": layers.send_to_back,
}

# Commands that take an EngineSettings keyword.
_SETTINGS_COMMANDS = {"commit_hold", "move_keyframe", "replace_keyframes", "add_patch"}


class Session:
    """One open project: its current snapshot plus its playback clock."""

    def __init__(self, project: Project, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()
        self._project = project
        self.clock = Clock(project.timeline_duration)

    @property
    def project(self) -> Project:
        """Current immutable snapshot; safe to hand to readers."""
        return self._project

    def apply(self, command: str, slot: int, *args, **kwargs) -> PerformerTrack:
        """Run a track command and publish the new project snapshot.

        The timeline duration is recomputed afterwards, since layer
        commands can move the end of the timeline.

        Raises:
            ValueError: Unknown command, or whatever the command rejects.
                The project is unchanged on error.
        """
        if command not in TRACK_COMMANDS:
            raise ValueError(
                f"Unknown command '{command}'. Valid: {sorted(TRACK_COMMANDS)}"
            )
        if command in _SETTINGS_COMMANDS:
            kwargs.setdefault("settings", self.settings)
        track = TRACK_COMMANDS[command](self._project.track(slot), *args, **kwargs)
        self._project = self._project.with_track(track)
        self.clock.set_duration(self._project.timeline_duration)
        return track

    def commit_hold(self, slot: int, x: float, y: float) -> PerformerTrack:
        """Place a performer at (x, y) at the clock's current time."""
        return self.apply("commit_hold", slot, self.clock.current_time, x, y)

    def add_patch(self, slot: int, duration: float, **kwargs) -> PerformerTrack:
        """Overlay a patch clip at the clock's current time."""
        return self.apply("add_patch", slot, self.clock.current_time, duration, **kwargs)

    def advance(self, elapsed: float) -> list[PerformerFrame]:
        """Tick the clock and resolve the frame at the new time."""
        self.clock.tick(elapsed)
        return self.frame()

    def frame(self, ready_only: bool = False) -> list[PerformerFrame]:
        return resolve_frame(self._project, self.clock.current_time, ready_only)
