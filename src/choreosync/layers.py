"""Layer management — adding, moving and re-ordering motion clips.

Every command returns a new PerformerTrack. Priorities decide which
layer wins where clips overlap (see resolver.py):
  - Regular clips get max(existing priorities) + 1 and are appended
    after the track's last clip.
  - Patch clips are dropped at an arbitrary time (snapped to the frame
    grid) and get max(existing priorities, patch threshold) + 1, so a
    patch always outranks every regular clip it overlaps.
"""

import logging
from dataclasses import replace

from .common import snap_to_frame
from .models import Layer, PerformerTrack, SkeletonSource
from .settings import EngineSettings

logger = logging.getLogger(__name__)


# ── Priorities ─────────────────────────────────────────────────────

def next_priority(track: PerformerTrack) -> int:
    return track.max_priority(default=0) + 1


def next_patch_priority(track: PerformerTrack, threshold: int) -> int:
    return max(track.max_priority(default=threshold), threshold) + 1


# ── Adding ─────────────────────────────────────────────────────────

def add_layer(
    track: PerformerTrack,
    duration: float,
    label: str | None = None,
    start: float | None = None,
    source: SkeletonSource | None = None,
) -> PerformerTrack:
    """Append a clip to the track.

    Args:
        track: Track to extend.
        duration: Clip length in seconds (> 0).
        label: Display label.
        start: Timeline start; defaults to the end of the last clip.
        source: Motion clip metadata.
    """
    if start is None:
        start = track.last_end()
    layer = Layer(
        slot=track.slot,
        start=start,
        end=start + duration,
        priority=next_priority(track),
        label=label,
        source=source,
    )
    return track.with_layers(track.layers + (layer,))


def add_patch(
    track: PerformerTrack,
    at: float,
    duration: float,
    label: str | None = None,
    source: SkeletonSource | None = None,
    settings: EngineSettings | None = None,
) -> PerformerTrack:
    """Overlay a corrective clip starting at time `at` (frame-snapped)."""
    settings = settings or EngineSettings()
    start = snap_to_frame(at, settings.snap_fps)
    priority = next_patch_priority(track, settings.patch_threshold)
    layer = Layer(
        slot=track.slot,
        start=start,
        end=start + duration,
        priority=priority,
        label=label,
        source=source,
    )
    logger.debug(
        "Slot %d: patch '%s' at %.2fs, priority %d",
        track.slot, label, start, priority,
    )
    return track.with_layers(track.layers + (layer,))


# ── Editing ────────────────────────────────────────────────────────

def _swap_in(track: PerformerTrack, layer_id: str, new: Layer) -> PerformerTrack:
    return track.with_layers(new if other.id == layer_id else other for other in track.layers)


def update_layer(track: PerformerTrack, layer_id: str, **changes) -> PerformerTrack:
    """Replace fields of one layer (start, end, priority, label, fades...).

    Raises:
        ValueError: Unknown id, unknown field, or an invalid result.
    """
    if "id" in changes or "slot" in changes:
        raise ValueError("Layer id and slot cannot be changed")
    layer = track.layer(layer_id)
    try:
        updated = replace(layer, **changes)
    except TypeError as e:
        raise ValueError(f"Layer {layer_id}: {e}") from None
    return _swap_in(track, layer_id, updated)


def move_layer(
    track: PerformerTrack,
    layer_id: str,
    start: float,
    snap_fps: int | None = None,
) -> PerformerTrack:
    """Move a clip to a new start time, keeping its duration."""
    layer = track.layer(layer_id)
    if snap_fps:
        start = snap_to_frame(start, snap_fps)
    moved = replace(layer, start=start, end=start + layer.duration)
    logger.debug(
        "Slot %d: layer %s moved to %.2fs - %.2fs",
        track.slot, layer_id, moved.start, moved.end,
    )
    return _swap_in(track, layer_id, moved)


def remove_layer(track: PerformerTrack, layer_id: str) -> PerformerTrack:
    track.layer(layer_id)
    return track.with_layers(other for other in track.layers if other.id != layer_id)


# ── Z-order ────────────────────────────────────────────────────────

def _set_priority(track: PerformerTrack, layer_id: str, priority: int) -> PerformerTrack:
    layer = track.layer(layer_id)
    logger.debug(
        "Slot %d: layer %s priority %d -> %d",
        track.slot, layer_id, layer.priority, priority,
    )
    return _swap_in(track, layer_id, replace(layer, priority=priority))


def bring_to_front(track: PerformerTrack, layer_id: str) -> PerformerTrack:
    """Raise a layer above every other layer on the track."""
    layer = track.layer(layer_id)
    top = track.max_priority()
    if layer.priority >= top:
        return track
    return _set_priority(track, layer_id, top + 1)


def send_to_back(track: PerformerTrack, layer_id: str) -> PerformerTrack:
    """Drop a layer below every other layer (priority never below 1)."""
    layer = track.layer(layer_id)
    bottom = min(other.priority for other in track.layers)
    if layer.priority <= bottom:
        return track
    return _set_priority(track, layer_id, max(1, bottom - 1))


def _swap_priorities(track: PerformerTrack, a: Layer, b: Layer) -> PerformerTrack:
    track = _set_priority(track, a.id, b.priority)
    return _set_priority(track, b.id, a.priority)


def bring_forward(track: PerformerTrack, layer_id: str) -> PerformerTrack:
    """Swap priorities with the nearest higher-priority layer."""
    layer = track.layer(layer_id)
    higher = [other for other in track.layers if other.priority > layer.priority]
    if not higher:
        return track
    return _swap_priorities(track, layer, min(higher, key=lambda other: other.priority))


def send_backward(track: PerformerTrack, layer_id: str) -> PerformerTrack:
    """Swap priorities with the nearest lower-priority layer."""
    layer = track.layer(layer_id)
    lower = [other for other in track.layers if other.priority < layer.priority]
    if not lower:
        return track
    return _swap_priorities(track, layer, max(lower, key=lambda other: other.priority))
