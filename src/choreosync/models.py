"""Data model for choreography projects.

Projects own exactly three performer tracks. Each track holds an ordered
set of motion layers and an ordered set of stage-position keyframes.
Every model is immutable: editors build new tracks instead of editing
them in place, so a reader holding a snapshot never sees a half-applied
change.

Keyframes are a tagged union of two variants:
  - Hold: the performer stands at (x, y) from this time on.
  - Transition: opens a glide window toward the next Hold. No position.
"""

import math
import uuid
from dataclasses import dataclass, field, replace


# ── Constants ──────────────────────────────────────────────────────

PERFORMER_SLOTS = (1, 2, 3)

PATCH_PRIORITY_THRESHOLD = 100   # priorities above this mark patch layers

DEFAULT_EPSILON = 0.01           # same-timestamp tolerance, seconds
DEFAULT_TRANSITION_DURATION = 0.5
DEFAULT_SNAP_FPS = 24

# Opening stage marks for a new project, normalized stage coordinates.
DEFAULT_START_MARKS = {
    1: (0.25, 0.5),
    2: (0.5, 0.5),
    3: (0.75, 0.5),
}

VALID_SOURCE_STATUSES = {"PROCESSING", "READY", "FAILED"}


def new_id() -> str:
    return uuid.uuid4().hex


def _check_time(value: float, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{what}: time must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"{what}: time must be >= 0, got {value!r}")


def _check_coord(value, axis: str, what: str) -> None:
    if value is None:
        raise ValueError(f"{what}: missing required '{axis}'")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{what}: '{axis}' must be a number, got {value!r}")
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{what}: '{axis}' must be in [0, 1], got {value!r}")


# ── Keyframes ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Hold:
    """Stage mark: the performer stands at (x, y) from `time` on."""
    time: float
    x: float
    y: float
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        what = f"Hold {self.id}"
        _check_time(self.time, what)
        _check_coord(self.x, "x", what)
        _check_coord(self.y, "y", what)

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Transition:
    """Glide cue: movement toward the next Hold starts at `time`."""
    time: float
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        _check_time(self.time, f"Transition {self.id}")


PositionKeyframe = Hold | Transition


def sort_keyframes(keyframes) -> tuple:
    """Return keyframes ordered by time; equal times keep their order."""
    return tuple(sorted(keyframes, key=lambda k: k.time))


# ── Layers ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SkeletonSource:
    """The motion-capture clip a layer plays."""
    object_key: str | None = None
    status: str = "READY"
    fps: float | None = None
    num_frames: int | None = None
    num_joints: int | None = None

    def __post_init__(self):
        if self.status not in VALID_SOURCE_STATUSES:
            raise ValueError(
                f"Invalid source status '{self.status}'. "
                f"Valid: {sorted(VALID_SOURCE_STATUSES)}"
            )
        if self.fps is not None and self.fps <= 0:
            raise ValueError(f"Source fps must be > 0, got {self.fps!r}")
        if self.num_frames is not None and self.num_frames < 0:
            raise ValueError(f"Source num_frames must be >= 0, got {self.num_frames!r}")

    @property
    def is_ready(self) -> bool:
        return self.status == "READY"


@dataclass(frozen=True)
class Layer:
    """A motion clip placed on one performer's timeline at [start, end)."""
    slot: int
    start: float
    end: float
    priority: int = 1
    label: str | None = None
    fade_in: float | None = None
    fade_out: float | None = None
    source: SkeletonSource | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        what = f"Layer {self.id}"
        if self.slot not in PERFORMER_SLOTS:
            raise ValueError(
                f"{what}: slot must be one of {list(PERFORMER_SLOTS)}, got {self.slot!r}"
            )
        _check_time(self.start, f"{what} start")
        _check_time(self.end, f"{what} end")
        if self.end <= self.start:
            raise ValueError(
                f"{what}: start ({self.start}) must be < end ({self.end})"
            )
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise ValueError(f"{what}: priority must be an integer, got {self.priority!r}")
        for name in ("fade_in", "fade_out"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{what}: {name} must be >= 0, got {value!r}")

    @property
    def duration(self) -> float:
        return self.end - self.start

    def covers(self, t: float) -> bool:
        return self.start <= t < self.end

    def is_patch(self, threshold: int = PATCH_PRIORITY_THRESHOLD) -> bool:
        return self.priority > threshold


# ── Tracks and projects ────────────────────────────────────────────

@dataclass(frozen=True)
class PerformerTrack:
    """One performer slot: its layers and its stage-position keyframes."""
    slot: int
    name: str = ""
    layers: tuple[Layer, ...] = ()
    keyframes: tuple[Hold | Transition, ...] = ()
    track_id: str | None = None

    def __post_init__(self):
        if self.slot not in PERFORMER_SLOTS:
            raise ValueError(
                f"Track slot must be one of {list(PERFORMER_SLOTS)}, got {self.slot!r}"
            )
        for layer in self.layers:
            if layer.slot != self.slot:
                raise ValueError(
                    f"Layer {layer.id} belongs to slot {layer.slot}, "
                    f"not track slot {self.slot}"
                )
        for kf in self.keyframes:
            if not isinstance(kf, (Hold, Transition)):
                raise ValueError(f"Track {self.slot}: not a keyframe: {kf!r}")
        object.__setattr__(self, "layers", tuple(self.layers))
        object.__setattr__(self, "keyframes", sort_keyframes(self.keyframes))
        if not self.name:
            object.__setattr__(self, "name", f"Dancer {self.slot}")

    def holds(self) -> list[Hold]:
        return [k for k in self.keyframes if isinstance(k, Hold)]

    def transitions(self) -> list[Transition]:
        return [k for k in self.keyframes if isinstance(k, Transition)]

    def layer(self, layer_id: str) -> Layer:
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        raise ValueError(f"Track {self.slot}: unknown layer id '{layer_id}'")

    def keyframe(self, keyframe_id: str) -> Hold | Transition:
        for kf in self.keyframes:
            if kf.id == keyframe_id:
                return kf
        raise ValueError(f"Track {self.slot}: unknown keyframe id '{keyframe_id}'")

    def max_priority(self, default: int = 0) -> int:
        return max((layer.priority for layer in self.layers), default=default)

    def last_end(self) -> float:
        return max((layer.end for layer in self.layers), default=0.0)

    def with_layers(self, layers) -> "PerformerTrack":
        return replace(self, layers=tuple(layers))

    def with_keyframes(self, keyframes) -> "PerformerTrack":
        return replace(self, keyframes=tuple(keyframes))


@dataclass(frozen=True)
class Music:
    """Backing track: only its duration feeds the timeline."""
    path: str | None = None
    duration: float = 0.0
    bpm: float | None = None

    def __post_init__(self):
        _check_time(self.duration, "Music duration")


@dataclass(frozen=True)
class Project:
    """A choreography: backing track plus one track per performer slot."""
    title: str
    tracks: tuple[PerformerTrack, ...]
    music: Music | None = None

    def __post_init__(self):
        object.__setattr__(self, "tracks", tuple(self.tracks))
        slots = tuple(track.slot for track in self.tracks)
        if slots != PERFORMER_SLOTS:
            raise ValueError(
                f"Project '{self.title}': expected tracks for slots "
                f"{list(PERFORMER_SLOTS)} in order, got {list(slots)}"
            )

    def track(self, slot: int) -> PerformerTrack:
        for track in self.tracks:
            if track.slot == slot:
                return track
        raise ValueError(f"Unknown performer slot: {slot!r}")

    def with_track(self, track: PerformerTrack) -> "Project":
        tracks = tuple(track if t.slot == track.slot else t for t in self.tracks)
        return replace(self, tracks=tracks)

    @property
    def timeline_duration(self) -> float:
        """Longest end time across the backing track and every layer."""
        music_duration = self.music.duration if self.music else 0.0
        return max(
            [music_duration] + [track.last_end() for track in self.tracks]
        )


def new_track(slot: int, name: str = "") -> PerformerTrack:
    """Empty track with the slot's default opening mark at t=0.

    The mark's id is fixed per slot, so reloading a project that never
    stored it still yields the same id.
    """
    x, y = DEFAULT_START_MARKS[slot]
    mark = Hold(0.0, x, y, id=f"start-{slot}")
    return PerformerTrack(slot=slot, name=name, keyframes=(mark,))


def new_project(title: str, music: Music | None = None) -> Project:
    """Provision a project with all three performer slots."""
    return Project(
        title=title,
        tracks=tuple(new_track(slot) for slot in PERFORMER_SLOTS),
        music=music,
    )
