"""Engine tolerances and editing defaults.

Loaded from the optional `settings:` block of a project manifest; every
field falls back to the module defaults in models.py.
"""

from dataclasses import dataclass, fields

from .models import (
    DEFAULT_EPSILON,
    DEFAULT_SNAP_FPS,
    DEFAULT_TRANSITION_DURATION,
    PATCH_PRIORITY_THRESHOLD,
)


@dataclass(frozen=True)
class EngineSettings:
    """Tunable constants shared by the editor and layer commands.

    Attributes:
        epsilon: Two keyframes closer than this (seconds) share a timestamp.
        transition_duration: Length of the automatic glide window inserted
            before a new Hold.
        snap_fps: Frame grid that patch and moved layers snap to.
        patch_threshold: Priorities above this value mark patch layers.
    """
    epsilon: float = DEFAULT_EPSILON
    transition_duration: float = DEFAULT_TRANSITION_DURATION
    snap_fps: int = DEFAULT_SNAP_FPS
    patch_threshold: int = PATCH_PRIORITY_THRESHOLD

    def __post_init__(self):
        if not isinstance(self.epsilon, (int, float)) or self.epsilon <= 0:
            raise ValueError(f"settings.epsilon must be > 0, got {self.epsilon!r}")
        if (
            not isinstance(self.transition_duration, (int, float))
            or self.transition_duration < 0
        ):
            raise ValueError(
                "settings.transition_duration must be >= 0, "
                f"got {self.transition_duration!r}"
            )
        if not isinstance(self.snap_fps, int) or self.snap_fps <= 0:
            raise ValueError(f"settings.snap_fps must be a positive integer, got {self.snap_fps!r}")
        if not isinstance(self.patch_threshold, int):
            raise ValueError(
                f"settings.patch_threshold must be an integer, got {self.patch_threshold!r}"
            )

    @classmethod
    def from_dict(cls, raw: dict | None) -> "EngineSettings":
        """Build settings from a manifest block, rejecting unknown keys."""
        raw = raw or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ValueError(
                f"Unknown settings key(s): {unknown}. Valid: {sorted(known)}"
            )
        return cls(**raw)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
