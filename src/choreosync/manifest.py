"""Project manifest loader — choreography declared in YAML.

Manifest schema:
  project:
    title: "Spring showcase"
  paths:
    media: "/data/media"
  music:                          # optional
    path: "${media}/song.mp3"
    duration: 180.0
    bpm: 96
  settings:                       # optional, see settings.EngineSettings
    epsilon: 0.01
    transition_duration: 0.5
    snap_fps: 24
    patch_threshold: 100
  performers:
    - slot: 1
      name: "Dancer 1"
      layers:
        - id: intro               # optional
          start: 0
          end: 12.5
          priority: 1             # optional, default max-so-far + 1
          label: intro
          source: "${media}/d1-intro.json"   # optional clip metadata
          status: READY
          fps: 24
          frames: 300
      keyframes:
        - {time: 0, interp: STEP, x: 0.25, y: 0.5}
        - {time: 4.5, interp: LINEAR}
        - {time: 5, interp: STEP, x: 0.4, y: 0.3}

Slots missing from `performers` are provisioned with their default
opening mark, as are listed slots without a `keyframes` key. An explicit
`keyframes: []` loads as a track with no marks.
"""

from pathlib import Path

import yaml

from .common import resolve_path_vars
from .editor import replace_keyframes
from .models import (
    PERFORMER_SLOTS,
    Hold,
    Layer,
    Music,
    PerformerTrack,
    Project,
    SkeletonSource,
    Transition,
    new_track,
)
from .settings import EngineSettings
from .wire import INTERP_LINEAR, INTERP_STEP, VALID_INTERPS


# ── Loading ───────────────────────────────────────────────────────


def load_manifest(manifest_path: str | Path) -> tuple[Project, EngineSettings]:
    """Load, validate, and normalize a project manifest.

    Processing pipeline:
      1. Parse YAML.
      2. Build engine settings (defaults for omitted keys).
      3. Resolve ${path} variables in music and layer source paths.
      4. Validate each performer, layer and keyframe entry.
      5. Provision missing performer slots.

    Args:
        manifest_path: Path to the YAML project manifest.

    Returns:
        (project, settings).

    Raises:
        ValueError: Missing/invalid fields.
        FileNotFoundError: Missing manifest file.
    """
    with open(manifest_path) as f:
        raw = yaml.safe_load(f) or {}

    if "performers" not in raw:
        raise ValueError("Project manifest: missing required 'performers' section")

    settings = EngineSettings.from_dict(raw.get("settings"))
    paths = raw.get("paths", {})
    title = (raw.get("project") or {}).get("title", "")

    music = None
    if raw.get("music") is not None:
        music = _load_music(raw["music"], paths)

    tracks = {}
    for i, performer in enumerate(raw["performers"] or []):
        track = _load_performer(performer, i, paths, settings)
        if track.slot in tracks:
            raise ValueError(f"Performer {i}: duplicate slot {track.slot}")
        tracks[track.slot] = track

    project = Project(
        title=title,
        tracks=tuple(tracks.get(slot) or new_track(slot) for slot in PERFORMER_SLOTS),
        music=music,
    )
    return project, settings


def _load_music(music: dict, paths: dict) -> Music:
    if "duration" not in music:
        raise ValueError("Project manifest: music.duration is required")
    duration = music["duration"]
    if not isinstance(duration, (int, float)) or duration < 0:
        raise ValueError(f"Project manifest: music.duration must be >= 0, got {duration!r}")
    path = music.get("path")
    if path is not None:
        path = resolve_path_vars(str(path), paths)
    return Music(path=path, duration=float(duration), bpm=music.get("bpm"))


def _load_performer(
    performer: dict, index: int, paths: dict, settings: EngineSettings,
) -> PerformerTrack:
    prefix = f"Performer {index}"
    if "slot" not in performer:
        raise ValueError(f"{prefix}: missing required field 'slot'")
    slot = performer["slot"]
    if slot not in PERFORMER_SLOTS:
        raise ValueError(
            f"{prefix}: slot must be one of {list(PERFORMER_SLOTS)}, got {slot!r}"
        )

    layers = []
    top = 0
    seen_ids = set()
    for j, entry in enumerate(performer.get("layers") or []):
        layer = _load_layer(entry, slot, top, f"{prefix}, layer {j}", paths)
        if layer.id in seen_ids:
            raise ValueError(f"{prefix}, layer {j}: duplicate layer id '{layer.id}'")
        seen_ids.add(layer.id)
        top = max(top, layer.priority)
        layers.append(layer)

    if "keyframes" in performer:
        keyframes = [
            _load_keyframe(entry, f"{prefix}, keyframe {j}")
            for j, entry in enumerate(performer["keyframes"] or [])
        ]
    else:
        keyframes = list(new_track(slot).keyframes)

    track = PerformerTrack(
        slot=slot,
        name=performer.get("name") or "",
        layers=tuple(layers),
        track_id=str(performer["id"]) if performer.get("id") is not None else None,
    )
    return replace_keyframes(track, keyframes, settings)


def _load_layer(entry: dict, slot: int, top: int, prefix: str, paths: dict) -> Layer:
    """Validate a layer entry. Required: start, end."""
    for key in ("start", "end"):
        if key not in entry:
            raise ValueError(f"{prefix}: missing required field '{key}'")

    ident = {"id": str(entry["id"])} if entry.get("id") is not None else {}
    try:
        source = None
        if any(key in entry for key in ("source", "status", "fps", "frames")):
            object_key = entry.get("source")
            if object_key is not None:
                object_key = resolve_path_vars(str(object_key), paths)
            source = SkeletonSource(
                object_key=object_key,
                status=entry.get("status", "READY"),
                fps=entry.get("fps"),
                num_frames=entry.get("frames"),
                num_joints=entry.get("joints"),
            )
        return Layer(
            slot=slot,
            start=entry["start"],
            end=entry["end"],
            priority=entry.get("priority", top + 1),
            label=entry.get("label"),
            fade_in=entry.get("fade_in"),
            fade_out=entry.get("fade_out"),
            source=source,
            **ident,
        )
    except ValueError as e:
        raise ValueError(f"{prefix}: {e}") from None


def _load_keyframe(entry: dict, prefix: str) -> Hold | Transition:
    """Validate a keyframe entry. Required: time; STEP also needs x, y."""
    if "time" not in entry:
        raise ValueError(f"{prefix}: missing required field 'time'")
    interp = entry.get("interp", INTERP_STEP)
    if interp not in VALID_INTERPS:
        raise ValueError(
            f"{prefix}: invalid interp '{interp}'. Valid: {sorted(VALID_INTERPS)}"
        )

    ident = {"id": str(entry["id"])} if entry.get("id") is not None else {}
    try:
        if interp == INTERP_LINEAR:
            return Transition(entry["time"], **ident)
        return Hold(entry["time"], entry.get("x"), entry.get("y"), **ident)
    except ValueError as e:
        raise ValueError(f"{prefix}: {e}") from None


# ── Writing ───────────────────────────────────────────────────────


def _layer_entry(layer: Layer) -> dict:
    entry = {
        "id": layer.id,
        "start": layer.start,
        "end": layer.end,
        "priority": layer.priority,
    }
    if layer.label is not None:
        entry["label"] = layer.label
    if layer.fade_in is not None:
        entry["fade_in"] = layer.fade_in
    if layer.fade_out is not None:
        entry["fade_out"] = layer.fade_out
    if layer.source is not None:
        src = layer.source
        entry["status"] = src.status
        for key, value in (
            ("source", src.object_key),
            ("fps", src.fps),
            ("frames", src.num_frames),
            ("joints", src.num_joints),
        ):
            if value is not None:
                entry[key] = value
    return entry


def _keyframe_entry(kf: Hold | Transition) -> dict:
    if isinstance(kf, Hold):
        return {"id": kf.id, "time": kf.time, "interp": INTERP_STEP, "x": kf.x, "y": kf.y}
    return {"id": kf.id, "time": kf.time, "interp": INTERP_LINEAR}


def manifest_dict(project: Project, settings: EngineSettings) -> dict:
    """Build the manifest mapping that load_manifest reads back."""
    raw = {
        "project": {"title": project.title},
        "settings": settings.to_dict(),
    }
    if project.music is not None:
        music = {"duration": project.music.duration}
        if project.music.path is not None:
            music["path"] = project.music.path
        if project.music.bpm is not None:
            music["bpm"] = project.music.bpm
        raw["music"] = music

    performers = []
    for track in project.tracks:
        performer = {"slot": track.slot, "name": track.name}
        if track.track_id is not None:
            performer["id"] = track.track_id
        performer["layers"] = [_layer_entry(layer) for layer in track.layers]
        performer["keyframes"] = [_keyframe_entry(kf) for kf in track.keyframes]
        performers.append(performer)
    raw["performers"] = performers
    return raw


def dump_manifest(
    project: Project, settings: EngineSettings, manifest_path: str | Path,
) -> None:
    """Write a project back to a YAML manifest (paths fully resolved)."""
    Path(manifest_path).parent.mkdir(parents=True, exist_ok=True)
    with open(manifest_path, "w") as f:
        yaml.safe_dump(manifest_dict(project, settings), f, sort_keys=False)


# ── Media checks ──────────────────────────────────────────────────


def validate_media_paths(project: Project) -> None:
    """Check that the music file and every layer source exist on disk.

    Raises:
        FileNotFoundError: Lists all missing files.
    """
    wanted = []
    if project.music is not None and project.music.path:
        wanted.append(project.music.path)
    for track in project.tracks:
        for layer in track.layers:
            if layer.source is not None and layer.source.object_key:
                wanted.append(layer.source.object_key)

    missing = [p for p in wanted if not Path(p).exists()]
    if missing:
        msg = f"Missing {len(missing)} media file(s):\n"
        for p in missing:
            msg += f"  - {p}\n"
        raise FileNotFoundError(msg)
