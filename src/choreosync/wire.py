"""Flat-record codec for the persistence API ("edit state").

The persistence layer stores keyframes and layers as flat records with
snake_case keys. Decimal columns arrive as strings ("12.500"), so every
numeric field goes through parse_number. The keyframe variant travels
as `interp`:

  STEP   -> Hold        {id, time_sec, x, y, interp}
  LINEAR -> Transition  {id, time_sec, interp}

Edit-state schema (load_edit_state / dump_edit_state):
  project:
    id, title, music_object_key, music_duration_sec, music_bpm
  tracks:
    - id, slot, display_name
      layers: [layer records]
      keyframes: [keyframe records]
"""

from .common import parse_number
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

INTERP_STEP = "STEP"
INTERP_LINEAR = "LINEAR"
VALID_INTERPS = {INTERP_STEP, INTERP_LINEAR}


def _require(record: dict, key: str, prefix: str):
    if key not in record or record[key] is None:
        raise ValueError(f"{prefix}: missing required field '{key}'")
    return record[key]


def _optional_number(record: dict, key: str, prefix: str) -> float | None:
    value = record.get(key)
    if value is None or value == "":
        return None
    return parse_number(value, f"{prefix} {key}")


# ── Keyframes ──────────────────────────────────────────────────────

def keyframe_to_record(kf: Hold | Transition) -> dict:
    if isinstance(kf, Hold):
        return {
            "id": kf.id,
            "time_sec": kf.time,
            "x": kf.x,
            "y": kf.y,
            "interp": INTERP_STEP,
        }
    return {"id": kf.id, "time_sec": kf.time, "interp": INTERP_LINEAR}


def keyframe_from_record(record: dict, prefix: str = "Keyframe") -> Hold | Transition:
    """Decode one keyframe record.

    Raises:
        ValueError: Unknown interp, missing time, or a STEP record without
            x/y.
    """
    interp = _require(record, "interp", prefix)
    if interp not in VALID_INTERPS:
        raise ValueError(
            f"{prefix}: invalid interp '{interp}'. Valid: {sorted(VALID_INTERPS)}"
        )
    time = parse_number(_require(record, "time_sec", prefix), f"{prefix} time_sec")
    ident = {"id": str(record["id"])} if record.get("id") is not None else {}

    if interp == INTERP_LINEAR:
        return Transition(time, **ident)
    x = parse_number(_require(record, "x", prefix), f"{prefix} x")
    y = parse_number(_require(record, "y", prefix), f"{prefix} y")
    return Hold(time, x, y, **ident)


# ── Layers ─────────────────────────────────────────────────────────

def layer_to_record(layer: Layer) -> dict:
    record = {
        "id": layer.id,
        "start_sec": layer.start,
        "end_sec": layer.end,
        "priority": layer.priority,
        "label": layer.label,
        "fade_in_sec": layer.fade_in,
        "fade_out_sec": layer.fade_out,
    }
    if layer.source is not None:
        record.update({
            "source_status": layer.source.status,
            "source_object_key": layer.source.object_key,
            "source_fps": layer.source.fps,
            "source_num_frames": layer.source.num_frames,
            "source_num_joints": layer.source.num_joints,
        })
    return record


def _source_from_record(record: dict, prefix: str) -> SkeletonSource | None:
    if not any(key.startswith("source_") for key in record):
        return None
    num_frames = _optional_number(record, "source_num_frames", prefix)
    num_joints = _optional_number(record, "source_num_joints", prefix)
    return SkeletonSource(
        object_key=record.get("source_object_key"),
        status=record.get("source_status") or "READY",
        fps=_optional_number(record, "source_fps", prefix),
        num_frames=int(num_frames) if num_frames is not None else None,
        num_joints=int(num_joints) if num_joints is not None else None,
    )


def layer_from_record(record: dict, slot: int, prefix: str = "Layer") -> Layer:
    """Decode one layer record for the given performer slot."""
    start = parse_number(_require(record, "start_sec", prefix), f"{prefix} start_sec")
    end = parse_number(_require(record, "end_sec", prefix), f"{prefix} end_sec")
    priority = record.get("priority", 1)
    if isinstance(priority, bool) or not isinstance(priority, int):
        number = parse_number(priority, f"{prefix} priority")
        if not number.is_integer():
            raise ValueError(f"{prefix}: priority must be an integer, got {priority!r}")
        priority = int(number)
    ident = {"id": str(record["id"])} if record.get("id") is not None else {}
    return Layer(
        slot=slot,
        start=start,
        end=end,
        priority=priority,
        label=record.get("label"),
        fade_in=_optional_number(record, "fade_in_sec", prefix),
        fade_out=_optional_number(record, "fade_out_sec", prefix),
        source=_source_from_record(record, prefix),
        **ident,
    )


# ── Edit state ─────────────────────────────────────────────────────

def _track_from_record(record: dict, index: int) -> PerformerTrack:
    prefix = f"Track {index}"
    slot = _require(record, "slot", prefix)
    if slot not in PERFORMER_SLOTS:
        raise ValueError(f"{prefix}: slot must be one of {list(PERFORMER_SLOTS)}, got {slot!r}")

    layers = [
        layer_from_record(rec, slot, f"{prefix}, layer {j}")
        for j, rec in enumerate(record.get("layers") or [])
    ]
    if "keyframes" in record:
        keyframes = [
            keyframe_from_record(rec, f"{prefix}, keyframe {j}")
            for j, rec in enumerate(record["keyframes"] or [])
        ]
    else:
        # No keyframe column at all: start on the slot's opening mark.
        keyframes = list(new_track(slot).keyframes)

    track = PerformerTrack(
        slot=slot,
        name=record.get("display_name") or "",
        layers=tuple(layers),
        track_id=str(record["id"]) if record.get("id") is not None else None,
    )
    return replace_keyframes(track, keyframes)


def load_edit_state(payload: dict) -> Project:
    """Build a Project from an edit-state payload.

    Tracks are matched by slot; slots absent from the payload are
    provisioned with their opening mark. A track whose keyframe list is
    present but empty stays empty.

    Raises:
        ValueError: Missing fields, bad values, or a slot listed twice.
    """
    if "project" not in payload:
        raise ValueError("Edit state: missing required 'project' section")
    meta = payload["project"]

    by_slot = {}
    for i, record in enumerate(payload.get("tracks") or []):
        track = _track_from_record(record, i)
        if track.slot in by_slot:
            raise ValueError(f"Edit state: duplicate track for slot {track.slot}")
        by_slot[track.slot] = track

    duration = _optional_number(meta, "music_duration_sec", "Project")
    music = None
    if meta.get("music_object_key") is not None or duration is not None:
        music = Music(
            path=meta.get("music_object_key"),
            duration=duration or 0.0,
            bpm=_optional_number(meta, "music_bpm", "Project"),
        )

    return Project(
        title=meta.get("title") or "",
        tracks=tuple(by_slot.get(slot) or new_track(slot) for slot in PERFORMER_SLOTS),
        music=music,
    )


def dump_edit_state(project: Project) -> dict:
    """Serialize a Project to the edit-state shape load_edit_state reads."""
    music = project.music
    return {
        "project": {
            "title": project.title,
            "music_object_key": music.path if music else None,
            "music_duration_sec": music.duration if music else None,
            "music_bpm": music.bpm if music else None,
        },
        "tracks": [
            {
                "id": track.track_id,
                "slot": track.slot,
                "display_name": track.name,
                "layers": [layer_to_record(layer) for layer in track.layers],
                "keyframes": [keyframe_to_record(kf) for kf in track.keyframes],
            }
            for track in project.tracks
        ],
    }
