"""Shared test fixtures for choreosync tests."""

import pytest
import yaml


SHOWCASE = {
    "project": {"title": "Showcase"},
    "music": {"path": "/fake/song.mp3", "duration": 8.0},
    "settings": {"epsilon": 0.01, "transition_duration": 0.5},
    "performers": [
        {
            "slot": 1,
            "name": "Ana",
            "layers": [
                {"id": "base", "start": 0.0, "end": 10.0, "priority": 1,
                 "label": "base", "fps": 10, "frames": 100},
                {"id": "fix", "start": 3.0, "end": 6.0, "priority": 101,
                 "label": "fix", "status": "PROCESSING"},
            ],
            "keyframes": [
                {"id": "h0", "time": 0.0, "interp": "STEP", "x": 0.2, "y": 0.7},
                {"id": "t1", "time": 1.0, "interp": "LINEAR"},
                {"id": "h2", "time": 2.0, "interp": "STEP", "x": 0.5, "y": 0.5},
            ],
        },
        {
            "slot": 2,
            "name": "Bo",
            "layers": [
                {"id": "verse", "start": 2.0, "end": 4.0, "label": "verse"},
            ],
        },
    ],
}


@pytest.fixture
def showcase_manifest(tmp_path):
    """Write the showcase project to a YAML manifest and return its path.

    Slot 1 has an overlapping patch layer and a glide from (0.2, 0.7) to
    (0.5, 0.5) between 1s and 2s. Slot 2 has one layer and no keyframes
    key, so it stands on its opening mark. Slot 3 is not declared at all.
    Timeline duration is 10s.
    """
    path = tmp_path / "showcase.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(SHOWCASE, f)
    return path
