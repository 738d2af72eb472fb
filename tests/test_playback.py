"""Tests for per-frame resolution and the editing session."""

import numpy as np
import pytest

from choreosync.manifest import load_manifest
from choreosync.playback import Session, frame_times, resolve_frame, sample_timeline
from choreosync.settings import EngineSettings


@pytest.fixture
def showcase(showcase_manifest):
    project, _ = load_manifest(showcase_manifest)
    return project


class TestResolveFrame:
    def test_one_entry_per_slot(self, showcase):
        frames = resolve_frame(showcase, 4.0)
        assert [f.slot for f in frames] == [1, 2, 3]

    def test_patch_wins_over_base(self, showcase):
        frame = resolve_frame(showcase, 4.0)[0]
        assert frame.layer.id == "fix"
        assert frame.local_time == pytest.approx(1.0)
        assert frame.frame_index is None

    def test_ready_only_skips_processing_patch(self, showcase):
        frame = resolve_frame(showcase, 4.0, ready_only=True)[0]
        assert frame.layer.id == "base"
        assert frame.frame_index == 40

    def test_ready_only_skips_layers_without_source(self, showcase):
        assert resolve_frame(showcase, 3.0, ready_only=True)[1].layer is None

    def test_positions(self, showcase):
        frames = resolve_frame(showcase, 1.5)
        assert frames[0].position == pytest.approx((0.35, 0.6))
        assert frames[1].position == (0.5, 0.5)
        assert frames[2].position == (0.75, 0.5)

    def test_gap_keeps_position(self, showcase):
        frame = resolve_frame(showcase, 1.0)[1]
        assert frame.layer is None
        assert frame.local_time is None
        assert frame.position == (0.5, 0.5)


class TestFrameTimes:
    def test_inclusive_end_on_grid(self):
        np.testing.assert_allclose(frame_times(0.0, 1.0, 4), [0.0, 0.25, 0.5, 0.75, 1.0])

    def test_end_off_grid(self):
        assert len(frame_times(0.0, 0.9, 4)) == 4

    def test_offset_start(self):
        np.testing.assert_allclose(frame_times(2.0, 3.0, 2), [2.0, 2.5, 3.0])

    def test_invalid_fps(self):
        with pytest.raises(ValueError, match="fps"):
            frame_times(0.0, 1.0, 0)

    def test_end_before_start(self):
        with pytest.raises(ValueError, match="must be >= start"):
            frame_times(2.0, 1.0, 24)


class TestSampleTimeline:
    def test_layers_and_positions(self, showcase):
        sampled = sample_timeline(showcase, fps=2, end=3.0)
        assert len(sampled["times"]) == 7
        slot1 = sampled["performers"][1]
        assert slot1["layers"] == ["base"] * 6 + ["fix"]
        np.testing.assert_allclose(slot1["positions"][3], [0.35, 0.6])
        assert sampled["performers"][2]["layers"][:4] == [None] * 4
        assert sampled["performers"][2]["layers"][4:] == ["verse"] * 3

    def test_defaults_to_timeline_duration(self, showcase):
        sampled = sample_timeline(showcase, fps=1)
        assert sampled["end"] == 10.0
        assert len(sampled["times"]) == 11

    def test_ready_only(self, showcase):
        sampled = sample_timeline(showcase, fps=2, end=3.0, ready_only=True)
        assert sampled["performers"][1]["layers"][-1] == "base"

    def test_matches_resolve_frame(self, showcase):
        sampled = sample_timeline(showcase, fps=4, end=6.0)
        for i, t in enumerate(sampled["times"]):
            frames = resolve_frame(showcase, float(t))
            for frame in frames:
                data = sampled["performers"][frame.slot]
                expected = frame.layer.id if frame.layer else None
                assert data["layers"][i] == expected
                np.testing.assert_allclose(data["positions"][i], frame.position)


class TestSession:
    def test_clock_sized_to_timeline(self, showcase):
        assert Session(showcase).clock.duration == 10.0

    def test_apply_replaces_track(self, showcase):
        session = Session(showcase)
        session.apply("add_layer", 2, 5.0, label="chorus")
        track = session.project.track(2)
        assert [layer.label for layer in track.layers] == ["verse", "chorus"]
        assert showcase.track(2).layers[-1].label == "verse"

    def test_apply_updates_clock_duration(self, showcase):
        session = Session(showcase)
        session.apply("add_layer", 2, 3.0, start=12.0)
        assert session.clock.duration == 15.0

    def test_removing_last_clip_shrinks_timeline(self, showcase):
        session = Session(showcase)
        session.clock.seek(9.5)
        session.apply("remove_layer", 1, "base")
        assert session.clock.duration == 8.0
        assert session.clock.current_time == 8.0

    def test_unknown_command(self, showcase):
        with pytest.raises(ValueError, match="Unknown command"):
            Session(showcase).apply("explode", 1)

    def test_failed_command_leaves_project(self, showcase):
        session = Session(showcase)
        before = session.project
        with pytest.raises(ValueError, match="unknown layer id"):
            session.apply("remove_layer", 1, "nope")
        assert session.project is before

    def test_commit_hold_at_clock_time(self, showcase):
        session = Session(showcase)
        session.clock.seek(5.0)
        track = session.commit_hold(3, 0.1, 0.9)
        assert [h.time for h in track.holds()] == [0.0, 5.0]
        assert [c.time for c in track.transitions()] == [pytest.approx(4.5)]

    def test_session_settings_injected(self, showcase):
        session = Session(showcase, EngineSettings(transition_duration=1.0))
        session.clock.seek(5.0)
        track = session.commit_hold(3, 0.1, 0.9)
        assert track.transitions()[0].time == pytest.approx(4.0)

    def test_add_patch_at_clock_time(self, showcase):
        session = Session(showcase)
        session.clock.seek(7.0)
        track = session.add_patch(2, 1.5, label="late fix")
        patch = track.layers[-1]
        assert (patch.start, patch.end, patch.priority) == (7.0, 8.5, 101)

    def test_advance_resolves_new_time(self, showcase):
        session = Session(showcase)
        session.clock.play()
        frames = session.advance(4.0)
        assert session.clock.current_time == 4.0
        assert frames[0].layer.id == "fix"

    def test_advance_past_end_stops(self, showcase):
        session = Session(showcase)
        session.clock.play()
        session.advance(60.0)
        assert not session.clock.is_playing
        assert session.clock.current_time == 10.0
