"""Tests for stage-position interpolation.

Covers the hold/glide semantics:
  - No Hold -> None; one Hold -> constant everywhere.
  - Clamping before the first and after the last Hold.
  - Hold until the Transition cue, then linear glide into the next Hold.
  - No cue -> instantaneous jump; cue on the next Hold -> jump, no
    division by zero.
  - The vectorized sampler agrees with the scalar query.
"""

import numpy as np
import pytest

from choreosync.interpolate import path_points, position_at, sample_positions
from choreosync.models import Hold, Transition


def _glide_keyframes():
    return [
        Hold(0.0, 0.2, 0.7),
        Transition(1.0),
        Hold(2.0, 0.5, 0.5),
    ]


class TestPositionAt:
    def test_no_keyframes_returns_none(self):
        assert position_at([], 1.0) is None

    def test_only_transitions_returns_none(self):
        assert position_at([Transition(1.0)], 1.0) is None

    @pytest.mark.parametrize("t", [-100.0, 0.0, 3.0, 1e9])
    def test_single_hold_is_constant(self, t):
        assert position_at([Hold(3.0, 0.1, 0.9)], t) == (0.1, 0.9)

    def test_glide_scenario(self):
        kfs = _glide_keyframes()
        assert position_at(kfs, 0.5) == (0.2, 0.7)
        assert position_at(kfs, 1.5) == pytest.approx((0.35, 0.6))
        assert position_at(kfs, 2.5) == (0.5, 0.5)

    def test_holds_until_cue(self):
        kfs = _glide_keyframes()
        assert position_at(kfs, 0.999) == (0.2, 0.7)
        assert position_at(kfs, 1.0) == pytest.approx((0.2, 0.7))

    def test_arrives_at_next_hold(self):
        assert position_at(_glide_keyframes(), 2.0) == (0.5, 0.5)

    def test_clamps_before_first_hold(self):
        kfs = [Hold(5.0, 0.3, 0.3), Hold(8.0, 0.9, 0.9)]
        for t in (-1.0, 0.0, 4.99, 5.0):
            assert position_at(kfs, t) == (0.3, 0.3)

    def test_clamps_after_last_hold(self):
        kfs = [Hold(5.0, 0.3, 0.3), Hold(8.0, 0.9, 0.9)]
        for t in (8.0, 8.01, 1000.0):
            assert position_at(kfs, t) == (0.9, 0.9)

    def test_no_transition_jumps(self):
        kfs = [Hold(0.0, 0.0, 0.0), Hold(4.0, 1.0, 1.0), Hold(6.0, 0.5, 0.5)]
        assert position_at(kfs, 3.999) == (0.0, 0.0)
        assert position_at(kfs, 4.0) == (1.0, 1.0)

    def test_transition_at_next_hold_jumps(self):
        kfs = [Hold(0.0, 0.0, 0.0), Transition(2.0), Hold(2.0, 1.0, 1.0), Hold(3.0, 0.5, 0.5)]
        assert position_at(kfs, 1.999) == (0.0, 0.0)
        assert position_at(kfs, 2.0) == (1.0, 1.0)

    def test_transition_on_bracket_start_is_ignored(self):
        # The cue must lie strictly after the bracket's first Hold.
        kfs = [Hold(0.0, 0.0, 0.0), Transition(0.0), Hold(2.0, 1.0, 1.0)]
        assert position_at(kfs, 1.0) == (0.0, 0.0)

    def test_earliest_cue_opens_window(self):
        kfs = [Hold(0.0, 0.0, 0.0), Transition(1.0), Transition(3.0), Hold(4.0, 0.9, 0.3)]
        assert position_at(kfs, 2.5) == pytest.approx((0.45, 0.15))

    def test_cue_applies_only_to_its_bracket(self):
        kfs = [
            Hold(0.0, 0.0, 0.0),
            Hold(2.0, 0.4, 0.4),
            Transition(3.0),
            Hold(4.0, 0.8, 0.8),
        ]
        assert position_at(kfs, 1.5) == (0.0, 0.0)
        assert position_at(kfs, 3.5) == pytest.approx((0.6, 0.6))

    def test_unsorted_input_not_mutated(self):
        kfs = [Hold(2.0, 0.5, 0.5), Transition(1.0), Hold(0.0, 0.2, 0.7)]
        before = list(kfs)
        assert position_at(kfs, 1.5) == pytest.approx((0.35, 0.6))
        assert kfs == before


class TestSamplePositions:
    def test_matches_scalar_query(self):
        kfs = [
            Hold(0.0, 0.2, 0.7),
            Transition(1.0),
            Hold(2.0, 0.5, 0.5),
            Hold(4.0, 0.9, 0.1),
            Transition(5.5),
            Transition(6.0),
            Hold(6.0, 0.1, 0.1),
        ]
        times = np.linspace(-1.0, 7.0, 161)
        sampled = sample_positions(kfs, times)
        expected = np.array([position_at(kfs, t) for t in times])
        np.testing.assert_allclose(sampled, expected)

    def test_no_hold_gives_nan(self):
        sampled = sample_positions([Transition(1.0)], [0.0, 1.0])
        assert sampled.shape == (2, 2)
        assert np.isnan(sampled).all()

    def test_single_hold_broadcast(self):
        sampled = sample_positions([Hold(1.0, 0.3, 0.4)], [0.0, 5.0, 9.0])
        np.testing.assert_allclose(sampled, [[0.3, 0.4]] * 3)

    def test_empty_times(self):
        assert sample_positions([Hold(0.0, 0.5, 0.5)], []).shape == (0, 2)


class TestPathPoints:
    def test_hold_positions_in_time_order(self):
        kfs = [Hold(2.0, 0.5, 0.5), Transition(1.0), Hold(0.0, 0.2, 0.7)]
        assert path_points(kfs) == [(0.2, 0.7), (0.5, 0.5)]
