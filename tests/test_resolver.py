"""Tests for layer resolution."""

import pytest

from choreosync.models import Layer, SkeletonSource
from choreosync.resolver import (
    active_layer_at,
    layers_at,
    local_time,
    source_frame_index,
)


def _layer(start, end, priority=1, label=None, **kwargs):
    return Layer(slot=1, start=start, end=end, priority=priority, label=label, **kwargs)


class TestActiveLayerAt:
    def test_no_layers(self):
        assert active_layer_at([], 1.0) is None

    def test_gap_returns_none(self):
        layers = [_layer(0, 2), _layer(4, 6)]
        assert active_layer_at(layers, 3.0) is None

    def test_half_open_interval(self):
        a = _layer(0, 2, label="a")
        b = _layer(2, 4, label="b")
        assert active_layer_at([a, b], 0.0) is a
        assert active_layer_at([a, b], 2.0) is b
        assert active_layer_at([a, b], 4.0) is None

    @pytest.mark.parametrize("t, expected", [
        (0.0, "A"), (2.99, "A"),
        (3.0, "B"), (5.99, "B"),
        (6.0, "A"), (9.99, "A"),
        (10.0, None),
    ])
    def test_overlap_priority(self, t, expected):
        a = _layer(0, 10, priority=1, label="A")
        b = _layer(3, 6, priority=2, label="B")
        result = active_layer_at([a, b], t)
        assert (result.label if result else None) == expected

    def test_priority_beats_recency(self):
        patch = _layer(3, 6, priority=101, label="patch")
        later = _layer(0, 10, priority=5, label="later")
        assert active_layer_at([patch, later], 4.0) is patch

    def test_tie_keeps_first_in_input_order(self):
        first = _layer(0, 5, priority=3, label="first")
        second = _layer(1, 4, priority=3, label="second")
        assert active_layer_at([first, second], 2.0) is first
        assert active_layer_at([second, first], 2.0) is second

    def test_pure_function_of_inputs(self):
        layers = [_layer(0, 10, 1), _layer(3, 6, 2)]
        snapshot = list(layers)
        results = [active_layer_at(layers, t) for t in (4.0, 8.0, 4.0, 8.0)]
        assert results[0] is results[2]
        assert results[1] is results[3]
        assert layers == snapshot


class TestLayersAt:
    def test_sorted_by_priority(self):
        a = _layer(0, 10, 1, "a")
        b = _layer(3, 6, 5, "b")
        c = _layer(2, 8, 3, "c")
        assert [l.label for l in layers_at([a, b, c], 4.0)] == ["b", "c", "a"]

    def test_none_covering(self):
        assert layers_at([_layer(0, 1)], 5.0) == []


class TestFrameLookup:
    def test_local_time(self):
        assert local_time(_layer(2.0, 6.0), 3.5) == 1.5

    def test_frame_index(self):
        layer = _layer(2.0, 6.0, source=SkeletonSource(fps=10, num_frames=40))
        assert source_frame_index(layer, 2.0) == 0
        assert source_frame_index(layer, 3.55) == 15

    def test_frame_index_clamped_to_clip(self):
        layer = _layer(0.0, 10.0, source=SkeletonSource(fps=10, num_frames=20))
        assert source_frame_index(layer, 9.0) == 19

    def test_frame_index_without_source(self):
        assert source_frame_index(_layer(0, 1), 0.5) is None

    def test_frame_index_without_frames(self):
        layer = _layer(0, 1, source=SkeletonSource(fps=24, num_frames=0))
        assert source_frame_index(layer, 0.5) is None
