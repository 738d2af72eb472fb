"""Layer resolution — which motion clip is in effect at a given time.

A layer covers the half-open interval [start, end): it is not active at
its own end time. Where layers overlap, the highest priority wins; patch
layers outrank ordinary ones by priority alone, never by recency. Equal
priorities resolve to the first covering layer in input order.

All functions are pure queries. Having no active layer is a normal state
and is reported as None.
"""

import math

from .models import Layer


def layers_at(layers, t: float) -> list[Layer]:
    """All layers covering t, highest priority first (stable on ties)."""
    covering = [layer for layer in layers if layer.start <= t < layer.end]
    return sorted(covering, key=lambda layer: -layer.priority)


def active_layer_at(layers, t: float) -> Layer | None:
    """The single layer in effect at time t, or None."""
    best = None
    for layer in layers:
        if not layer.start <= t < layer.end:
            continue
        # Strict comparison: the first layer seen keeps a tied priority.
        if best is None or layer.priority > best.priority:
            best = layer
    return best


def local_time(layer: Layer, t: float) -> float:
    """Time inside the layer's clip for timeline time t."""
    return t - layer.start


def source_frame_index(layer: Layer, t: float) -> int | None:
    """Index of the clip frame to show at timeline time t.

    floor(local_time * fps), clamped to the clip's frame range. None when
    the layer has no source with a known fps and frame count.
    """
    source = layer.source
    if source is None or not source.fps or not source.num_frames:
        return None
    frame = math.floor(local_time(layer, t) * source.fps)
    return min(max(frame, 0), source.num_frames - 1)
