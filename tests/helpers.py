"""Shared builders for diarization tests."""

from __future__ import annotations

import asyncio

import numpy as np

from voxsplit.diarization.models import FeatureFrame


def make_frame(time: float, rms: float = 5.0, centroid: float = 100.0, **overrides: float) -> FeatureFrame:
    """Scaled feature frame; rms is the already-scaled dimension (silence <= 0.1)."""
    values = {
        "flux": 1.0,
        "zcr": 50.0,
        "low": 10.0,
        "mid": 5.0,
        "high": 1.0,
    }
    values.update(overrides)
    return FeatureFrame(
        time=time,
        vector=(centroid, rms, values["flux"], values["zcr"], values["low"], values["mid"], values["high"]),
    )


class FixedRng:
    """Stands in for numpy Generator.integers with predetermined indices."""

    def __init__(self, indices):
        self._indices = list(indices)
        self.calls = 0

    def integers(self, low, high, size=None):
        self.calls += 1
        return np.asarray(self._indices[:size], dtype=np.int64)


def drain(queue: asyncio.Queue) -> list:
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events
