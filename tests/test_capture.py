"""Tests for the capture session clock and feature series."""

from __future__ import annotations

import numpy as np
import pytest

from voxsplit.audio.capture import CaptureSession
from voxsplit.audio.features import FeatureExtractor


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


FREQ_DB = np.zeros(64)
SAMPLES = np.full(128, 0.2)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(clock):
    return CaptureSession(extractor=FeatureExtractor(sample_rate=16000), clock=clock)


def test_reset_then_get_is_empty(session, clock):
    session.start()
    clock.now = 1.0
    session.process(FREQ_DB, SAMPLES)
    assert session.get_features()

    session.reset_features()
    assert session.get_features() == []


def test_idle_session_records_nothing(session):
    assert session.process(FREQ_DB, SAMPLES) is None
    assert session.get_features() == []
    assert session.elapsed() == 0.0


def test_paused_time_is_excluded(session, clock):
    session.start()
    clock.now = 1.0
    first = session.process(FREQ_DB, SAMPLES)

    clock.now = 2.0
    session.pause()
    clock.now = 5.0
    assert session.process(FREQ_DB, SAMPLES) is None
    assert session.elapsed() == pytest.approx(2.0)

    session.resume()
    clock.now = 6.0
    second = session.process(FREQ_DB, SAMPLES)

    assert first.time == pytest.approx(1.0)
    assert second.time == pytest.approx(3.0)
    assert [f.time for f in session.get_features()] == pytest.approx([1.0, 3.0])

    clock.now = 7.0
    assert session.stop() == pytest.approx(4.0)
    assert not session.is_recording


def test_frame_times_are_monotonic_across_pauses(session, clock):
    session.start()
    for step in range(1, 10):
        clock.now = float(step)
        if step == 4:
            session.pause()
        if step == 7:
            session.resume()
        session.process(FREQ_DB, SAMPLES)
    times = [f.time for f in session.get_features()]
    assert times == sorted(times)
    assert len(times) == 6


def test_get_features_returns_a_copy(session, clock):
    session.start()
    clock.now = 0.5
    session.process(FREQ_DB, SAMPLES)
    features = session.get_features()
    features.clear()
    assert len(session.get_features()) == 1


def test_state_transitions_outside_recording_are_noops(session, clock):
    session.pause()
    session.resume()
    assert session.stop() == 0.0

    session.start()
    clock.now = 3.0
    session.start()  # already recording: start time unchanged
    assert session.elapsed() == pytest.approx(3.0)
