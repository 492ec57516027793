"""
CaptureSession: owns the feature series of one recording.

- Frames are appended only while recording and not paused.
- elapsed() excludes paused time, so frame times stay monotonic and share the
  transcript's time base.
- clock is injectable (seconds, monotonic). The WebSocket path passes an
  audio-sample clock; tests pass a fake.
"""
from __future__ import annotations

import logging
import time
from typing import Callable

import numpy as np

from voxsplit.audio.features import FeatureExtractor
from voxsplit.diarization.models import FeatureFrame

logger = logging.getLogger(__name__)


class CaptureSession:
    def __init__(
        self,
        extractor: FeatureExtractor | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._extractor = extractor or FeatureExtractor()
        self._clock = clock
        self._features: list[FeatureFrame] = []
        self._recording = False
        self._paused = False
        self._start_time = 0.0
        self._pause_start = 0.0
        self._total_paused = 0.0

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def extractor(self) -> FeatureExtractor:
        return self._extractor

    def start(self) -> None:
        """Begin a recording. No-op while already recording. Does not clear features; see reset_features()."""
        if self._recording:
            return
        self._recording = True
        self._paused = False
        self._start_time = self._clock()
        self._total_paused = 0.0
        logger.debug("Capture started")

    def pause(self) -> None:
        if not self._recording or self._paused:
            return
        self._paused = True
        self._pause_start = self._clock()

    def resume(self) -> None:
        if not self._recording or not self._paused:
            return
        self._total_paused += self._clock() - self._pause_start
        self._paused = False

    def stop(self) -> float:
        """End the recording; returns its duration (seconds, pauses excluded). 0 when not recording."""
        if not self._recording:
            return 0.0
        duration = self.elapsed()
        self._recording = False
        self._paused = False
        logger.info("Capture stopped: %.2fs, %d feature frames", duration, len(self._features))
        return duration

    def elapsed(self) -> float:
        """Seconds since start() minus paused time, including a pause in progress."""
        if not self._recording:
            return 0.0
        paused = self._total_paused
        if self._paused:
            paused += self._clock() - self._pause_start
        return self._clock() - self._start_time - paused

    def process(self, freq_db: np.ndarray, time_data: np.ndarray) -> FeatureFrame | None:
        """Extract and append one frame; ignored (None) unless actively recording."""
        if not self._recording or self._paused:
            return None
        frame = self._extractor.extract(freq_db, time_data, self.elapsed())
        self._features.append(frame)
        return frame

    def reset_features(self) -> None:
        self._features = []

    def get_features(self) -> list[FeatureFrame]:
        return list(self._features)
