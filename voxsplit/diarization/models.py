"""
Data types shared by the feature extractor and the diarization engine.

- FeatureFrame: one scaled 7-dim feature vector at an elapsed time (seconds,
  paused intervals excluded). Immutable.
- LabeledFrame: FeatureFrame + cluster id (-1 = silence).
- TranscriptChunk / Transcription: speech-to-text output, same time base.
- Segment: speaker-tagged transcript span; speaker is "A".."Z" or "Unknown".

Limitations:
- Speaker labels are session-local letters; no identity inference.
- The number of distinct letters never exceeds DiarizationConfig.max_speakers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from voxsplit.config import Settings, get_settings

FEATURE_DIMENSIONS = 7
FEATURE_NAMES = (
    "spectral_centroid",
    "rms",
    "spectral_flux",
    "zero_crossing_rate",
    "low_band",
    "mid_band",
    "high_band",
)
# Index of the scaled RMS dimension, used for silence filtering
RMS_INDEX = 1

UNKNOWN_SPEAKER = "Unknown"
SILENCE_CLUSTER = -1

MIN_SPEAKERS = 1
MAX_SPEAKERS = 10


@dataclass(frozen=True)
class FeatureFrame:
    time: float
    vector: tuple[float, ...]


@dataclass(frozen=True)
class LabeledFrame:
    time: float
    vector: tuple[float, ...]
    cluster: int  # SILENCE_CLUSTER or 0..k-1


@dataclass
class ClusterModel:
    """Result of one k-means run. centroids: (k, 7); assignments: one id per active vector."""

    centroids: np.ndarray
    assignments: np.ndarray
    iterations: int = 0

    @property
    def k(self) -> int:
        return len(self.centroids)


@dataclass(frozen=True)
class TranscriptChunk:
    text: str
    start: float
    end: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranscriptChunk":
        """Accepts the speech-to-text shape {"text", "timestamp": [start, end]}."""
        start, end = data["timestamp"]
        return cls(text=data.get("text", ""), start=float(start), end=float(end))


@dataclass
class Transcription:
    text: str
    chunks: list[TranscriptChunk] = field(default_factory=list)


@dataclass
class Segment:
    text: str
    start: float
    end: float
    speaker: str

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "start": self.start, "end": self.end, "speaker": self.speaker}


@dataclass
class DiarizationResult:
    text: str
    segments: list[Segment]
    speakers: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "segments": [s.to_dict() for s in self.segments],
            "speakers": list(self.speakers),
        }


def clamp_speakers(count: int) -> int:
    return max(MIN_SPEAKERS, min(MAX_SPEAKERS, int(count)))


@dataclass
class DiarizationConfig:
    """
    Engine options.

    max_speakers: upper bound on k (clamped to [1, 10]).
    merge_threshold: max gap (sec) between same-speaker segments to merge.
    min_segment_duration: reserved; the merge pass checks gap only.
    """

    max_speakers: int = 3
    merge_threshold: float = 0.5
    min_segment_duration: float = 1.0
    silence_threshold: float = 0.1
    max_iterations: int = 100

    def __post_init__(self) -> None:
        self.max_speakers = clamp_speakers(self.max_speakers)

    def with_max_speakers(self, count: int) -> "DiarizationConfig":
        return DiarizationConfig(
            max_speakers=count,
            merge_threshold=self.merge_threshold,
            min_segment_duration=self.min_segment_duration,
            silence_threshold=self.silence_threshold,
            max_iterations=self.max_iterations,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "DiarizationConfig":
        settings = settings or get_settings()
        return cls(
            max_speakers=settings.DIARIZATION_MAX_SPEAKERS,
            merge_threshold=settings.DIARIZATION_MERGE_THRESHOLD_SEC,
            min_segment_duration=settings.DIARIZATION_MIN_SEGMENT_SEC,
            silence_threshold=settings.DIARIZATION_SILENCE_RMS,
            max_iterations=settings.DIARIZATION_MAX_ITERATIONS,
        )
