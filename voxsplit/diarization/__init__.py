"""
Unsupervised speaker diarization over acoustic feature frames.

- No enrollment; labels (A, B, ...) are local to one run.
- Runs once over a complete feature history and a complete transcript.
- The configured max speaker count is an upper bound, not a target.

Limitations (see clustering.py and labeling.py):
- Features are coarse spectral/energy statistics, not voiceprints; two voices
  with similar timbre and level may share a label.
- Overlapping speech resolves to the majority cluster of the chunk.
"""
from __future__ import annotations

from voxsplit.diarization.engine import DiarizationEngine
from voxsplit.diarization.errors import DiarizationBusyError, DiarizationError, FeatureShapeError
from voxsplit.diarization.events import (
    CompleteEvent,
    DiarizationEvent,
    ErrorEvent,
    ProgressEvent,
    StartEvent,
    event_to_dict,
)
from voxsplit.diarization.models import (
    UNKNOWN_SPEAKER,
    DiarizationConfig,
    DiarizationResult,
    FeatureFrame,
    LabeledFrame,
    Segment,
    TranscriptChunk,
    Transcription,
)

__all__ = [
    "DiarizationEngine",
    "DiarizationBusyError",
    "DiarizationError",
    "FeatureShapeError",
    "CompleteEvent",
    "DiarizationEvent",
    "ErrorEvent",
    "ProgressEvent",
    "StartEvent",
    "event_to_dict",
    "UNKNOWN_SPEAKER",
    "DiarizationConfig",
    "DiarizationResult",
    "FeatureFrame",
    "LabeledFrame",
    "Segment",
    "TranscriptChunk",
    "Transcription",
]
