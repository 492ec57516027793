"""
Schemas for the diarization HTTP API.

Inputs: feature history (time + 7-dim scaled vector), speech-to-text output
({text, chunks: [{text, timestamp: [start, end]}]}), optional overrides.
Output: speaker-tagged segments and the speaker roster.
"""
from __future__ import annotations

from pydantic import BaseModel, Field

from voxsplit.diarization.models import (
    FEATURE_DIMENSIONS,
    MAX_SPEAKERS,
    MIN_SPEAKERS,
    DiarizationResult,
    FeatureFrame,
    TranscriptChunk,
    Transcription,
)


class FeatureFrameIn(BaseModel):
    time: float = Field(..., description="Seconds since recording start, pauses excluded")
    vector: list[float] = Field(
        ...,
        min_length=FEATURE_DIMENSIONS,
        max_length=FEATURE_DIMENSIONS,
        description="centroid, rms*100, flux*10, zcr*1000, low*10, mid*10, high*10",
    )

    def to_frame(self) -> FeatureFrame:
        return FeatureFrame(time=self.time, vector=tuple(self.vector))


class TranscriptChunkIn(BaseModel):
    text: str = ""
    timestamp: tuple[float, float] = Field(..., description="[start, end] in seconds")

    def to_chunk(self) -> TranscriptChunk:
        start, end = self.timestamp
        return TranscriptChunk(text=self.text, start=start, end=end)


class TranscriptionIn(BaseModel):
    text: str = ""
    chunks: list[TranscriptChunkIn] = Field(default_factory=list)

    def to_transcription(self) -> Transcription:
        return Transcription(text=self.text, chunks=[c.to_chunk() for c in self.chunks])


class DiarizeRequest(BaseModel):
    """Request body for POST /api/diarize."""

    transcription: TranscriptionIn
    features: list[FeatureFrameIn] | None = Field(
        None,
        description="Feature history; omit to use the series captured for session_id",
    )
    session_id: str | None = Field(None, description="Capture session to read features from / store result in")
    max_speakers: int | None = Field(
        None,
        description=f"Upper bound on speakers (clamped to [{MIN_SPEAKERS}, {MAX_SPEAKERS}])",
    )
    merge_threshold: float | None = Field(None, ge=0.0, description="Max gap (sec) for merging")


class SegmentOut(BaseModel):
    text: str
    start: float
    end: float
    speaker: str


class DiarizeResponse(BaseModel):
    """Response body for POST /api/diarize."""

    text: str
    segments: list[SegmentOut]
    speakers: list[str]
    session_id: str | None = None

    @classmethod
    def from_result(cls, result: DiarizationResult, session_id: str | None = None) -> "DiarizeResponse":
        return cls(
            text=result.text,
            segments=[SegmentOut(**s.to_dict()) for s in result.segments],
            speakers=list(result.speakers),
            session_id=session_id,
        )


class SpeakerNamesRequest(BaseModel):
    """Request body for PUT /api/sessions/{session_id}/speakers."""

    names: dict[str, str] = Field(..., description='Label -> display name, e.g. {"A": "Alice"}')


class SessionSummary(BaseModel):
    session_id: str
    frame_count: int
    duration: float
    speaker_names: dict[str, str]
    result: DiarizeResponse | None = None
