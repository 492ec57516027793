from voxsplit.schemas.diarization import (
    DiarizeRequest,
    DiarizeResponse,
    FeatureFrameIn,
    SegmentOut,
    SessionSummary,
    SpeakerNamesRequest,
    TranscriptChunkIn,
    TranscriptionIn,
)

__all__ = [
    "DiarizeRequest",
    "DiarizeResponse",
    "FeatureFrameIn",
    "SegmentOut",
    "SessionSummary",
    "SpeakerNamesRequest",
    "TranscriptChunkIn",
    "TranscriptionIn",
]
