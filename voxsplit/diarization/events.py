"""
Diarization notifications, delivered through an asyncio.Queue owned by the caller.

Order within one run: StartEvent, ProgressEvent x5 (milestones below, never
skipped), then CompleteEvent; or StartEvent, some ProgressEvents, ErrorEvent.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from voxsplit.diarization.models import DiarizationResult

PROGRESS_VECTORS = 0.1
PROGRESS_CLUSTERING = 0.3
PROGRESS_LABELING = 0.6
PROGRESS_OPTIMIZING = 0.8
PROGRESS_DONE = 1.0

PROGRESS_MILESTONES: tuple[tuple[float, str], ...] = (
    (PROGRESS_VECTORS, "Extracting feature vectors..."),
    (PROGRESS_CLUSTERING, "Clustering..."),
    (PROGRESS_LABELING, "Assigning speakers to segments..."),
    (PROGRESS_OPTIMIZING, "Optimizing segments..."),
    (PROGRESS_DONE, "Done"),
)

ERROR_PHASE = "diarization"
DEFAULT_ERROR_MESSAGE = "An error occurred during diarization"


@dataclass(frozen=True)
class StartEvent:
    phase: str = "start"


@dataclass(frozen=True)
class ProgressEvent:
    progress: float  # 0.0-1.0
    message: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "progress", min(1.0, max(0.0, float(self.progress))))


@dataclass(frozen=True)
class CompleteEvent:
    result: DiarizationResult
    phase: str = "complete"


@dataclass(frozen=True)
class ErrorEvent:
    error: str
    phase: str = ERROR_PHASE


DiarizationEvent = Union[StartEvent, ProgressEvent, CompleteEvent, ErrorEvent]


def is_terminal(event: DiarizationEvent) -> bool:
    return isinstance(event, (CompleteEvent, ErrorEvent))


def event_to_dict(event: DiarizationEvent) -> dict[str, Any]:
    """JSON-ready payload for WebSocket clients."""
    if isinstance(event, StartEvent):
        return {"type": "start", "phase": event.phase}
    if isinstance(event, ProgressEvent):
        return {"type": "progress", "progress": event.progress, "message": event.message}
    if isinstance(event, CompleteEvent):
        return {"type": "complete", "phase": event.phase, "result": event.result.to_dict()}
    return {"type": "error", "phase": event.phase, "error": event.error}
