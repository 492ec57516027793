"""Diarization failures. Busy is raised before any state change; the rest propagate after an error event."""
from __future__ import annotations


class DiarizationError(Exception):
    """Base class for diarization failures."""


class DiarizationBusyError(DiarizationError):
    """A run was requested while another run is in flight."""

    def __init__(self, message: str = "A diarization run is already in progress") -> None:
        super().__init__(message)


class FeatureShapeError(DiarizationError, ValueError):
    """A feature vector does not have the expected number of dimensions."""
