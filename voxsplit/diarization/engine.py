"""
DiarizationEngine: one-shot unsupervised diarization of a finished recording.

Pipeline (progress milestone in brackets):
  1. feature vectors + silence filter       [0.10]
  2. k-means over active frames             [0.30]
  3. dominant cluster per transcript chunk  [0.60]
  4. merge adjacent same-speaker segments   [0.80]
  5. speaker roster                         [1.00]

At most one run per engine instance. A second call while a run is in flight
raises DiarizationBusyError before touching any state or emitting any event.
Notifications go to an asyncio.Queue supplied by the caller.
"""
from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Sequence

import numpy as np

from voxsplit.diarization.clustering import cluster_frames, extract_feature_vectors
from voxsplit.diarization.errors import DiarizationBusyError
from voxsplit.diarization.events import (
    DEFAULT_ERROR_MESSAGE,
    PROGRESS_MILESTONES,
    CompleteEvent,
    DiarizationEvent,
    ErrorEvent,
    ProgressEvent,
    StartEvent,
)
from voxsplit.diarization.labeling import assign_speakers
from voxsplit.diarization.models import (
    DiarizationConfig,
    DiarizationResult,
    FeatureFrame,
    Transcription,
)
from voxsplit.diarization.segments import optimize_segments, unique_speakers

logger = logging.getLogger(__name__)


class DiarizationEngine:
    """
    Holds its own config, random source and in-flight flag; no module-level state.

    rng: seedable numpy Generator used for centroid initialisation. Pass
    np.random.default_rng(seed) for reproducible runs.
    """

    def __init__(
        self,
        config: DiarizationConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._config = config or DiarizationConfig()
        self._rng = rng if rng is not None else np.random.default_rng()
        self._processing = False

    @property
    def config(self) -> DiarizationConfig:
        return self._config

    @property
    def is_processing(self) -> bool:
        return self._processing

    def set_max_speakers(self, count: int) -> None:
        """Clamped to [1, 10]. Takes effect on the next run."""
        self._config = self._config.with_max_speakers(count)

    async def diarize(
        self,
        features: Sequence[FeatureFrame],
        transcription: Transcription,
        events: asyncio.Queue[DiarizationEvent] | None = None,
        config: DiarizationConfig | None = None,
    ) -> DiarizationResult:
        """
        Label every transcript chunk with a speaker and merge neighbours.

        - config: per-run override of the engine config.
        - events: receives StartEvent, ProgressEvents, then CompleteEvent or ErrorEvent.
        Raises DiarizationBusyError if a run is active; any other failure is
        reported as ErrorEvent(phase="diarization") and re-raised.
        """
        if self._processing:
            raise DiarizationBusyError()
        self._processing = True
        cfg = config or self._config

        def emit(event: DiarizationEvent) -> None:
            if events is not None:
                events.put_nowait(event)

        milestones = iter(PROGRESS_MILESTONES)

        def advance() -> None:
            progress, message = next(milestones)
            logger.debug("Diarization %.0f%%: %s", progress * 100, message)
            emit(ProgressEvent(progress=progress, message=message))

        try:
            emit(StartEvent())
            logger.info(
                "Diarization started: %d frames, %d chunks, max_speakers=%d",
                len(features),
                len(transcription.chunks),
                cfg.max_speakers,
            )

            advance()
            # Validates shape up front so bad input fails in the vector phase
            extract_feature_vectors(features)

            advance()
            loop = asyncio.get_running_loop()
            labeled, model = await loop.run_in_executor(
                None,
                functools.partial(
                    cluster_frames,
                    features,
                    cfg.max_speakers,
                    rng=self._rng,
                    silence_threshold=cfg.silence_threshold,
                    max_iterations=cfg.max_iterations,
                ),
            )
            if model is not None:
                logger.debug("Clustering: k=%d after %d iterations", model.k, model.iterations)

            advance()
            labeled_segments = assign_speakers(labeled, transcription.chunks)

            advance()
            segments = optimize_segments(labeled_segments, cfg.merge_threshold)

            result = DiarizationResult(
                text=transcription.text,
                segments=segments,
                speakers=unique_speakers(segments),
            )

            advance()
            logger.info(
                "Diarization complete: %d segments, speakers=%s",
                len(result.segments),
                result.speakers,
            )
            self._processing = False
            emit(CompleteEvent(result=result))
            return result
        except Exception as e:
            self._processing = False
            logger.exception("Diarization failed: %s", e)
            emit(ErrorEvent(error=str(e) or DEFAULT_ERROR_MESSAGE))
            raise
        finally:
            # Also covers cancellation of the awaiting task
            self._processing = False
