"""
ResultWriter: persists each finished diarization result per session.

Files (in TRANSCRIPT_DIR):
- {session_id}_diarization.json: the full result (text, segments, speakers).
- {session_id}.txt: text export with timestamps and speaker names.

Writes run in the default executor so the event loop is never blocked.
Failures are logged and swallowed: persistence must not fail a diarization
request whose result the client already has.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Optional

from voxsplit.config import get_settings
from voxsplit.diarization.models import DiarizationResult
from voxsplit.transcript.exporter import export_text

logger = logging.getLogger(__name__)


class ResultWriterBase(ABC):
    """Base for result persistence."""

    @abstractmethod
    async def save(
        self,
        session_id: str,
        result: DiarizationResult,
        speaker_names: Optional[Mapping[str, str]] = None,
    ) -> Optional[str]:
        """Write result files. Returns JSON path or None."""
        ...


class NoOpResultWriter(ResultWriterBase):
    """When result saving is disabled. No file I/O."""

    async def save(
        self,
        session_id: str,
        result: DiarizationResult,
        speaker_names: Optional[Mapping[str, str]] = None,
    ) -> Optional[str]:
        return None


class ResultWriter(ResultWriterBase):
    def __init__(self, transcript_dir: Optional[str] = None) -> None:
        settings = get_settings()
        self._transcript_dir = transcript_dir or settings.TRANSCRIPT_DIR

    def _write_sync(
        self,
        session_id: str,
        result: DiarizationResult,
        speaker_names: Optional[Mapping[str, str]],
    ) -> str:
        os.makedirs(self._transcript_dir, exist_ok=True)
        json_path = os.path.join(self._transcript_dir, f"{session_id}_diarization.json")
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
        text_path = os.path.join(self._transcript_dir, f"{session_id}.txt")
        with open(text_path, "w", encoding="utf-8") as f:
            f.write(export_text(result.segments, speaker_names=speaker_names))
        return json_path

    async def save(
        self,
        session_id: str,
        result: DiarizationResult,
        speaker_names: Optional[Mapping[str, str]] = None,
    ) -> Optional[str]:
        loop = asyncio.get_running_loop()
        try:
            path = await loop.run_in_executor(None, self._write_sync, session_id, result, speaker_names)
        except OSError as e:
            logger.warning("Failed to save diarization result for %s: %s", session_id, e)
            return None
        logger.info("Diarization result saved: %s", path)
        return path


def create_result_writer() -> ResultWriterBase:
    """Create writer when RESULT_SAVE_ENABLED is true; else no-op."""
    settings = get_settings()
    if not getattr(settings, "RESULT_SAVE_ENABLED", False):
        return NoOpResultWriter()
    return ResultWriter()
