"""
WebSocketManager: one WebSocket = one capture session.

Binary messages: raw PCM 16-bit mono at SAMPLE_RATE. Each analysis hop is
pushed into the spectrum analyser and one feature snapshot is taken, but only
while recording and not paused; audio received while paused is dropped.

Time base: the capture clock counts processed samples, so frame times are
seconds of recorded audio. Paused audio never reaches the clock, which keeps
frame times monotonic and aligned with transcript timestamps.

Text messages: JSON control commands
  {"type": "start" | "pause" | "resume" | "stop" | "reset"}
  {"type": "diarize", "text": str, "chunks": [{"text", "timestamp": [s, e]}], "max_speakers"?: int}
During "diarize" every engine event is forwarded as JSON in order.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket

from voxsplit.audio import AudioReceiver, CaptureSession, FeatureExtractor, SpectrumAnalyser
from voxsplit.config import get_settings
from voxsplit.diarization import (
    DiarizationBusyError,
    DiarizationEngine,
    DiarizationEvent,
    TranscriptChunk,
    Transcription,
    event_to_dict,
)
from voxsplit.diarization.events import is_terminal
from voxsplit.session_store import (
    ensure_session,
    generate_session_id,
    get_session,
    set_features,
    set_result,
)
from voxsplit.transcript.writer import ResultWriterBase, create_result_writer

logger = logging.getLogger(__name__)


class WebSocketManager:
    def __init__(
        self,
        websocket: WebSocket,
        engine: DiarizationEngine,
        writer: ResultWriterBase | None = None,
    ) -> None:
        self._ws = websocket
        self._engine = engine
        self._writer = writer or create_result_writer()
        settings = get_settings()
        self._sample_rate = settings.SAMPLE_RATE
        self._receiver = AudioReceiver()
        self._analyser = SpectrumAnalyser()
        self._samples_processed = 0
        self._capture = CaptureSession(
            extractor=FeatureExtractor(self._sample_rate),
            clock=self._audio_clock,
        )
        self._session_id = generate_session_id()
        self._closed = False

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def capture(self) -> CaptureSession:
        return self._capture

    def _audio_clock(self) -> float:
        return self._samples_processed / self._sample_rate

    async def _send(self, payload: dict[str, Any]) -> None:
        if self._closed:
            return
        try:
            await self._ws.send_text(json.dumps(payload))
        except Exception:
            self._closed = True

    def _on_audio(self, data: bytes) -> None:
        if not self._capture.is_recording or self._capture.is_paused:
            return
        self._receiver.feed(data)
        for hop in self._receiver.drain_hops():
            self._analyser.push(hop)
            self._samples_processed += hop.size
            self._capture.process(self._analyser.frequency_db(), self._analyser.time_domain())

    async def _forward_events(self, queue: asyncio.Queue[DiarizationEvent]) -> None:
        while True:
            event = await queue.get()
            await self._send(event_to_dict(event))
            if is_terminal(event):
                return

    async def _diarize(self, message: dict[str, Any]) -> None:
        if self._capture.is_recording:
            await self._send({"type": "error", "message": "Stop recording before diarizing"})
            return
        try:
            chunks = [TranscriptChunk.from_dict(c) for c in message.get("chunks") or []]
        except (KeyError, TypeError, ValueError) as e:
            await self._send({"type": "error", "message": f"Invalid chunks: {e}"})
            return
        transcription = Transcription(text=message.get("text") or "", chunks=chunks)
        config = None
        if message.get("max_speakers") is not None:
            try:
                config = self._engine.config.with_max_speakers(int(message["max_speakers"]))
            except (TypeError, ValueError):
                await self._send({"type": "error", "message": "max_speakers must be an integer"})
                return

        session = get_session(self._session_id) or ensure_session(self._session_id)
        queue: asyncio.Queue[DiarizationEvent] = asyncio.Queue()
        forwarder = asyncio.create_task(self._forward_events(queue))
        try:
            result = await self._engine.diarize(
                session["features"], transcription, events=queue, config=config
            )
        except DiarizationBusyError as e:
            forwarder.cancel()
            await self._send({"type": "error", "phase": "busy", "error": str(e)})
            return
        except Exception:
            # ErrorEvent already queued; let the forwarder deliver it
            await forwarder
            return
        await forwarder
        set_result(self._session_id, result)
        await self._writer.save(self._session_id, result, session.get("speaker_names"))

    async def _handle_command(self, text: str) -> None:
        try:
            message = json.loads(text)
        except json.JSONDecodeError:
            await self._send({"type": "error", "message": "Control messages must be JSON"})
            return
        if not isinstance(message, dict):
            await self._send({"type": "error", "message": "Control messages must be JSON objects"})
            return
        command = message.get("type")
        capture = self._capture
        if command == "start":
            if not capture.is_recording:
                capture.reset_features()
                self._receiver.clear()
                self._analyser.reset()
                capture.start()
            await self._send({"type": "recording", "session_id": self._session_id})
        elif command == "pause":
            capture.pause()
            await self._send({"type": "paused", "time": capture.elapsed()})
        elif command == "resume":
            capture.resume()
            await self._send({"type": "recording", "session_id": self._session_id})
        elif command == "stop":
            if capture.is_recording:
                duration = capture.stop()
                set_features(self._session_id, capture.get_features(), duration)
            # Repeated stops report the stored recording without touching it
            session = ensure_session(self._session_id)
            await self._send(
                {"type": "stopped", "duration": session["duration"], "frames": len(session["features"])}
            )
        elif command == "reset":
            capture.reset_features()
            set_features(self._session_id, [], 0.0)
            await self._send({"type": "reset"})
        elif command == "diarize":
            await self._diarize(message)
        else:
            await self._send({"type": "error", "message": f"Unknown command: {command!r}"})

    async def run(self) -> None:
        """Main loop: audio frames feed the capture session; text frames are commands."""
        ensure_session(self._session_id)
        await self._send({"type": "session", "session_id": self._session_id})
        try:
            while not self._closed:
                try:
                    msg = await self._ws.receive()
                except Exception:
                    break
                if msg.get("type") == "websocket.disconnect":
                    break
                data = msg.get("bytes")
                if data is not None:
                    self._on_audio(data)
                    continue
                text = msg.get("text")
                if text is not None:
                    await self._handle_command(text)
        finally:
            self._closed = True
            if self._capture.is_recording:
                duration = self._capture.stop()
                set_features(self._session_id, self._capture.get_features(), duration)
            logger.info("Capture session %s closed", self._session_id)
