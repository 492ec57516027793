"""
FastAPI app: WebSocket endpoint for live feature capture; HTTP API for
diarization, session lookup, speaker naming and export.

Client sends binary PCM 16-bit mono 16kHz over /ws/capture plus JSON control
messages. Diarization runs once per request on a complete feature history and
a complete transcript; one run at a time per server (busy -> 409).
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import numpy as np
from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse

from voxsplit.config import configure_logging, get_settings
from voxsplit.diarization import (
    DiarizationBusyError,
    DiarizationConfig,
    DiarizationEngine,
    FeatureShapeError,
)
from voxsplit.schemas.diarization import (
    DiarizeRequest,
    DiarizeResponse,
    SessionSummary,
    SpeakerNamesRequest,
)
from voxsplit.session_store import (
    clear_sessions,
    delete_session,
    ensure_session,
    generate_session_id,
    get_session,
    list_sessions,
    set_result,
    set_speaker_names,
)
from voxsplit.transcript.exporter import EXPORT_FORMATS, export
from voxsplit.transcript.writer import ResultWriterBase, create_result_writer
from voxsplit.websocket_manager import WebSocketManager

logger = logging.getLogger(__name__)

_EXPORT_MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "markdown": "text/markdown; charset=utf-8",
    "text": "text/plain; charset=utf-8",
}


def create_engine() -> DiarizationEngine:
    """Engine from settings; DIARIZATION_RANDOM_SEED makes centroid initialisation reproducible."""
    settings = get_settings()
    rng = np.random.default_rng(settings.DIARIZATION_RANDOM_SEED)
    return DiarizationEngine(config=DiarizationConfig.from_settings(settings), rng=rng)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    app.state.engine = create_engine()
    app.state.result_writer = create_result_writer()
    logger.info("Diarization engine ready (max_speakers=%d)", app.state.engine.config.max_speakers)
    yield
    app.state.engine = None
    app.state.result_writer = None


app = FastAPI(
    title="Unsupervised Speaker Diarization",
    description="Acoustic feature capture and k-means speaker labeling of transcripts",
    lifespan=lifespan,
)


def _engine() -> DiarizationEngine:
    engine = getattr(app.state, "engine", None)
    if engine is None:
        raise RuntimeError("App not initialized (lifespan not run?)")
    return engine


def _writer() -> ResultWriterBase:
    return getattr(app.state, "result_writer", None) or create_result_writer()


def _require_session(session_id: str) -> dict:
    session = get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@app.websocket("/ws/capture")
async def websocket_capture(websocket: WebSocket) -> None:
    """
    WebSocket: client sends raw PCM 16-bit mono (binary) and JSON commands (text).
    Server sends JSON: session/recording/paused/stopped and diarization events.
    """
    await websocket.accept()
    manager = WebSocketManager(websocket, _engine(), _writer())
    try:
        await manager.run()
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("Capture WebSocket failed (session %s)", manager.session_id)
        try:
            await websocket.close()
        except Exception:
            pass


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.post("/api/diarize", response_model=DiarizeResponse)
async def diarize(request: DiarizeRequest) -> DiarizeResponse:
    """
    Label transcript chunks with speakers from a feature history.

    Features come from the body, or from the captured series of session_id
    when the body omits them. The result is stored on the session (a new one
    is created when no session_id is given) and optionally saved to disk.
    """
    engine = _engine()
    session_id = (request.session_id or "").strip() or None
    if request.features is not None:
        features = [f.to_frame() for f in request.features]
    elif session_id:
        features = _require_session(session_id)["features"]
    else:
        raise HTTPException(status_code=400, detail="features or session_id is required")

    config = engine.config
    if request.max_speakers is not None:
        config = config.with_max_speakers(request.max_speakers)
    if request.merge_threshold is not None:
        config = DiarizationConfig(
            max_speakers=config.max_speakers,
            merge_threshold=request.merge_threshold,
            min_segment_duration=config.min_segment_duration,
            silence_threshold=config.silence_threshold,
            max_iterations=config.max_iterations,
        )

    try:
        result = await engine.diarize(features, request.transcription.to_transcription(), config=config)
    except DiarizationBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except FeatureShapeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Diarization request failed: %s", e)
        raise HTTPException(status_code=500, detail="Diarization failed")

    session_id = session_id or generate_session_id()
    session = ensure_session(session_id)
    set_result(session_id, result)
    await _writer().save(session_id, result, session.get("speaker_names"))
    return DiarizeResponse.from_result(result, session_id=session_id)


def _summary(session_id: str, session: dict) -> SessionSummary:
    result = session.get("result")
    return SessionSummary(
        session_id=session_id,
        frame_count=len(session.get("features", [])),
        duration=session.get("duration", 0.0),
        speaker_names=session.get("speaker_names", {}),
        result=DiarizeResponse.from_result(result, session_id=session_id) if result else None,
    )


@app.get("/api/sessions", response_model=list[SessionSummary])
async def list_all_sessions() -> list[SessionSummary]:
    """Every stored session, oldest first."""
    return [_summary(session_id, session) for session_id, session in list_sessions()]


@app.delete("/api/sessions")
async def remove_all_sessions() -> dict:
    count = len(list_sessions())
    clear_sessions()
    logger.info("Cleared %d sessions", count)
    return {"deleted": count}


@app.get("/api/sessions/{session_id}", response_model=SessionSummary)
async def session_summary(session_id: str) -> SessionSummary:
    return _summary(session_id, _require_session(session_id))


@app.put("/api/sessions/{session_id}/speakers", response_model=SessionSummary)
async def update_speaker_names(session_id: str, request: SpeakerNamesRequest) -> SessionSummary:
    """Custom display names per speaker label, used by exports."""
    _require_session(session_id)
    set_speaker_names(session_id, request.names)
    return await session_summary(session_id)


@app.get("/api/sessions/{session_id}/export", response_class=PlainTextResponse)
async def export_session(
    session_id: str,
    format: str = Query("text", description=f"One of: {', '.join(EXPORT_FORMATS)}"),
    timestamps: bool = Query(True),
) -> PlainTextResponse:
    session = _require_session(session_id)
    result = session.get("result")
    if result is None:
        raise HTTPException(status_code=404, detail="Session has no diarization result yet")
    try:
        content = export(format, result.segments, timestamps, session.get("speaker_names"))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PlainTextResponse(content, media_type=_EXPORT_MEDIA_TYPES[format])


@app.delete("/api/sessions/{session_id}")
async def remove_session(session_id: str) -> dict:
    if not delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"deleted": session_id}
