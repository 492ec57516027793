"""
In-memory session store. session_id is generated on the backend (WebSocket or API).
Features are written only by the capture WebSocket; results by whichever path ran diarization.
"""
from __future__ import annotations

import time
import uuid
from typing import Any

from voxsplit.diarization.models import DiarizationResult, FeatureFrame

# session_id -> {
#   "features": list[FeatureFrame],      # series of the last completed recording
#   "duration": float,                   # seconds, pauses excluded
#   "result": DiarizationResult | None,
#   "speaker_names": dict[str, str],     # {"A": "Alice"}; export only
#   "created_at": float,
# }
_session_store: dict[str, dict[str, Any]] = {}


def generate_session_id() -> str:
    """Generate a new session_id (UUID hex, 12 chars). Backend only."""
    return uuid.uuid4().hex[:12]


def get_session(session_id: str) -> dict[str, Any] | None:
    """Return session dict or None if not found."""
    return _session_store.get(session_id)


def ensure_session(session_id: str) -> dict[str, Any]:
    """Create session if not exists; return it."""
    if session_id not in _session_store:
        _session_store[session_id] = {
            "features": [],
            "duration": 0.0,
            "result": None,
            "speaker_names": {},
            "created_at": time.time(),
        }
    return _session_store[session_id]


def delete_session(session_id: str) -> bool:
    """Remove session from store. Return True if it existed."""
    if session_id in _session_store:
        del _session_store[session_id]
        return True
    return False


def set_features(session_id: str, features: list[FeatureFrame], duration: float) -> None:
    s = ensure_session(session_id)
    s["features"] = list(features)
    s["duration"] = duration


def set_result(session_id: str, result: DiarizationResult) -> None:
    ensure_session(session_id)["result"] = result


def set_speaker_names(session_id: str, names: dict[str, str]) -> None:
    ensure_session(session_id)["speaker_names"] = dict(names)


def clear_sessions() -> None:
    _session_store.clear()


def list_sessions() -> list[tuple[str, dict[str, Any]]]:
    """All sessions as (session_id, session), oldest first."""
    return sorted(_session_store.items(), key=lambda item: item[1]["created_at"])
