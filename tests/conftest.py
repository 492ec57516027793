from __future__ import annotations

import pytest

from voxsplit.session_store import clear_sessions


@pytest.fixture(autouse=True)
def _isolate(monkeypatch, tmp_path):
    """Fresh session store and a private transcript dir for every test."""
    monkeypatch.setenv("TRANSCRIPT_DIR", str(tmp_path / "transcripts"))
    monkeypatch.delenv("RESULT_SAVE_ENABLED", raising=False)
    monkeypatch.delenv("DIARIZATION_MAX_SPEAKERS", raising=False)
    clear_sessions()
    yield
    clear_sessions()
