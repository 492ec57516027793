"""Application configuration. Loads from env vars."""
from __future__ import annotations

import logging

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings. Override via environment variables."""

    # Audio: PCM 16-bit mono, 16kHz
    SAMPLE_RATE: int = 16000
    SAMPLE_WIDTH: int = 2  # 16-bit
    CHANNELS: int = 1

    # Analysis window: FFT_SIZE samples -> FFT_SIZE / 2 frequency bins
    FFT_SIZE: int = 2048
    # One feature snapshot per hop of received audio (20ms @ 16kHz = 320 samples)
    ANALYSIS_HOP_MS: int = 20
    # Exponential smoothing of the magnitude spectrum between snapshots (0 = none)
    ANALYSER_SMOOTHING: float = 0.8

    # Unsupervised diarization (k-means over feature frames, run once after capture).
    DIARIZATION_MAX_SPEAKERS: int = 3  # clamped to [1, 10]; upper bound, not a target
    DIARIZATION_MERGE_THRESHOLD_SEC: float = 0.5  # max gap for merging same-speaker segments
    DIARIZATION_MIN_SEGMENT_SEC: float = 1.0  # reserved; the merge pass does not enforce it
    DIARIZATION_SILENCE_RMS: float = 0.1  # scaled RMS (rms * 100) at or below this is silence
    DIARIZATION_MAX_ITERATIONS: int = 100
    DIARIZATION_RANDOM_SEED: int | None = None  # None = fresh entropy per run

    # Result persistence: {TRANSCRIPT_DIR}/{session_id}_diarization.json + {session_id}.txt
    RESULT_SAVE_ENABLED: bool = False
    TRANSCRIPT_DIR: str = "./transcripts"

    # Logging: level (DEBUG, INFO, WARNING, ERROR); file path = also write to file (empty = console only).
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()


_LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Install console (and optional file) handlers on the package logger. Safe to call twice."""
    settings = settings or get_settings()
    logger = logging.getLogger("voxsplit")
    logger.setLevel(settings.LOG_LEVEL.upper())
    if logger.handlers:
        return
    formatter = logging.Formatter(_LOG_FORMAT)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    if settings.LOG_FILE:
        try:
            file_handler = logging.FileHandler(settings.LOG_FILE, encoding="utf-8")
        except OSError as e:
            logger.warning("Log file %s not writable: %s", settings.LOG_FILE, e)
        else:
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
