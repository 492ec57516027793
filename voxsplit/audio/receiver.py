"""
AudioReceiver: accepts raw PCM audio from WebSocket and yields analysis hops.

- Expects PCM 16-bit mono (signed, little-endian).
- Emits fixed-size hops (e.g. 20ms = 320 samples) as float32 in [-1.0, 1.0].
- Any remainder (incomplete hop, odd trailing byte) is kept for the next feed.
"""
from __future__ import annotations

import numpy as np

from voxsplit.config import get_settings


def pcm_bytes_to_float32(pcm_bytes: bytes) -> np.ndarray:
    """Convert PCM 16-bit mono bytes to float32 [-1.0, 1.0]."""
    samples = np.frombuffer(pcm_bytes, dtype="<i2")
    return samples.astype(np.float32) / 32768.0


class AudioReceiver:
    """Buffers incoming binary WebSocket messages into fixed-size sample hops."""

    def __init__(self, hop_samples: int | None = None) -> None:
        settings = get_settings()
        if hop_samples is None:
            hop_samples = settings.SAMPLE_RATE * settings.ANALYSIS_HOP_MS // 1000
        self._hop_samples = max(1, hop_samples)
        self._hop_bytes = self._hop_samples * settings.SAMPLE_WIDTH
        self._buffer = bytearray()

    @property
    def hop_samples(self) -> int:
        return self._hop_samples

    def feed(self, data: bytes) -> None:
        """Append raw PCM bytes. Call from WebSocket handler."""
        self._buffer.extend(data)

    def drain_hops(self) -> list[np.ndarray]:
        """Drain all complete hops; remainder stays in buffer."""
        out: list[np.ndarray] = []
        while len(self._buffer) >= self._hop_bytes:
            out.append(pcm_bytes_to_float32(bytes(self._buffer[: self._hop_bytes])))
            del self._buffer[: self._hop_bytes]
        return out

    def clear(self) -> None:
        self._buffer.clear()

    def remaining_bytes(self) -> int:
        """Bytes left in buffer (incomplete hop)."""
        return len(self._buffer)
