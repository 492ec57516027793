"""
SpectrumAnalyser: rolling analysis window over received samples.

Produces the two snapshots the feature extractor consumes:
- time_domain(): the latest fft_size samples (zero-padded until filled).
- frequency_db(): fft_size / 2 magnitude bins in dB. Blackman window, real FFT,
  |X| / fft_size, exponential smoothing against the previous snapshot, then
  20*log10. Zero magnitude comes out as -inf dB.
"""
from __future__ import annotations

import numpy as np

from voxsplit.config import get_settings


class SpectrumAnalyser:
    def __init__(self, fft_size: int | None = None, smoothing: float | None = None) -> None:
        settings = get_settings()
        self._fft_size = fft_size or settings.FFT_SIZE
        if self._fft_size < 2 or self._fft_size % 2:
            raise ValueError(f"fft_size must be an even number >= 2, got {self._fft_size}")
        self._smoothing = settings.ANALYSER_SMOOTHING if smoothing is None else smoothing
        if not 0.0 <= self._smoothing < 1.0:
            raise ValueError(f"smoothing must be in [0, 1), got {self._smoothing}")
        self._window = np.blackman(self._fft_size)
        self._samples = np.zeros(self._fft_size, dtype=np.float32)
        self._prev_magnitude = np.zeros(self.bin_count, dtype=np.float64)

    @property
    def fft_size(self) -> int:
        return self._fft_size

    @property
    def bin_count(self) -> int:
        return self._fft_size // 2

    def push(self, samples: np.ndarray) -> None:
        """Shift new samples into the window (oldest samples drop out)."""
        x = np.asarray(samples, dtype=np.float32)
        if x.size == 0:
            return
        if x.size >= self._fft_size:
            self._samples = x[-self._fft_size:].copy()
            return
        self._samples = np.roll(self._samples, -x.size)
        self._samples[-x.size:] = x

    def reset(self) -> None:
        self._samples[:] = 0.0
        self._prev_magnitude[:] = 0.0

    def time_domain(self) -> np.ndarray:
        return self._samples.copy()

    def frequency_db(self) -> np.ndarray:
        spectrum = np.fft.rfft(self._samples * self._window)[: self.bin_count]
        magnitude = np.abs(spectrum) / self._fft_size
        smoothed = self._smoothing * self._prev_magnitude + (1.0 - self._smoothing) * magnitude
        self._prev_magnitude = smoothed
        with np.errstate(divide="ignore"):
            return 20.0 * np.log10(smoothed)
