"""
FeatureExtractor: per-snapshot acoustic features for unsupervised diarization.

Input per call: one frequency-domain magnitude array (dB) and one time-domain
sample array for the current analysis window. Output: one FeatureFrame tagged
with the caller's elapsed time.

The only state kept between calls is the previous spectrum (for spectral flux).
Everything else is a pure function of the current snapshot.

Vector layout (fixed order, scaled for Euclidean clustering):
    [centroid, rms*100, flux*10, zcr*1000, low*10, mid*10, high*10]
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from voxsplit.config import get_settings
from voxsplit.diarization.models import FeatureFrame

logger = logging.getLogger(__name__)

# Band edges in Hz: low < 500 <= mid < 2000 <= high
LOW_BAND_HZ = 500.0
MID_BAND_HZ = 2000.0

RMS_SCALE = 100.0
FLUX_SCALE = 10.0
ZCR_SCALE = 1000.0
BAND_SCALE = 10.0


@dataclass(frozen=True)
class BandEnergies:
    """Summed linear magnitude per band."""

    low: float
    mid: float
    high: float


@dataclass(frozen=True)
class AudioFeatures:
    """Unscaled features of one analysis snapshot."""

    spectral_centroid: float
    rms: float
    spectral_flux: float
    zero_crossing_rate: float
    band_energies: BandEnergies

    def to_vector(self) -> tuple[float, ...]:
        return (
            self.spectral_centroid,
            self.rms * RMS_SCALE,
            self.spectral_flux * FLUX_SCALE,
            self.zero_crossing_rate * ZCR_SCALE,
            self.band_energies.low * BAND_SCALE,
            self.band_energies.mid * BAND_SCALE,
            self.band_energies.high * BAND_SCALE,
        )


def db_to_magnitude(freq_db: np.ndarray) -> np.ndarray:
    """10^(dB/20). -inf dB (digital silence) maps to 0."""
    db = np.asarray(freq_db, dtype=np.float64)
    return np.power(10.0, db / 20.0)


def spectral_centroid(magnitudes: np.ndarray) -> float:
    """Magnitude-weighted mean bin index; 0 when total magnitude is 0."""
    total = float(np.sum(magnitudes))
    if total == 0.0:
        return 0.0
    bins = np.arange(len(magnitudes), dtype=np.float64)
    return float(np.sum(magnitudes * bins) / total)


def rms(samples: np.ndarray) -> float:
    x = np.asarray(samples, dtype=np.float64)
    if x.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(x * x)))


def zero_crossing_rate(samples: np.ndarray) -> float:
    """
    Fraction of adjacent pairs that cross between negative and non-negative,
    divided by the sample count (not the pair count).
    """
    x = np.asarray(samples, dtype=np.float64)
    if x.size == 0:
        return 0.0
    negative = x < 0
    crossings = np.count_nonzero(negative[1:] != negative[:-1])
    return crossings / x.size


def band_energies(magnitudes: np.ndarray, sample_rate: int) -> BandEnergies:
    """Sum linear magnitudes into low (<500 Hz), mid (<2 kHz) and high bands."""
    n = len(magnitudes)
    nyquist = sample_rate / 2.0
    low_cutoff = LOW_BAND_HZ / nyquist * n
    mid_cutoff = MID_BAND_HZ / nyquist * n
    bins = np.arange(n)
    low_mask = bins < low_cutoff
    mid_mask = ~low_mask & (bins < mid_cutoff)
    high_mask = ~(low_mask | mid_mask)
    return BandEnergies(
        low=float(np.sum(magnitudes[low_mask])),
        mid=float(np.sum(magnitudes[mid_mask])),
        high=float(np.sum(magnitudes[high_mask])),
    )


class FeatureExtractor:
    """
    Turns analysis snapshots into FeatureFrames.

    Spectral flux compares against the previous spectrum, kept in dB. The first
    snapshot after construction or reset() yields flux 0 and seeds the history
    with a 0 dB spectrum (the snapshot itself is not stored), so the second
    snapshot is compared against unit magnitudes.
    """

    def __init__(self, sample_rate: int | None = None) -> None:
        settings = get_settings()
        self._sample_rate = sample_rate or settings.SAMPLE_RATE
        self._prev_db: np.ndarray | None = None

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def reset(self) -> None:
        """Forget the previous spectrum; next snapshot yields flux 0."""
        self._prev_db = None

    def spectral_flux(self, freq_db: np.ndarray) -> float:
        db = np.asarray(freq_db, dtype=np.float64)
        if self._prev_db is None or self._prev_db.shape != db.shape:
            if self._prev_db is not None:
                logger.debug(
                    "Spectrum size changed (%d -> %d bins); flux history reseeded",
                    self._prev_db.size,
                    db.size,
                )
            self._prev_db = np.zeros_like(db)
            return 0.0
        diff = db_to_magnitude(db) - db_to_magnitude(self._prev_db)
        self._prev_db = db.copy()
        return float(np.sqrt(np.sum(diff * diff)))

    def analyze(self, freq_db: np.ndarray, time_data: np.ndarray) -> AudioFeatures:
        """Compute unscaled features; advances the flux history."""
        magnitudes = db_to_magnitude(freq_db)
        return AudioFeatures(
            spectral_centroid=spectral_centroid(magnitudes),
            rms=rms(time_data),
            spectral_flux=self.spectral_flux(freq_db),
            zero_crossing_rate=zero_crossing_rate(time_data),
            band_energies=band_energies(magnitudes, self._sample_rate),
        )

    def extract(self, freq_db: np.ndarray, time_data: np.ndarray, time: float) -> FeatureFrame:
        """One snapshot -> one FeatureFrame tagged with elapsed time (seconds)."""
        features = self.analyze(freq_db, time_data)
        return FeatureFrame(time=float(time), vector=features.to_vector())
