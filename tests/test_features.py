"""Tests for per-snapshot feature extraction."""

from __future__ import annotations

import numpy as np
import pytest

from voxsplit.audio.features import (
    AudioFeatures,
    BandEnergies,
    FeatureExtractor,
    band_energies,
    db_to_magnitude,
    rms,
    spectral_centroid,
    zero_crossing_rate,
)


def test_silent_spectrum_has_zero_centroid():
    silent_db = np.full(16, -np.inf)
    assert spectral_centroid(db_to_magnitude(silent_db)) == 0.0
    assert spectral_centroid(np.zeros(16)) == 0.0


def test_centroid_is_magnitude_weighted_bin_index():
    db = np.full(8, -np.inf)
    db[3] = 0.0
    assert spectral_centroid(db_to_magnitude(db)) == pytest.approx(3.0)

    magnitudes = np.array([0.0, 1.0, 0.0, 1.0])
    assert spectral_centroid(magnitudes) == pytest.approx(2.0)


def test_rms_of_zero_and_constant_buffers():
    assert rms(np.zeros(512)) == 0.0
    assert rms(np.full(512, -0.5)) == pytest.approx(0.5)
    assert rms(np.full(3, 0.25)) == pytest.approx(0.25)
    assert rms(np.array([])) == 0.0


def test_zero_crossing_rate_without_sign_change_is_zero():
    rising_then_flat = np.array([0.1, 0.2, 0.3, 0.3, 0.3])
    assert zero_crossing_rate(rising_then_flat) == 0.0


def test_zero_crossing_rate_alternating_is_n_minus_one_over_n():
    n = 10
    alternating = np.array([1.0 if i % 2 == 0 else -1.0 for i in range(n)])
    assert zero_crossing_rate(alternating) == pytest.approx((n - 1) / n)


def test_zero_counts_as_non_negative():
    assert zero_crossing_rate(np.array([-0.5, 0.0])) == pytest.approx(0.5)
    assert zero_crossing_rate(np.array([0.0, 0.5])) == 0.0


def test_band_energies_split_at_500_and_2000_hz():
    # 16 kHz -> nyquist 8 kHz; 1024 bins -> low < 64, mid < 256
    magnitudes = np.ones(1024)
    bands = band_energies(magnitudes, sample_rate=16000)
    assert bands == BandEnergies(low=64.0, mid=192.0, high=768.0)


def test_vector_scaling_order():
    features = AudioFeatures(
        spectral_centroid=1.0,
        rms=2.0,
        spectral_flux=3.0,
        zero_crossing_rate=4.0,
        band_energies=BandEnergies(low=5.0, mid=6.0, high=7.0),
    )
    assert features.to_vector() == pytest.approx((1.0, 200.0, 30.0, 4000.0, 50.0, 60.0, 70.0))


def test_first_flux_is_zero_then_compared_against_zero_db_seed():
    extractor = FeatureExtractor(sample_rate=16000)
    silent = np.full(4, -np.inf)

    assert extractor.spectral_flux(silent) == 0.0
    # History was seeded with 0 dB (magnitude 1), not with the first snapshot
    assert extractor.spectral_flux(silent) == pytest.approx(2.0)
    # Now the history holds the silent snapshot
    assert extractor.spectral_flux(silent) == 0.0


def test_flux_measures_linear_magnitude_change():
    extractor = FeatureExtractor(sample_rate=16000)
    extractor.spectral_flux(np.zeros(3))
    extractor.spectral_flux(np.zeros(3))
    louder = np.full(3, 20.0)  # magnitude 10
    assert extractor.spectral_flux(louder) == pytest.approx(np.sqrt(3 * 81.0))


def test_reset_restarts_flux_history():
    extractor = FeatureExtractor(sample_rate=16000)
    extractor.spectral_flux(np.zeros(4))
    extractor.spectral_flux(np.full(4, 20.0))
    extractor.reset()
    assert extractor.spectral_flux(np.full(4, 40.0)) == 0.0


def test_bin_count_change_reseeds_history():
    extractor = FeatureExtractor(sample_rate=16000)
    extractor.spectral_flux(np.zeros(4))
    assert extractor.spectral_flux(np.zeros(8)) == 0.0


def test_extract_tags_frame_with_time():
    extractor = FeatureExtractor(sample_rate=16000)
    freq_db = np.zeros(1024)
    samples = np.full(2048, 0.5)
    frame = extractor.extract(freq_db, samples, time=1.25)

    assert frame.time == 1.25
    assert len(frame.vector) == 7
    assert frame.vector[1] == pytest.approx(50.0)  # rms 0.5 * 100
    assert frame.vector[2] == 0.0  # first frame has no flux
    assert frame.vector[3] == 0.0  # constant buffer never crosses zero
