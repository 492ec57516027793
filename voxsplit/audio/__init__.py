"""Audio pipeline: receive PCM, analyse spectrum, extract features per snapshot."""
from .analyser import SpectrumAnalyser
from .capture import CaptureSession
from .features import AudioFeatures, BandEnergies, FeatureExtractor
from .receiver import AudioReceiver, pcm_bytes_to_float32

__all__ = [
    "SpectrumAnalyser",
    "CaptureSession",
    "AudioFeatures",
    "BandEnergies",
    "FeatureExtractor",
    "AudioReceiver",
    "pcm_bytes_to_float32",
]
