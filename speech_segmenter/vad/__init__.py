"""Voice activity subsystem - noise calibration and energy-based VAD."""
from speech_segmenter.vad.NoiseCalibrator import NoiseCalibrator
from speech_segmenter.vad.VoiceActivityDetector import VoiceActivityDetector

__all__ = ['NoiseCalibrator', 'VoiceActivityDetector']
