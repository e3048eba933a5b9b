# speech_segmenter/sound/EnergyMeter.py
from typing import Any, Dict, Optional

import numpy as np


class EnergyMeter:
    """Converts raw audio frames into the energy magnitude scale used by the VAD.

    Mirrors a browser-style spectrum analyser so thresholds stay comparable
    (static threshold 8, headroom 10, dead zone 12):

    Algorithm:
    1. Take the last fft_size samples (zero-pad shorter frames)
    2. Apply a Blackman window and compute the magnitude spectrum, scaled by 1/fft_size
    3. Smooth over time: X = τ * X_prev + (1 - τ) * |X|
    4. Convert to dB and map [min_decibels, max_decibels] onto 0..255
    5. magnitude = mean(bins) * gain

    The result is in [0, 255 * gain]. Silence maps to 0.

    Args:
        config: Configuration dictionary (uses the 'energy' section)
    """

    def __init__(self, config: Dict[str, Any]):
        energy_config = config['energy']
        self.fft_size: int = energy_config['fft_size']
        self.smoothing: float = energy_config['smoothing_time_constant']
        self.min_db: float = energy_config['min_decibels']
        self.max_db: float = energy_config['max_decibels']
        self.gain: float = energy_config['gain']

        self.window: np.ndarray = np.blackman(self.fft_size).astype(np.float32)
        self._smoothed: Optional[np.ndarray] = None

    def reset(self) -> None:
        """Forget the temporal smoothing state."""
        self._smoothed = None

    def measure(self, audio: np.ndarray) -> float:
        """Return the energy magnitude of a float32 audio frame in [-1, 1]."""
        frame = np.asarray(audio, dtype=np.float32).reshape(-1)
        if len(frame) >= self.fft_size:
            frame = frame[-self.fft_size:]
        else:
            frame = np.pad(frame, (0, self.fft_size - len(frame)))

        spectrum = np.abs(np.fft.rfft(frame * self.window))[:self.fft_size // 2] / self.fft_size

        if self._smoothed is None:
            self._smoothed = spectrum
        else:
            self._smoothed = self.smoothing * self._smoothed + (1.0 - self.smoothing) * spectrum

        with np.errstate(divide='ignore'):
            decibels = 20.0 * np.log10(self._smoothed)

        scaled = 255.0 * (decibels - self.min_db) / (self.max_db - self.min_db)
        byte_bins = np.floor(np.clip(scaled, 0.0, 255.0))
        return float(np.mean(byte_bins) * self.gain)
