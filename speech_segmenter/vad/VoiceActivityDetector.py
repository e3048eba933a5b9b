# speech_segmenter/vad/VoiceActivityDetector.py
import logging
from typing import Any, Dict, Optional

from ..types import EnergySample, VADState


class VoiceActivityDetector:
    """Energy-based Voice Activity Detection with adaptive threshold and debouncing.

    Classifies each EnergySample as loud, quiet or ambiguous relative to a
    threshold that follows the ambient noise floor, and only changes state
    after enough consistent frames.

    Threshold:
    - With a noise floor: max(noise_floor + headroom, static_threshold)
    - Without a floor (not calibrated yet, or calibration had no data): static_threshold

    Debouncing (hysteresis):
    - magnitude > threshold: loud count +1 (saturating), quiet count reset
    - magnitude < threshold - margin_below: quiet count +1 (saturating), loud count reset
      (margin capped at threshold / 2, see quiet_threshold())
    - in between (dead zone): both counts decay by 1 toward 0
    - SILENT → SPEAKING when loud count reaches loud_frames_to_start
    - SPEAKING → SILENT when quiet count reaches quiet_frames_to_stop

    More quiet frames are needed to stop than loud frames to start, so a
    short pause inside a word does not end the speech.

    Noise floor tracking:
    - While quiet frames outnumber loud frames the floor leaks toward the
      current magnitude with a slow EMA (alpha=0.02). A single outlier frame
      moves it by at most alpha of the difference.

    Never raises. A None sample is treated as magnitude 0.

    Args:
        config: Configuration dictionary (uses the 'vad' section)
        verbose: Enable detailed per-frame logging
    """

    def __init__(self, config: Dict[str, Any], verbose: bool = False):
        vad_config = config['vad']
        self.static_threshold: float = vad_config['static_threshold']
        self.headroom: float = vad_config['headroom']
        self.margin_below: float = vad_config['margin_below']
        self.loud_frames_to_start: int = vad_config['loud_frames_to_start']
        self.quiet_frames_to_stop: int = vad_config['quiet_frames_to_stop']
        self.loud_frame_ceiling: int = vad_config['loud_frame_ceiling']
        self.quiet_frame_ceiling: int = vad_config['quiet_frame_ceiling']
        self.alpha: float = vad_config['noise_floor_alpha']
        self.verbose: bool = verbose

        self.noise_floor: Optional[float] = None
        self.reset()

    def reset(self) -> None:
        """Reset state and counters for a new session. Forgets the noise floor."""
        self.state: VADState = VADState.SILENT
        self.loud_frame_count: int = 0
        self.quiet_frame_count: int = 0
        self.noise_floor = None

    def set_noise_floor(self, noise_floor: Optional[float]) -> None:
        """Publish a calibrated floor, or None to fall back to the static threshold."""
        self.noise_floor = noise_floor

    def threshold(self) -> float:
        """Current loudness threshold."""
        if self.noise_floor is None:
            return self.static_threshold
        return max(self.noise_floor + self.headroom, self.static_threshold)

    def quiet_threshold(self, threshold: float) -> float:
        """Magnitude below which a frame counts as quiet.

        The dead zone is margin_below wide, but never wider than half the
        threshold, so silence (magnitude 0) stays quiet at low thresholds.
        """
        return threshold - min(self.margin_below, threshold / 2.0)

    def classify(self, sample: Optional[EnergySample]) -> Optional[VADState]:
        """Process one sample and report a state transition.

        Args:
            sample: Energy sample, None counts as magnitude 0

        Returns:
            The new VADState if this sample caused a transition, else None
        """
        magnitude = sample.magnitude if sample is not None else 0.0

        # Refine the floor from the counters of previous frames, before
        # this frame can tip them toward speech
        self._update_noise_floor(magnitude)

        threshold = self.threshold()
        if magnitude > threshold:
            self.loud_frame_count = min(self.loud_frame_count + 1, self.loud_frame_ceiling)
            self.quiet_frame_count = 0
        elif magnitude < self.quiet_threshold(threshold):
            self.quiet_frame_count = min(self.quiet_frame_count + 1, self.quiet_frame_ceiling)
            self.loud_frame_count = 0
        else:
            self.loud_frame_count = max(self.loud_frame_count - 1, 0)
            self.quiet_frame_count = max(self.quiet_frame_count - 1, 0)

        if self.state == VADState.SILENT and self.loud_frame_count >= self.loud_frames_to_start:
            self.state = VADState.SPEAKING
            if self.verbose:
                logging.debug(f"VoiceActivityDetector: speech start, magnitude={magnitude:.2f} threshold={threshold:.2f}")
            return VADState.SPEAKING

        if self.state == VADState.SPEAKING and self.quiet_frame_count >= self.quiet_frames_to_stop:
            self.state = VADState.SILENT
            if self.verbose:
                logging.debug(f"VoiceActivityDetector: speech end, magnitude={magnitude:.2f} threshold={threshold:.2f}")
            return VADState.SILENT

        return None

    def _update_noise_floor(self, magnitude: float) -> None:
        if self.noise_floor is None:
            return
        if self.quiet_frame_count > self.loud_frame_count:
            self.noise_floor = (1.0 - self.alpha) * self.noise_floor + self.alpha * magnitude
