# speech_segmenter/vad/NoiseCalibrator.py
import logging
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from ..errors import CalibrationInsufficientData
from ..timers import TimerFactory, TimerHandle, start_thread_timer
from ..types import EnergySample


class NoiseCalibrator:
    """Establishes the ambient noise floor from a short warm-up window.

    Collects EnergySample magnitudes until either max_samples were seen or
    the wall-clock ceiling expires, whichever comes first. The floor is the
    percentile value of the window (75th by default), which keeps brief loud
    transients during warm-up from inflating the baseline.

    Calibration never raises. With an empty window the result is None and
    the VAD keeps using its static threshold.

    Args:
        config: Configuration dictionary (uses the 'calibration' section)
        on_complete: Called once per calibration with the floor or None
        timer_factory: Starts the wall-clock ceiling timer
        verbose: Enable verbose logging
    """

    def __init__(self,
                 config: Dict[str, Any],
                 on_complete: Callable[[Optional[float]], None],
                 timer_factory: TimerFactory = start_thread_timer,
                 verbose: bool = False):
        calibration_config = config['calibration']
        self.max_samples: int = calibration_config['max_samples']
        self.timeout_s: float = calibration_config['timeout_ms'] / 1000.0
        self.percentile: float = calibration_config['percentile']

        self.on_complete = on_complete
        self.timer_factory: TimerFactory = timer_factory
        self.verbose: bool = verbose

        self._window: List[float] = []
        self._timer: Optional[TimerHandle] = None
        self._generation: int = 0
        self._pending: bool = False

    @property
    def is_pending(self) -> bool:
        return self._pending

    def begin_calibration(self) -> None:
        """Start collecting a new window, cancelling any pending calibration."""
        self.cancel()
        self._generation += 1
        self._pending = True
        self._window = []

        generation = self._generation
        self._timer = self.timer_factory(self.timeout_s, lambda: self._on_timeout(generation))

        if self.verbose:
            logging.debug(f"NoiseCalibrator: calibration #{generation} started "
                          f"(max_samples={self.max_samples}, timeout={self.timeout_s:.2f}s)")

    def add_sample(self, sample: Optional[EnergySample]) -> bool:
        """Add a sample to the pending window.

        Returns:
            True if the sample was consumed by a pending calibration
        """
        if not self._pending:
            return False

        self._window.append(sample.magnitude if sample is not None else 0.0)
        if len(self._window) >= self.max_samples:
            self._finish()
        return True

    def cancel(self) -> None:
        """Drop a pending calibration without publishing a result. No-op when idle."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._pending:
            # invalidates the ceiling timer if it already fired
            self._generation += 1
            self._pending = False
            self._window = []
            if self.verbose:
                logging.debug("NoiseCalibrator: pending calibration cancelled")

    def _on_timeout(self, generation: int) -> None:
        if generation != self._generation or not self._pending:
            return
        self._finish()

    def _finish(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        window = self._window
        self._window = []
        self._pending = False

        if not window:
            logging.warning(f"NoiseCalibrator: {CalibrationInsufficientData.__name__}: "
                            f"no samples collected, keeping static threshold")
            self.on_complete(None)
            return

        floor = self.compute_floor(window, self.percentile)
        logging.info(f"NoiseCalibrator: calibrated noise floor {floor:.2f} from {len(window)} samples")
        self.on_complete(floor)

    @staticmethod
    def compute_floor(window: List[float], percentile: float = 0.75) -> float:
        """Return the percentile value of window.

        Uses the sorted-order element at index floor(percentile * len(window)),
        not an interpolated percentile.
        """
        ordered = np.sort(np.asarray(window, dtype=np.float64))
        idx = min(int(np.floor(len(ordered) * percentile)), len(ordered) - 1)
        return float(ordered[idx])
