# speech_segmenter/sound/EnergySampler.py
from __future__ import annotations
import queue
import threading
import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

from speech_segmenter.sound.EnergyMeter import EnergyMeter
from speech_segmenter.types import EnergySample, SegmentationState

if TYPE_CHECKING:
    from speech_segmenter.SegmentationController import SegmentationController


class EnergySampler:
    """Turns raw audio chunks into EnergySamples and pushes them to the controller.

    Runs in a dedicated thread so audio capture never blocks on VAD or
    segmentation work. Stops itself when the controller session returns
    to IDLE.

    Args:
        chunk_queue: Queue with raw chunks from AudioSource (dict with audio, timestamp)
        controller: SegmentationController receiving the samples
        meter: EnergyMeter converting audio to magnitude
        verbose: Enable verbose logging
    """

    def __init__(self,
                 chunk_queue: queue.Queue,
                 controller: 'SegmentationController',
                 meter: EnergyMeter,
                 verbose: bool = False):
        self.chunk_queue: queue.Queue = chunk_queue
        self.controller: 'SegmentationController' = controller
        self.meter: EnergyMeter = meter
        self.verbose: bool = verbose

        self.is_running: bool = False
        self.thread: Optional[threading.Thread] = None
        self.samples_processed: int = 0

        self.controller.session_state.register_component_observer(self.on_state_change)

    def start(self) -> None:
        """Start processing thread"""
        self.meter.reset()
        self.is_running = True
        self.thread = threading.Thread(target=self.process, daemon=True)
        self.thread.start()

    def stop(self) -> None:
        """Stop processing thread"""
        self.is_running = False
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=2.0)

    def on_state_change(self, old_state: SegmentationState, new_state: SegmentationState) -> None:
        """Stop when the session returns to IDLE."""
        if new_state == SegmentationState.IDLE:
            self.is_running = False

    def process(self) -> None:
        """Main loop: read chunk_queue → controller.process_energy_sample()"""
        while self.is_running:
            try:
                chunk_data = self.chunk_queue.get(timeout=0.1)
            except queue.Empty:
                continue
            self._process_chunk(chunk_data)

    def _process_chunk(self, chunk_data: Dict[str, Any]) -> None:
        magnitude = self.meter.measure(chunk_data['audio'])
        sample = EnergySample(magnitude=magnitude, timestamp=chunk_data['timestamp'])
        self.samples_processed += 1

        if self.verbose and self.samples_processed % 60 == 0:
            logging.debug(f"EnergySampler: magnitude={magnitude:.1f} threshold={self.controller.vad.threshold():.1f}")

        self.controller.process_energy_sample(sample)
