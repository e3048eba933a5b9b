import queue
import signal
import sys
import logging
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from .ConsoleSubscriber import ConsoleSubscriber
from .SegmentationController import SegmentationController
from .SegmentationEventPublisher import SegmentationEventPublisher
from .SegmenterConfig import load_config
from .sound.AudioSource import AudioSource
from .sound.EnergyMeter import EnergyMeter
from .sound.EnergySampler import EnergySampler
from .types import TranscriptFragment


class SegmentationPipeline:
    def __init__(self,
                 config_path: Optional[str | Path] = None,
                 overrides: Optional[Dict[str, Any]] = None,
                 device: int | str | None = None,
                 verbose: bool = False) -> None:
        """Wire microphone capture, energy sampling and the segmentation controller.

        Recognizer output is out of scope here: final fragments are fed through
        submit_text() (run() reads them from stdin, one line per fragment).

        Args:
            config_path: Optional path to segmenter_config.json
            overrides: Optional per-session configuration overrides
            device: Optional sounddevice input device
            verbose: Enable verbose logging
        """
        self.config: Dict[str, Any] = load_config(config_path, overrides)
        self._is_stopped: bool = False

        self.chunk_queue: queue.Queue = queue.Queue(maxsize=200)   # Raw audio chunks

        self.publisher: SegmentationEventPublisher = SegmentationEventPublisher(verbose=verbose)
        self.console: ConsoleSubscriber = ConsoleSubscriber()
        self.publisher.subscribe(self.console)

        self.controller: SegmentationController = SegmentationController(
            config=self.config,
            publisher=self.publisher,
            verbose=verbose
        )

        self.audio_source: AudioSource = AudioSource(
            chunk_queue=self.chunk_queue,
            config=self.config,
            session_state=self.controller.session_state,
            device=device,
            verbose=verbose
        )

        self.energy_sampler: EnergySampler = EnergySampler(
            chunk_queue=self.chunk_queue,
            controller=self.controller,
            meter=EnergyMeter(self.config),
            verbose=verbose
        )

    def start(self) -> bool:
        """Validate the microphone, start the session, then capture and sampling."""
        logging.info("Starting segmentation pipeline...")
        if not self.controller.start_session(self.audio_source):
            logging.error("Segmentation session did not start.")
            return False

        self.energy_sampler.start()
        self.audio_source.start()
        logging.info("Pipeline running. Type text and press Enter to send a final fragment, Ctrl+C to stop.")
        return True

    def submit_text(self, text: str, is_final: bool = True) -> None:
        self.controller.process_fragment(TranscriptFragment(text=text, is_final=is_final))

    def stop(self) -> None:
        """Stop the session; AudioSource and EnergySampler stop via their state observers."""
        if self._is_stopped:
            return

        self._is_stopped = True

        logging.info("Stopping pipeline...")
        self.controller.stop_session()
        self.energy_sampler.stop()
        logging.info("Pipeline stopped.")

    def run(self, text_input: TextIO = sys.stdin) -> None:
        if not self.start():
            return

        def signal_handler(sig: int, frame: Any) -> None:
            self.stop()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)

        try:
            for line in text_input:
                self.submit_text(line.rstrip('\n'))
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()
            print("\nFull transcript:", self.console.full_transcript())
