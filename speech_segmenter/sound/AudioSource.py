# speech_segmenter/sound/AudioSource.py
from __future__ import annotations
import sounddevice as sd
import queue
import numpy as np
import time
import logging
from typing import Dict, Any, Optional, TYPE_CHECKING

from speech_segmenter.types import SegmentationState

if TYPE_CHECKING:
    from speech_segmenter.SessionState import SessionState


class AudioSource:
    """Captures audio from the microphone and emits raw chunks to a queue.

    Uses sounddevice to capture real-time audio and immediately puts raw
    chunks into chunk_queue. No processing is done in the callback to prevent
    blocking and audio dropouts; energy metering happens in EnergySampler.

    The chunk duration sets the energy sampling cadence (16 ms ≈ 60 Hz).

    Args:
        chunk_queue: Queue to send raw audio chunks (dict with audio, timestamp)
        config: Configuration dictionary (uses the 'audio' section)
        session_state: Optional SessionState, the stream closes when the session returns to IDLE
        device: Optional sounddevice input device index or name
        verbose: Enable verbose logging
    """

    def __init__(self,
                 chunk_queue: queue.Queue,
                 config: Dict[str, Any],
                 session_state: Optional['SessionState'] = None,
                 device: int | str | None = None,
                 verbose: bool = False):

        self.chunk_queue: queue.Queue = chunk_queue
        self.verbose: bool = verbose

        self.sample_rate: int = config['audio']['sample_rate']
        chunk_duration = config['audio']['chunk_duration']
        self.requested_channels: int = config['audio']['channels']
        self.device = device

        self.chunk_size: int = int(self.sample_rate * chunk_duration)
        self.is_running: bool = False
        self.stream: sd.InputStream | None = None
        self.dropped_chunks: int = 0

        if session_state is not None:
            session_state.register_component_observer(self.on_state_change)

    @property
    def channels(self) -> int:
        """Input channels the selected device offers (0 when there is no input device)."""
        try:
            info = sd.query_devices(self.device, kind='input')
        except (ValueError, sd.PortAudioError) as e:
            logging.error(f"AudioSource: no input device available: {e}")
            return 0
        return min(int(info['max_input_channels']), self.requested_channels)

    def audio_callback(self, indata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:
        """Callback from sounddevice with new audio data.

        Takes the 1st channel if the sound comes in stereo.

        Args:
            indata: Input audio data as numpy array (shape: [frames, channels])
            frames: Number of audio frames
            time_info: Timing information from sounddevice
            status: Status information from sounddevice
        """
        if status:
            logging.error(f"Audio error: {status}")

        audio_float: np.ndarray = indata[:, 0].astype(np.float32)

        chunk_data = {
            'audio': audio_float,
            'timestamp': time.time()
        }

        try:
            self.chunk_queue.put_nowait(chunk_data)
        except queue.Full:
            self.dropped_chunks += 1
            if self.verbose:
                logging.warning(f"AudioSource: chunk_queue full, dropping audio chunk (drops={self.dropped_chunks})")

    def start(self) -> None:
        """Open and start the sounddevice InputStream."""
        self.is_running = True
        self.stream = sd.InputStream(
            samplerate=self.sample_rate,
            channels=1,
            callback=self.audio_callback,
            blocksize=self.chunk_size,
            device=self.device
        )
        self.stream.start()

    def stop(self) -> None:
        """Stop and close the InputStream (releases the microphone)."""
        self.is_running = False
        if self.stream:
            self.stream.stop()
            self.stream.close()
            self.stream = None

    def on_state_change(self, old_state: SegmentationState, new_state: SegmentationState) -> None:
        """Release the microphone when the session returns to IDLE."""
        if new_state == SegmentationState.IDLE:
            self.stop()
