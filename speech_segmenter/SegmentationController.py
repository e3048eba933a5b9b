# speech_segmenter/SegmentationController.py
"""
Tests for this module:
- tests/test_segmentation_controller.py - Session lifecycle, VAD edges, finalization triggers
- tests/test_segmentation_concurrency.py - Serialization across sampling, recognizer and timer threads
"""
from __future__ import annotations
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from .SegmentationEventPublisher import SegmentationEventPublisher
from .SessionState import SessionState
from .SilenceTimeoutScheduler import SilenceTimeoutScheduler
from .errors import DegradedRecognizerError, InputError
from .protocols import AudioInput
from .text.SentenceBoundaryClassifier import SentenceBoundaryClassifier
from .text.TranscriptEnhancer import TranscriptEnhancer
from .text.UtteranceAccumulator import UtteranceAccumulator, count_words
from .text.UtteranceFilter import UtteranceFilter
from .timers import TimerFactory, TimerHandle, start_thread_timer
from .types import (
    EnergySample,
    FinalizedUtterance,
    SegmentationState,
    TranscriptFragment,
    TriggerReason,
    VADState,
)
from .vad.NoiseCalibrator import NoiseCalibrator
from .vad.VoiceActivityDetector import VoiceActivityDetector


class SegmentationController:
    """State machine that turns energy samples and transcript fragments into utterances.

    Wires NoiseCalibrator, VoiceActivityDetector, UtteranceAccumulator,
    SentenceBoundaryClassifier and SilenceTimeoutScheduler together and
    publishes lifecycle events through SegmentationEventPublisher.

    States (see SegmentationState):
    IDLE → CALIBRATING → {SILENT ⇄ SPEAKING} → IDLE
    "Accumulating" is a sub-state: is_accumulating is True whenever the
    committed buffer is non-empty, in any non-IDLE state.

    Finalization triggers:
    - Final fragment completes a sentence → PUNCTUATION_BOUNDARY / CONVERSATIONAL_ENDER
    - Long unpunctuated buffer past a time cap → LONG_SENTENCE_TIMEOUT
    - Silence timer fires → SILENCE_TIMEOUT
    - stop_session() with a non-empty buffer → SESSION_STOP

    All of them go through _finalize(), which drains the accumulator only
    when it is non-empty, so each buffer generation is emitted at most once.

    Concurrency:
    - One RLock serializes every mutation: the sampling thread, the recognizer
      callback thread and timer threads all enter through locked methods
    - Events are queued under the lock and published after it is released,
      in emission order, so subscribers may call back into the controller

    Args:
        config: Configuration dictionary (see SegmenterConfig.DEFAULT_CONFIG)
        publisher: Event publisher, a new one is created when omitted
        timer_factory: Starts one-shot timers (calibration ceiling, silence timeout)
        clock: Monotonic time source in seconds
        verbose: Enable verbose logging
    """

    def __init__(self,
                 config: Dict[str, Any],
                 publisher: Optional[SegmentationEventPublisher] = None,
                 timer_factory: TimerFactory = start_thread_timer,
                 clock: Callable[[], float] = time.monotonic,
                 verbose: bool = False):
        self.config: Dict[str, Any] = config
        self.publisher: SegmentationEventPublisher = publisher or SegmentationEventPublisher(verbose=verbose)
        self.session_state: SessionState = SessionState()
        self.verbose: bool = verbose
        self._clock: Callable[[], float] = clock

        self._lock: threading.RLock = threading.RLock()
        self._publish_lock: threading.RLock = threading.RLock()
        self._pending_events: List[Tuple[Callable[..., None], Tuple[Any, ...]]] = []

        serialized_timer_factory = self._serialized_timer_factory(timer_factory)

        self.vad: VoiceActivityDetector = VoiceActivityDetector(config, verbose=verbose)
        self.calibrator: NoiseCalibrator = NoiseCalibrator(
            config,
            on_complete=self._on_calibration_complete,
            timer_factory=serialized_timer_factory,
            verbose=verbose
        )
        self.accumulator: UtteranceAccumulator = UtteranceAccumulator(verbose=verbose)
        self.classifier: SentenceBoundaryClassifier = SentenceBoundaryClassifier(config)
        self.scheduler: SilenceTimeoutScheduler = SilenceTimeoutScheduler(
            config,
            on_timeout=self._on_silence_timeout,
            timer_factory=serialized_timer_factory,
            verbose=verbose
        )
        self.enhancer: TranscriptEnhancer = TranscriptEnhancer(config)
        self.utterance_filter: UtteranceFilter = UtteranceFilter(config)

        self._speech_started_at: float | None = None
        self.finalized_count: int = 0

    @property
    def state(self) -> SegmentationState:
        return self.session_state.get_state()

    @property
    def is_accumulating(self) -> bool:
        with self._lock:
            return self.state != SegmentationState.IDLE and not self.accumulator.is_empty

    @property
    def noise_floor(self) -> float | None:
        return self.vad.noise_floor

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_session(self, source: Optional[AudioInput]) -> bool:
        """Start a listening session: IDLE → CALIBRATING.

        An invalid audio source is reported once via on_error(InputError) and
        the controller stays IDLE.

        Args:
            source: Audio input, must expose a positive channel count

        Returns:
            True if the session started
        """
        with self._lock:
            started = self._start_session_locked(source)
        self._flush_events()
        return started

    def stop_session(self) -> bool:
        """Stop the session: cancel timer and calibration, flush once, → IDLE.

        A session stopped mid-speech publishes on_speech_end after the
        flushed utterance, so subscribers never stay in the speaking state.
        Idempotent: calling it again, or while IDLE, does nothing.

        Returns:
            True if a running session was stopped
        """
        with self._lock:
            stopped = self._stop_session_locked()
        self._flush_events()
        return stopped

    def _start_session_locked(self, source: Optional[AudioInput]) -> bool:
        if self.state != SegmentationState.IDLE:
            logging.warning(f"SegmentationController: session already active ({self.state.name}), start ignored")
            return False

        error = self._validate_source(source)
        if error is not None:
            logging.error(f"SegmentationController: cannot start session: {error}")
            self._emit(self.publisher.publish_error, error)
            return False

        self.vad.reset()
        self.accumulator.drain_and_reset()
        self._speech_started_at = None

        self.session_state.set_state(SegmentationState.CALIBRATING)
        self.calibrator.begin_calibration()
        logging.info("SegmentationController: session started, calibrating noise floor")
        return True

    def _stop_session_locked(self) -> bool:
        if self.state == SegmentationState.IDLE:
            return False

        self.scheduler.cancel()
        self.calibrator.cancel()
        self._finalize(TriggerReason.SESSION_STOP)

        if self.state == SegmentationState.SPEAKING:
            self._emit(self.publisher.publish_speech_end)

        self.vad.reset()
        self._speech_started_at = None
        self.session_state.set_state(SegmentationState.IDLE)
        logging.info(f"SegmentationController: session stopped ({self.finalized_count} utterances finalized)")
        return True

    @staticmethod
    def _validate_source(source: Optional[AudioInput]) -> Optional[InputError]:
        if source is None:
            return InputError("No audio source provided")
        channels = getattr(source, 'channels', 0) or 0
        if channels <= 0:
            return InputError("Audio source has no audio channels")
        return None

    def _on_calibration_complete(self, noise_floor: float | None) -> None:
        # Runs under self._lock: from process_energy_sample or a serialized timer
        self.vad.set_noise_floor(noise_floor)
        if self.state == SegmentationState.CALIBRATING:
            self.session_state.set_state(SegmentationState.SILENT)

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def process_energy_sample(self, sample: Optional[EnergySample]) -> Optional[VADState]:
        """Feed one energy sample from the sampling loop.

        During CALIBRATING the sample goes to the calibrator. In SILENT or
        SPEAKING it is classified by the VAD and speech-start / speech-end
        events are published on the edges only. Ignored while IDLE.

        Returns:
            The VAD transition this sample caused, if any
        """
        with self._lock:
            transition = self._process_energy_sample_locked(sample)
        self._flush_events()
        return transition

    def _process_energy_sample_locked(self, sample: Optional[EnergySample]) -> Optional[VADState]:
        state = self.state
        if state == SegmentationState.IDLE:
            return None

        if state == SegmentationState.CALIBRATING:
            self.calibrator.add_sample(sample)
            return None

        transition = self.vad.classify(sample)
        if transition == VADState.SPEAKING:
            self.session_state.set_state(SegmentationState.SPEAKING)
            if self.accumulator.is_empty:
                self._speech_started_at = self._clock()
            self._emit(self.publisher.publish_speech_start)
        elif transition == VADState.SILENT:
            self.session_state.set_state(SegmentationState.SILENT)
            self._emit(self.publisher.publish_speech_end)
        return transition

    def process_fragment(self, fragment: Optional[TranscriptFragment]) -> None:
        """Handle a fragment pushed by the recognizer.

        Interim fragments update the preview and keep a pending utterance
        alive by re-arming the silence timer. Final fragments are committed,
        re-arm the timer with the new word count and may finalize at once.
        Empty fragments and fragments outside a session are ignored.
        """
        with self._lock:
            self._process_fragment_locked(fragment)
        self._flush_events()

    def _process_fragment_locked(self, fragment: Optional[TranscriptFragment]) -> None:
        if fragment is None or not fragment.text.strip():
            return
        if self.state == SegmentationState.IDLE:
            if self.verbose:
                logging.debug(f"SegmentationController: fragment ignored while idle: '{fragment.text}'")
            return

        now = self._clock()

        if not fragment.is_final:
            self.accumulator.append(fragment, now)
            self._emit(self.publisher.publish_preview_update, self.accumulator.preview)
            if not self.accumulator.is_empty:
                self.scheduler.arm(self.accumulator.word_count)
            return

        previous_update = self.accumulator.last_update_time
        self.accumulator.append(fragment, now, start_time=self._speech_started_at)
        self._speech_started_at = None
        buffer = self.accumulator.peek()

        self.scheduler.arm(self.accumulator.word_count)

        reason = self.classifier.completion_reason(buffer)
        if reason is not None:
            self._finalize(reason)
            return

        if self.classifier.is_long(buffer):
            last_update = previous_update if previous_update is not None else now
            if self.classifier.should_flush_long_sentence(self.accumulator.start_time, last_update, now):
                self._finalize(TriggerReason.LONG_SENTENCE_TIMEOUT)

    def report_recognizer_error(self, reason: str | Exception) -> None:
        """Report a stalled or failing recognizer.

        Non-fatal: the error is published via on_error and the session keeps
        running; the silence timeout eventually finalizes the current buffer.
        """
        with self._lock:
            error = DegradedRecognizerError(str(reason))
            logging.warning(f"SegmentationController: recognizer degraded: {error}")
            self._emit(self.publisher.publish_error, error)
        self._flush_events()

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def _on_silence_timeout(self) -> None:
        # Runs under self._lock via the serialized timer factory
        if self.state == SegmentationState.IDLE:
            return
        self._finalize(TriggerReason.SILENCE_TIMEOUT)

    def _finalize(self, reason: TriggerReason) -> bool:
        """Single choke point that turns the buffer into a FinalizedUtterance.

        Must be called with self._lock held. A no-op on an empty buffer,
        which makes repeated triggers for the same buffer harmless.

        Returns:
            True if an utterance was emitted
        """
        if self.accumulator.is_empty:
            return False

        self.scheduler.cancel()
        drained = self.accumulator.drain_and_reset()

        text = self.enhancer.enhance(drained.text)
        # Only a VAD speech start tells how long the speaker actually talked
        speech_duration_ms = (self._clock() - drained.start_time) * 1000 if drained.speech_anchored else None
        if not self.utterance_filter.accept(text, speech_duration_ms):
            logging.info(f"SegmentationController: discarded utterance '{drained.text}' ({reason.value})")
            return False

        duration_ms = int(round((drained.last_update_time - drained.start_time) * 1000))
        utterance = FinalizedUtterance(
            text=text,
            duration_ms=max(duration_ms, 0),
            word_count=count_words(text),
            trigger_reason=reason,
            raw_text=drained.text,
        )
        self.finalized_count += 1
        logging.info(f"SegmentationController: finalized ({reason.value}, {utterance.word_count} words): '{text}'")
        self._emit(self.publisher.publish_utterance_finalized, utterance)
        return True

    # ------------------------------------------------------------------
    # Event delivery and serialization
    # ------------------------------------------------------------------

    def _emit(self, publish: Callable[..., None], *args: Any) -> None:
        self._pending_events.append((publish, args))

    def _flush_events(self) -> None:
        """Publish queued events outside self._lock, preserving emission order."""
        with self._publish_lock:
            while True:
                with self._lock:
                    if not self._pending_events:
                        return
                    events = self._pending_events
                    self._pending_events = []
                for publish, args in events:
                    publish(*args)

    def _serialized_timer_factory(self, timer_factory: TimerFactory) -> TimerFactory:
        """Wrap timer callbacks so they run under self._lock like every other input."""
        def factory(delay_s: float, callback: Callable[[], None]) -> TimerHandle:
            def run() -> None:
                with self._lock:
                    callback()
                self._flush_events()
            return timer_factory(delay_s, run)
        return factory
