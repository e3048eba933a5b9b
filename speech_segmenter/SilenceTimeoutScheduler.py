# speech_segmenter/SilenceTimeoutScheduler.py
import logging
from typing import Any, Callable, Dict, Optional

from .timers import TimerFactory, TimerHandle, start_thread_timer


class SilenceTimeoutScheduler:
    """Single adaptive timer that forces finalization after a quiet period.

    Re-armed on every fragment. Arming always cancels the previous timer
    first, so at most one callback is pending at any time.

    Delay tiers (reference values):
    - <= 5 words:  base delay (1800 ms)
    - 6-10 words:  base + 1000 ms, capped at 4500 ms
    - > 10 words:  base + 200 ms per word, capped at 6000 ms

    Each arm() bumps a generation counter captured by the timer callback.
    A timer that fires after cancel() or after a newer arm() sees a stale
    generation and does nothing.

    Args:
        config: Configuration dictionary (uses the 'silence' section)
        on_timeout: Called when a current (non-stale) timer fires
        timer_factory: Starts one-shot timers, threading.Timer by default
        verbose: Enable verbose logging
    """

    def __init__(self,
                 config: Dict[str, Any],
                 on_timeout: Callable[[], None],
                 timer_factory: TimerFactory = start_thread_timer,
                 verbose: bool = False):
        silence_config = config['silence']
        self.base_delay_ms: int = silence_config['base_delay_ms']
        self.medium_word_threshold: int = silence_config['medium_word_threshold']
        self.medium_extra_ms: int = silence_config['medium_extra_ms']
        self.medium_cap_ms: int = silence_config['medium_cap_ms']
        self.long_word_threshold: int = silence_config['long_word_threshold']
        self.per_word_ms: int = silence_config['per_word_ms']
        self.long_cap_ms: int = silence_config['long_cap_ms']

        self.on_timeout = on_timeout
        self.timer_factory: TimerFactory = timer_factory
        self.verbose: bool = verbose

        self._timer: Optional[TimerHandle] = None
        self._generation: int = 0
        self.fired_count: int = 0

    @property
    def is_pending(self) -> bool:
        return self._timer is not None

    @property
    def generation(self) -> int:
        return self._generation

    def delay_for(self, word_count: int) -> int:
        """Silence delay in milliseconds for an utterance of word_count words."""
        if word_count > self.long_word_threshold:
            return min(self.long_cap_ms, self.base_delay_ms + word_count * self.per_word_ms)
        if word_count > self.medium_word_threshold:
            return min(self.medium_cap_ms, self.base_delay_ms + self.medium_extra_ms)
        return self.base_delay_ms

    def arm(self, word_count: int) -> int:
        """Cancel any pending timer and schedule a new one.

        Returns:
            The scheduled delay in milliseconds
        """
        self.cancel()
        self._generation += 1
        generation = self._generation

        delay_ms = self.delay_for(word_count)
        self._timer = self.timer_factory(delay_ms / 1000.0, lambda: self._fire(generation))

        if self.verbose:
            logging.debug(f"SilenceTimeoutScheduler: armed #{generation} for {delay_ms}ms ({word_count} words)")
        return delay_ms

    def cancel(self) -> None:
        """Cancel the pending timer. No-op when nothing is pending."""
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        self._generation += 1

    def _fire(self, generation: int) -> None:
        if generation != self._generation or self._timer is None:
            if self.verbose:
                logging.debug(f"SilenceTimeoutScheduler: ignored stale timer #{generation}")
            return

        self._timer = None
        self.fired_count += 1
        self.on_timeout()
