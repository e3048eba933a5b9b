# speech_segmenter/text/UtteranceAccumulator.py
import logging

from ..types import AccumulatedUtterance, TranscriptFragment


def count_words(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(text.split())


class UtteranceAccumulator:
    """Merges recognizer fragments into the running utterance buffer.

    Only final fragments are committed. Interim fragments replace the
    preview, which exists for UI feedback and is never merged into the
    buffer (interim text is re-sent later as a final fragment, merging it
    would duplicate words).

    drain_and_reset() is the only operation that empties the buffer.
    """

    def __init__(self, verbose: bool = False):
        self.verbose: bool = verbose
        self._utterance: AccumulatedUtterance = AccumulatedUtterance()
        self.preview: str = ""

    @property
    def is_empty(self) -> bool:
        return not self._utterance.text

    @property
    def word_count(self) -> int:
        return self._utterance.word_count

    @property
    def start_time(self) -> float | None:
        return self._utterance.start_time

    @property
    def last_update_time(self) -> float | None:
        return self._utterance.last_update_time

    def append(self, fragment: TranscriptFragment, now: float, start_time: float | None = None) -> bool:
        """Merge a fragment.

        Args:
            fragment: Recognizer output
            now: Arrival time in seconds
            start_time: Utterance start to record when this fragment opens a new
                buffer (e.g. when the VAD saw speech begin), defaults to now

        Returns:
            True if the committed buffer changed
        """
        text = fragment.text.strip()
        if not text:
            return False

        if not fragment.is_final:
            self.preview = text
            return False

        u = self._utterance
        if not u.text:
            u.text = text
            u.start_time = start_time if start_time is not None else now
            u.speech_anchored = start_time is not None
        else:
            u.text = f"{u.text} {text}"
        u.last_update_time = now
        u.word_count = count_words(u.text)
        self.preview = ""

        if self.verbose:
            logging.debug(f"UtteranceAccumulator: buffer='{u.text}' words={u.word_count}")
        return True

    def peek(self) -> str:
        """Current committed text, without mutating the buffer."""
        return self._utterance.text

    def drain_and_reset(self) -> AccumulatedUtterance:
        """Return the accumulated utterance and clear all state."""
        drained = self._utterance
        self._utterance = AccumulatedUtterance()
        self.preview = ""
        return drained
