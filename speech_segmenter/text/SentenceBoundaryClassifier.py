# speech_segmenter/text/SentenceBoundaryClassifier.py
from typing import Any, Dict, Optional

from ..types import TriggerReason
from .UtteranceAccumulator import count_words


class SentenceBoundaryClassifier:
    """Decides whether accumulated text looks like a complete thought.

    Completion rules:
    - Last non-whitespace character is terminal punctuation (. ! ? : ;)
    - Text ends with a conversational closing phrase ("thank you",
      "over to you", ...), matched case-insensitively as a suffix

    Long-sentence rules:
    - is_long: word count >= long_sentence_words
    - should_flush_long_sentence: the utterance has been accumulating for more
      than max_utterance_ms, OR more than max_fragment_gap_ms passed since the
      previous fragment. The first caps total length, the second caps a
      trailing pause; whichever fires first wins.

    Args:
        config: Configuration dictionary (uses the 'boundary' section)
    """

    def __init__(self, config: Dict[str, Any]):
        boundary_config = config['boundary']
        self.terminal_punctuation: frozenset[str] = frozenset(boundary_config['terminal_punctuation'])
        self.conversational_enders: tuple[str, ...] = tuple(
            ender.lower() for ender in boundary_config['conversational_enders']
        )
        self.long_sentence_words: int = boundary_config['long_sentence_words']
        self.max_utterance_s: float = boundary_config['max_utterance_ms'] / 1000.0
        self.max_fragment_gap_s: float = boundary_config['max_fragment_gap_ms'] / 1000.0

    def completion_reason(self, text: str) -> Optional[TriggerReason]:
        """Return the completion trigger for text, or None if it looks unfinished."""
        trimmed = text.strip()
        if not trimmed:
            return None

        if trimmed[-1] in self.terminal_punctuation:
            return TriggerReason.PUNCTUATION_BOUNDARY

        lowered = trimmed.lower()
        if any(lowered.endswith(ender) for ender in self.conversational_enders):
            return TriggerReason.CONVERSATIONAL_ENDER
        return None

    def is_complete(self, text: str) -> bool:
        return self.completion_reason(text) is not None

    def is_long(self, text: str) -> bool:
        if not text.strip():
            return False
        return count_words(text) >= self.long_sentence_words

    def should_flush_long_sentence(self, start_time: float, last_update_time: float, now: float) -> bool:
        """Check the two elapsed-time caps for an unpunctuated long utterance.

        Args:
            start_time: When the utterance started accumulating
            last_update_time: When the previous fragment arrived
            now: Current time
        """
        speech_duration = now - start_time
        time_since_last_fragment = now - last_update_time
        return speech_duration > self.max_utterance_s or time_since_last_fragment > self.max_fragment_gap_s
