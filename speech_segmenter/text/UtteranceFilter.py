import logging
import string
from typing import Any, Dict, Optional


class UtteranceFilter:
    """Rejects finalized text that carries no usable content.

    Rules:
    - Text shorter than min_text_length characters is dropped
    - Speech shorter than min_duration_ms is dropped, when the caller knows
      how long the speaker talked (a VAD speech start anchors the utterance)
    - When min_meaningful_words > 0, text needs that many meaningful words:
      at least min_meaningful_word_length characters and not in the
      non-meaningful set (um, okay, yeah, ...). Utterances longer than ten
      words need at least three.

    Args:
        config: Configuration dictionary (uses the 'filter' section)
    """

    def __init__(self, config: Dict[str, Any]):
        filter_config = config['filter']
        self.min_text_length: int = filter_config['min_text_length']
        self.min_duration_ms: int = filter_config['min_duration_ms']
        self.min_meaningful_words: int = filter_config['min_meaningful_words']
        self.min_meaningful_word_length: int = filter_config['min_meaningful_word_length']
        self.non_meaningful_words: frozenset[str] = frozenset(
            word.lower() for word in filter_config['non_meaningful_words']
        )
        self.rejected_count: int = 0

    def rejection_reason(self, text: str, speech_duration_ms: Optional[float] = None) -> Optional[str]:
        """Return why text should be discarded, or None to keep it.

        Args:
            text: Enhanced utterance text
            speech_duration_ms: Time since speech started, None skips the duration rule
        """
        if len(text) < self.min_text_length:
            return "too_short"

        if speech_duration_ms is not None and speech_duration_ms < self.min_duration_ms:
            return "too_short_duration"

        if self.min_meaningful_words > 0:
            words = text.split()
            required = max(self.min_meaningful_words, 3) if len(words) > 10 else self.min_meaningful_words
            meaningful = [
                word for word in words
                if len(word.strip(string.punctuation)) >= self.min_meaningful_word_length
                and word.strip(string.punctuation).lower() not in self.non_meaningful_words
            ]
            if len(meaningful) < required:
                return "not_enough_meaningful_words"
        return None

    def accept(self, text: str, speech_duration_ms: Optional[float] = None) -> bool:
        reason = self.rejection_reason(text, speech_duration_ms)
        if reason is None:
            return True
        self.rejected_count += 1
        logging.debug(f"UtteranceFilter: rejected '{text}': {reason}")
        return False
