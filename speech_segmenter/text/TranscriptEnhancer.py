# speech_segmenter/text/TranscriptEnhancer.py
import re
from typing import Any, Dict


class TranscriptEnhancer:
    """Cleans finalized utterance text before it is handed downstream.

    Performs the following steps:
    1. Collapse runs of whitespace
    2. Remove special characters except word characters, apostrophes and . , ! ?
    3. Remove filler words (um, uh, ah, er, mm, hmm) as whole words
    4. Collapse whitespace again and trim

    Args:
        config: Configuration dictionary (uses the 'enhancer' section)
    """

    _SPECIAL_CHARS = re.compile(r"[^\w\s.,!?']")
    _WHITESPACE = re.compile(r"\s+")

    def __init__(self, config: Dict[str, Any]):
        enhancer_config = config['enhancer']
        self.enabled: bool = enhancer_config['enabled']
        fillers = '|'.join(re.escape(word) for word in enhancer_config['filler_words'])
        self._fillers = re.compile(rf"\b(?:{fillers})\b", re.IGNORECASE) if fillers else None

    def enhance(self, transcript: str) -> str:
        """Return the cleaned transcript.

        Returns the stripped input unchanged when enhancement is disabled.
        """
        if not self.enabled:
            return transcript.strip()

        enhanced = self._WHITESPACE.sub(' ', transcript)
        enhanced = self._SPECIAL_CHARS.sub('', enhanced)
        if self._fillers is not None:
            enhanced = self._fillers.sub('', enhanced)
        # filler removal can leave " ," behind
        enhanced = re.sub(r"\s+([.,!?])", r"\1", enhanced)
        return self._WHITESPACE.sub(' ', enhanced).strip()
