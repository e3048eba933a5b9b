"""Type definitions for the segmentation engine: samples, fragments, utterances and states."""

from dataclasses import dataclass, field
from enum import Enum, auto


class VADState(Enum):
    """Voice activity classification of the current audio stream."""
    SILENT = auto()
    SPEAKING = auto()


class SegmentationState(Enum):
    """Session state machine of SegmentationController.

    State Transitions:
    - IDLE: No session, samples and fragments are ignored
    - CALIBRATING: Collecting the ambient noise window, VAD not trusted yet
    - SILENT: Session running, nobody is speaking
    - SPEAKING: Session running, VAD detected speech

    Transition Rules:
    IDLE → CALIBRATING: start_session() with a valid audio source
    CALIBRATING → SILENT: calibration completed or timed out
    SILENT → SPEAKING: loud frame count reached start threshold
    SPEAKING → SILENT: quiet frame count reached stop threshold
    CALIBRATING / SILENT / SPEAKING → IDLE: stop_session()
    """
    IDLE = auto()
    CALIBRATING = auto()
    SILENT = auto()
    SPEAKING = auto()


class TriggerReason(Enum):
    """Why an utterance was finalized."""
    PUNCTUATION_BOUNDARY = "punctuation_boundary"
    CONVERSATIONAL_ENDER = "conversational_ender"
    LONG_SENTENCE_TIMEOUT = "long_sentence_timeout"
    SILENCE_TIMEOUT = "silence_timeout"
    SESSION_STOP = "session_stop"


@dataclass(frozen=True)
class EnergySample:
    """Single energy reading of the audio stream.

    Attributes:
        magnitude: Non-negative energy on the analyser scale (0..510)
        timestamp: Capture time in seconds
    """
    magnitude: float
    timestamp: float

    def __post_init__(self):
        if self.magnitude < 0:
            raise ValueError(f"magnitude must be non-negative, got {self.magnitude}")


@dataclass(frozen=True)
class TranscriptFragment:
    """Text fragment pushed by the external recognizer.

    Attributes:
        text: Recognized text (may be empty, empty fragments are ignored)
        is_final: False for interim hypotheses that later fragments may supersede
        confidence: Recognizer confidence in [0, 1]
        timestamp: Time the recognizer produced the fragment, in seconds
    """
    text: str
    is_final: bool
    confidence: float = 1.0
    timestamp: float = 0.0

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")


@dataclass
class AccumulatedUtterance:
    """Running buffer of committed (final) text, owned by UtteranceAccumulator.

    speech_anchored is True when start_time is a VAD speech start rather
    than the arrival of the first fragment.
    """
    text: str = ""
    start_time: float | None = None
    last_update_time: float | None = None
    word_count: int = 0
    speech_anchored: bool = False


@dataclass(frozen=True)
class FinalizedUtterance:
    """Completed utterance handed to downstream collaborators.

    Attributes:
        text: Enhanced utterance text
        duration_ms: Time from the utterance start (VAD speech start or first
            fragment) to the last committed fragment
        word_count: Whitespace-delimited word count of text
        trigger_reason: What decided the utterance was complete
        raw_text: Committed buffer as accumulated, before enhancement
    """
    text: str
    duration_ms: int
    word_count: int
    trigger_reason: TriggerReason
    raw_text: str = field(default="", compare=False)
