"""Protocol definitions for segmentation engine collaborators.

This module defines structural interfaces using Python's Protocol for duck typing.
"""

from typing import Protocol

from speech_segmenter.errors import SegmenterError
from speech_segmenter.types import FinalizedUtterance


class SegmentationSubscriber(Protocol):
    """Subscriber interface for segmentation lifecycle events.

    Components implementing this protocol (UI feedback, avatar animation,
    downstream analysis) receive events from SegmentationEventPublisher.
    Classes don't need explicit inheritance, just matching method signatures.

    Thread Safety:
        Implementations must handle calls from background threads. Events are
        delivered from the sampling thread, the recognizer callback thread or
        a timer thread, whichever caused them.
    """

    def on_speech_start(self) -> None:
        """Called on the Silent → Speaking edge of the VAD."""
        ...

    def on_speech_end(self) -> None:
        """Called on the Speaking → Silent edge of the VAD."""
        ...

    def on_preview_update(self, text: str) -> None:
        """Called with the latest interim recognizer text (UI feedback only)."""
        ...

    def on_utterance_finalized(self, utterance: FinalizedUtterance) -> None:
        """Called exactly once per completed utterance."""
        ...

    def on_error(self, error: SegmenterError) -> None:
        """Called with reported errors. Errors never propagate past the controller API."""
        ...


class AudioInput(Protocol):
    """Minimal description of an audio source needed to start a session."""

    @property
    def channels(self) -> int:
        ...
