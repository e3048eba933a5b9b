"""Publisher for segmentation lifecycle events with thread-safe subscriber management.

This module implements the Observer pattern's publisher component, enabling
multiple subscribers to receive speech and utterance events independently.
The publisher isolates SegmentationController from its consumers.
"""

import threading
import logging
from typing import Any, List, TYPE_CHECKING

if TYPE_CHECKING:
    from speech_segmenter.errors import SegmenterError
    from speech_segmenter.protocols import SegmentationSubscriber
    from speech_segmenter.types import FinalizedUtterance


class SegmentationEventPublisher:
    """Manages subscribers and publishes segmentation events.

    Subscribers are notified in registration order. Each subscriber
    receives events independently.

    Thread Safety:
        - Subscription management uses a lock for thread-safe registration
        - Subscriber list is copied before iteration (lock released during callbacks)
        - No locks held during subscriber callbacks (prevents deadlocks)

    Error Handling:
        - Each subscriber notification is wrapped in try-except
        - Exceptions logged but don't affect other subscribers

    Example:
        >>> publisher = SegmentationEventPublisher(verbose=True)
        >>> publisher.subscribe(console)
        >>> publisher.subscribe(analyzer)
        >>> publisher.publish_utterance_finalized(utterance)  # Both receive event
    """

    def __init__(self, verbose: bool = False) -> None:
        self._subscribers: List['SegmentationSubscriber'] = []
        self._lock: threading.Lock = threading.Lock()
        self._verbose: bool = verbose

    def subscribe(self, subscriber: 'SegmentationSubscriber') -> None:
        """Register a subscriber for segmentation events.

        Thread-safe and idempotent - registering the same subscriber multiple
        times has no additional effect.

        Args:
            subscriber: Object implementing SegmentationSubscriber protocol
        """
        with self._lock:
            if subscriber not in self._subscribers:
                self._subscribers.append(subscriber)
                if self._verbose:
                    logging.info(f"Subscriber registered: {subscriber.__class__.__name__}")

    def unsubscribe(self, subscriber: 'SegmentationSubscriber') -> None:
        """Unregister a subscriber. Unregistering a non-existent subscriber is a no-op."""
        with self._lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)
                if self._verbose:
                    logging.info(f"Subscriber unregistered: {subscriber.__class__.__name__}")

    def publish_speech_start(self) -> None:
        self._publish('on_speech_start')

    def publish_speech_end(self) -> None:
        self._publish('on_speech_end')

    def publish_preview_update(self, text: str) -> None:
        self._publish('on_preview_update', text)

    def publish_utterance_finalized(self, utterance: 'FinalizedUtterance') -> None:
        self._publish('on_utterance_finalized', utterance)

    def publish_error(self, error: 'SegmenterError') -> None:
        self._publish('on_error', error)

    def _publish(self, method_name: str, *args: Any) -> None:
        """Call method_name on every subscriber.

        The subscriber list is copied under lock, then callbacks are made
        outside the lock so subscribers may register/unregister during callbacks.
        """
        with self._lock:
            subscribers = list(self._subscribers)

        for subscriber in subscribers:
            try:
                getattr(subscriber, method_name)(*args)
            except Exception as e:
                logging.error(
                    f"Subscriber {subscriber.__class__.__name__} failed {method_name}: {e}",
                    exc_info=True
                )

    def subscriber_count(self) -> int:
        """Get current number of subscribers (thread-safe)."""
        with self._lock:
            return len(self._subscribers)
