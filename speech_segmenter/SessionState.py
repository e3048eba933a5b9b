"""
SessionState - Segmentation session state holder with observer pattern.

Holds the SegmentationController state and notifies component observers
(e.g. EnergySampler) with (old_state, new_state) on every transition.

State mutations are protected by threading.Lock.

State Machine:
- IDLE -> CALIBRATING
- CALIBRATING -> SILENT, IDLE
- SILENT -> SPEAKING, IDLE
- SPEAKING -> SILENT, IDLE
"""
import threading
from typing import Callable, Dict, List, Set

from speech_segmenter.types import SegmentationState


StateObserver = Callable[[SegmentationState, SegmentationState], None]


class SessionState:
    """
    Manages session state with observer pattern.

    Attributes:
        _state: Current SegmentationState
        _lock: Thread lock for state mutations
        _component_observers: Observers receiving (old_state, new_state)
    """

    _VALID_TRANSITIONS: Dict[SegmentationState, Set[SegmentationState]] = {
        SegmentationState.IDLE: {SegmentationState.CALIBRATING},
        SegmentationState.CALIBRATING: {SegmentationState.SILENT, SegmentationState.IDLE},
        SegmentationState.SILENT: {SegmentationState.SPEAKING, SegmentationState.IDLE},
        SegmentationState.SPEAKING: {SegmentationState.SILENT, SegmentationState.IDLE},
    }

    def __init__(self):
        self._state = SegmentationState.IDLE
        self._lock = threading.Lock()
        self._component_observers: List[StateObserver] = []

    def get_state(self) -> SegmentationState:
        """Get current state (thread-safe)."""
        with self._lock:
            return self._state

    def can_transition(self, new_state: SegmentationState) -> bool:
        with self._lock:
            return new_state in self._VALID_TRANSITIONS[self._state]

    def set_state(self, new_state: SegmentationState) -> None:
        """
        Set new state and notify observers (thread-safe).

        Args:
            new_state: State to transition to

        Raises ValueError
        """
        with self._lock:
            old_state = self._state

            if new_state not in self._VALID_TRANSITIONS[old_state]:
                raise ValueError(
                    f"Invalid state transition: {old_state.name} -> {new_state.name}"
                )

            self._state = new_state
            observers = list(self._component_observers)

        # Notify observers outside the lock to avoid deadlocks
        for observer in observers:
            observer(old_state, new_state)

    def register_component_observer(self, observer: StateObserver) -> None:
        """
        Args:
            observer: Callable that receives (old_state, new_state)
        """
        with self._lock:
            self._component_observers.append(observer)
