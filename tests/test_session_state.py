# tests/test_session_state.py
import pytest
from unittest.mock import Mock

from speech_segmenter.SessionState import SessionState
from speech_segmenter.types import SegmentationState


@pytest.fixture
def state():
    return SessionState()


def test_initial_state_is_idle(state):
    assert state.get_state() == SegmentationState.IDLE


@pytest.mark.parametrize("path", [
    [SegmentationState.CALIBRATING, SegmentationState.SILENT, SegmentationState.SPEAKING,
     SegmentationState.SILENT, SegmentationState.IDLE],
    [SegmentationState.CALIBRATING, SegmentationState.IDLE],
    [SegmentationState.CALIBRATING, SegmentationState.SILENT, SegmentationState.SPEAKING, SegmentationState.IDLE],
])
def test_valid_paths(state, path):
    for new_state in path:
        state.set_state(new_state)
    assert state.get_state() == path[-1]


@pytest.mark.parametrize("path, invalid", [
    ([], SegmentationState.SILENT),
    ([], SegmentationState.SPEAKING),
    ([SegmentationState.CALIBRATING], SegmentationState.SPEAKING),
    ([SegmentationState.CALIBRATING, SegmentationState.SILENT], SegmentationState.CALIBRATING),
])
def test_invalid_transition_raises(state, path, invalid):
    for new_state in path:
        state.set_state(new_state)

    assert not state.can_transition(invalid)
    with pytest.raises(ValueError, match="Invalid state transition"):
        state.set_state(invalid)


def test_observers_receive_old_and_new_state(state):
    observer = Mock()
    state.register_component_observer(observer)

    state.set_state(SegmentationState.CALIBRATING)
    state.set_state(SegmentationState.IDLE)

    assert observer.call_args_list[0].args == (SegmentationState.IDLE, SegmentationState.CALIBRATING)
    assert observer.call_args_list[1].args == (SegmentationState.CALIBRATING, SegmentationState.IDLE)


def test_observer_may_read_state_during_notification(state):
    seen = []
    state.register_component_observer(lambda old, new: seen.append(state.get_state()))

    state.set_state(SegmentationState.CALIBRATING)

    assert seen == [SegmentationState.CALIBRATING]


def test_rejected_transition_does_not_notify(state):
    observer = Mock()
    state.register_component_observer(observer)

    with pytest.raises(ValueError):
        state.set_state(SegmentationState.SPEAKING)

    observer.assert_not_called()
