# tests/test_energy_sampler.py
import queue
import time
from unittest.mock import Mock

import pytest

from speech_segmenter.SessionState import SessionState
from speech_segmenter.sound.EnergyMeter import EnergyMeter
from speech_segmenter.sound.EnergySampler import EnergySampler
from speech_segmenter.types import EnergySample, SegmentationState


@pytest.fixture
def controller():
    controller = Mock()
    controller.session_state = SessionState()
    controller.vad.threshold.return_value = 8.0
    return controller


@pytest.fixture
def chunk_queue():
    return queue.Queue()


@pytest.fixture
def sampler(chunk_queue, controller, config):
    return EnergySampler(chunk_queue=chunk_queue, controller=controller, meter=EnergyMeter(config))


def wait_for(predicate, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_chunk_becomes_energy_sample(sampler, controller, tone_audio):
    sampler._process_chunk({'audio': tone_audio, 'timestamp': 12.5})

    sample = controller.process_energy_sample.call_args.args[0]
    assert isinstance(sample, EnergySample)
    assert sample.timestamp == 12.5
    assert sample.magnitude > 0.0
    assert sampler.samples_processed == 1


def test_thread_drains_queue(sampler, chunk_queue, controller, silence_audio):
    for i in range(5):
        chunk_queue.put({'audio': silence_audio, 'timestamp': float(i)})

    sampler.start()
    try:
        assert wait_for(lambda: sampler.samples_processed == 5)
    finally:
        sampler.stop()

    timestamps = [c.args[0].timestamp for c in controller.process_energy_sample.call_args_list]
    assert timestamps == [0.0, 1.0, 2.0, 3.0, 4.0]
    assert not sampler.thread.is_alive()


def test_stops_when_session_goes_idle(sampler, controller):
    sampler.start()
    controller.session_state.set_state(SegmentationState.CALIBRATING)
    assert sampler.is_running

    controller.session_state.set_state(SegmentationState.IDLE)

    assert not sampler.is_running
    sampler.thread.join(timeout=2.0)
    assert not sampler.thread.is_alive()


def test_stop_without_start(sampler):
    sampler.stop()
    assert not sampler.is_running
