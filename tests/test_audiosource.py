# tests/test_audiosource.py
import queue
from unittest.mock import Mock, patch

import numpy as np
import pytest

from speech_segmenter.SessionState import SessionState
from speech_segmenter.sound.AudioSource import AudioSource
from speech_segmenter.types import SegmentationState


@pytest.fixture
def chunk_queue():
    return queue.Queue()


@pytest.fixture
def audio_source(chunk_queue, config):
    return AudioSource(chunk_queue=chunk_queue, config=config)


def test_chunk_size_follows_sampling_cadence(audio_source):
    assert audio_source.chunk_size == 256


def test_callback_puts_first_channel_to_queue(audio_source, chunk_queue):
    indata = np.random.randn(256, 2).astype(np.float32) * 0.1

    with patch('time.time', return_value=123.456):
        audio_source.audio_callback(indata, 256, None, None)

    chunk_data = chunk_queue.get_nowait()
    assert chunk_data['timestamp'] == 123.456
    assert chunk_data['audio'].dtype == np.float32
    np.testing.assert_array_equal(chunk_data['audio'], indata[:, 0])


def test_callback_drops_chunk_when_queue_full(config):
    full_queue = queue.Queue(maxsize=1)
    audio_source = AudioSource(chunk_queue=full_queue, config=config)
    indata = np.zeros((256, 1), dtype=np.float32)

    audio_source.audio_callback(indata, 256, None, None)
    audio_source.audio_callback(indata, 256, None, None)

    assert full_queue.qsize() == 1
    assert audio_source.dropped_chunks == 1


def test_channels_capped_at_requested(audio_source):
    with patch('speech_segmenter.sound.AudioSource.sd.query_devices', return_value={'max_input_channels': 2}):
        assert audio_source.channels == 1


def test_channels_zero_without_input_device(audio_source):
    with patch('speech_segmenter.sound.AudioSource.sd.query_devices', side_effect=ValueError("No input device matching")):
        assert audio_source.channels == 0


def test_start_opens_stream_and_idle_closes_it(chunk_queue, config):
    session_state = SessionState()
    audio_source = AudioSource(chunk_queue=chunk_queue, config=config, session_state=session_state)

    with patch('speech_segmenter.sound.AudioSource.sd.InputStream') as mock_stream_cls:
        stream = Mock()
        mock_stream_cls.return_value = stream

        audio_source.start()
        assert mock_stream_cls.call_args.kwargs['blocksize'] == 256
        stream.start.assert_called_once()

        session_state.set_state(SegmentationState.CALIBRATING)
        session_state.set_state(SegmentationState.IDLE)

    stream.stop.assert_called_once()
    stream.close.assert_called_once()
    assert audio_source.stream is None
    assert not audio_source.is_running
