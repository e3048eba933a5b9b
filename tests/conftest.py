# tests/conftest.py
import pytest
import numpy as np

from speech_segmenter.SegmenterConfig import load_config


class FakeTimer:
    """One-shot timer that only fires when a test says so."""

    def __init__(self, delay_s, callback):
        self.delay_s = delay_s
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Run the callback even if cancelled, like a threading.Timer racing cancel()."""
        self.fired = True
        self.callback()


class FakeTimerFactory:
    """Records every timer started through it."""

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def __call__(self, delay_s, callback):
        timer = FakeTimer(delay_s, callback)
        self.timers.append(timer)
        return timer

    def active(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def last(self) -> FakeTimer:
        return self.timers[-1]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAudioInput:
    def __init__(self, channels: int = 1):
        self.channels = channels


@pytest.fixture
def config():
    """Default configuration, validated."""
    return load_config()


@pytest.fixture
def timer_factory():
    return FakeTimerFactory()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audio_input():
    return FakeAudioInput(channels=1)


@pytest.fixture
def silence_audio():
    """256 samples of digital silence at 16kHz."""
    return np.zeros(256, dtype=np.float32)


@pytest.fixture
def tone_audio():
    """256 samples of a loud 440Hz tone at 16kHz."""
    t = np.arange(256, dtype=np.float32) / 16000.0
    return (0.5 * np.sin(2 * np.pi * 440.0 * t)).astype(np.float32)
