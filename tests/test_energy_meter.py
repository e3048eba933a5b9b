# tests/test_energy_meter.py
"""Tests for EnergyMeter: spectrum-based magnitude on the VAD scale."""
import numpy as np
import pytest

from speech_segmenter.sound.EnergyMeter import EnergyMeter


@pytest.fixture
def meter(config):
    return EnergyMeter(config)


def test_silence_is_zero(meter, silence_audio):
    assert meter.measure(silence_audio) == 0.0


def test_tone_exceeds_static_threshold(meter, tone_audio, config):
    assert meter.measure(tone_audio) > config['vad']['static_threshold']


def test_magnitude_bounded_by_gain(meter):
    noise = np.random.default_rng(0).uniform(-1.0, 1.0, 256).astype(np.float32)
    assert 0.0 <= meter.measure(noise) <= 255.0 * 2.0


def test_louder_tone_measures_higher(config, tone_audio):
    quiet_meter, loud_meter = EnergyMeter(config), EnergyMeter(config)

    assert loud_meter.measure(tone_audio) > quiet_meter.measure(tone_audio * 0.01)


def test_short_frame_is_zero_padded(meter):
    assert meter.measure(np.zeros(100, dtype=np.float32)) == 0.0


def test_long_frame_uses_latest_samples(meter, tone_audio):
    frame = np.concatenate([tone_audio, np.zeros(256, dtype=np.float32)])
    assert meter.measure(frame) == 0.0


def test_accepts_channel_axis(meter, tone_audio):
    assert meter.measure(tone_audio.reshape(-1, 1)) > 0.0


def test_smoothing_decays_after_tone(meter, tone_audio, silence_audio):
    loud = meter.measure(tone_audio)
    after = [meter.measure(silence_audio) for _ in range(3)]

    assert loud > after[0] > 0.0
    assert after[0] >= after[1] >= after[2]


def test_reset_forgets_smoothing(meter, tone_audio, silence_audio):
    meter.measure(tone_audio)

    meter.reset()

    assert meter.measure(silence_audio) == 0.0
