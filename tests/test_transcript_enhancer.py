# tests/test_transcript_enhancer.py
import pytest

from speech_segmenter.SegmenterConfig import load_config
from speech_segmenter.text.TranscriptEnhancer import TranscriptEnhancer


@pytest.fixture
def enhancer(config):
    return TranscriptEnhancer(config)


@pytest.mark.parametrize("raw, expected", [
    ("hello   world", "hello world"),
    ("um I think so", "I think so"),
    ("I think uh so", "I think so"),
    ("Hmm, maybe later.", ", maybe later."),
    ("it's #1 @home", "it's 1 home"),
    ("summer umbrella", "summer umbrella"),
    ("well uh, fine", "well, fine"),
    ("  padded  ", "padded"),
])
def test_enhance(enhancer, raw, expected):
    assert enhancer.enhance(raw) == expected


def test_fillers_are_case_insensitive(enhancer):
    assert enhancer.enhance("UM okay then") == "okay then"


def test_only_fillers_becomes_empty(enhancer):
    assert enhancer.enhance("um uh") == ""


def test_disabled_returns_stripped_input():
    enhancer = TranscriptEnhancer(load_config(overrides={'enhancer': {'enabled': False}}))

    assert enhancer.enhance("  um #hello  ") == "um #hello"
