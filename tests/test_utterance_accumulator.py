# tests/test_utterance_accumulator.py
"""Tests for UtteranceAccumulator: final-only merging, preview handling and drain semantics."""
import pytest

from speech_segmenter.text.UtteranceAccumulator import UtteranceAccumulator, count_words
from speech_segmenter.types import TranscriptFragment


def final(text):
    return TranscriptFragment(text=text, is_final=True, confidence=0.9)


def interim(text):
    return TranscriptFragment(text=text, is_final=False, confidence=0.5)


@pytest.fixture
def accumulator():
    return UtteranceAccumulator()


def test_count_words_splits_on_any_whitespace():
    assert count_words("  hello \t big\nworld ") == 3
    assert count_words("") == 0


def test_starts_empty(accumulator):
    assert accumulator.is_empty
    assert accumulator.peek() == ""
    assert accumulator.word_count == 0


def test_final_fragments_are_joined(accumulator):
    assert accumulator.append(final("I think"), now=1.0)
    assert accumulator.append(final(" the answer is "), now=1.5)

    assert accumulator.peek() == "I think the answer is"
    assert accumulator.word_count == 5
    assert accumulator.start_time == 1.0
    assert accumulator.last_update_time == 1.5


def test_interim_fragment_only_updates_preview(accumulator):
    accumulator.append(final("hello"), now=1.0)

    changed = accumulator.append(interim("there my"), now=1.2)

    assert changed is False
    assert accumulator.preview == "there my"
    assert accumulator.peek() == "hello"
    assert accumulator.last_update_time == 1.0


def test_final_fragment_clears_preview(accumulator):
    accumulator.append(interim("there my"), now=1.0)
    accumulator.append(final("there my friend"), now=1.3)

    assert accumulator.preview == ""
    assert accumulator.peek() == "there my friend"


def test_empty_fragment_is_ignored(accumulator):
    assert accumulator.append(final("   "), now=1.0) is False
    assert accumulator.is_empty
    assert accumulator.start_time is None


def test_explicit_start_time_used_for_new_buffer(accumulator):
    accumulator.append(final("hello"), now=3.0, start_time=2.2)
    accumulator.append(final("again"), now=4.0, start_time=3.9)

    assert accumulator.start_time == 2.2
    assert accumulator.drain_and_reset().speech_anchored


def test_buffer_without_start_time_is_not_anchored(accumulator):
    accumulator.append(final("hello"), now=3.0)

    assert accumulator.start_time == 3.0
    assert not accumulator.drain_and_reset().speech_anchored


def test_peek_does_not_mutate(accumulator):
    accumulator.append(final("one two"), now=1.0)

    accumulator.peek()
    accumulator.peek()

    assert accumulator.peek() == "one two"
    assert not accumulator.is_empty


def test_drain_and_reset_returns_contents_and_clears(accumulator):
    accumulator.append(final("one two three"), now=1.0)
    accumulator.append(interim("four"), now=1.1)

    drained = accumulator.drain_and_reset()

    assert drained.text == "one two three"
    assert drained.word_count == 3
    assert drained.start_time == 1.0
    assert accumulator.is_empty
    assert accumulator.preview == ""
    assert accumulator.start_time is None


def test_second_drain_is_empty(accumulator):
    accumulator.append(final("one"), now=1.0)
    accumulator.drain_and_reset()

    drained = accumulator.drain_and_reset()

    assert drained.text == ""
    assert drained.word_count == 0
