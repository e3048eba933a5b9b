# tests/test_segmentation_concurrency.py
"""Serialization of controller inputs arriving from several threads at once."""
import threading

from speech_segmenter.SegmentationController import SegmentationController
from speech_segmenter.SegmentationEventPublisher import SegmentationEventPublisher
from speech_segmenter.SegmenterConfig import load_config
from speech_segmenter.types import EnergySample, SegmentationState, TranscriptFragment, TriggerReason


class CollectingSubscriber:
    def __init__(self):
        self.lock = threading.Lock()
        self.utterances = []
        self.finalized = threading.Event()

    def on_speech_start(self):
        pass

    def on_speech_end(self):
        pass

    def on_preview_update(self, text):
        pass

    def on_utterance_finalized(self, utterance):
        with self.lock:
            self.utterances.append(utterance)
        self.finalized.set()

    def on_error(self, error):
        pass


def make_controller(config, subscriber, **kwargs):
    publisher = SegmentationEventPublisher()
    publisher.subscribe(subscriber)
    return SegmentationController(config, publisher=publisher, **kwargs)


def test_concurrent_fragments_each_emitted_once(timer_factory, audio_input):
    config = load_config(overrides={'filter': {'min_duration_ms': 0}})
    subscriber = CollectingSubscriber()
    controller = make_controller(config, subscriber, timer_factory=timer_factory)
    controller.start_session(audio_input)
    timer_factory.last().fire()

    def recognizer(worker):
        for i in range(50):
            controller.process_fragment(TranscriptFragment(f"worker {worker} item {i}.", is_final=True))

    def sampler():
        for i in range(500):
            magnitude = 100.0 if (i // 20) % 2 == 0 else 0.0
            controller.process_energy_sample(EnergySample(magnitude=magnitude, timestamp=i / 60.0))

    threads = [threading.Thread(target=recognizer, args=(w,)) for w in range(4)]
    threads.append(threading.Thread(target=sampler))
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    controller.stop_session()

    texts = sorted(u.text for u in subscriber.utterances)
    expected = sorted(f"worker {w} item {i}." for w in range(4) for i in range(50))
    assert texts == expected
    assert controller.state == SegmentationState.IDLE


def test_real_silence_timer_finalizes(audio_input):
    config = load_config(overrides={'silence': {'base_delay_ms': 50}, 'calibration': {'timeout_ms': 20}})
    subscriber = CollectingSubscriber()
    controller = make_controller(config, subscriber)
    controller.start_session(audio_input)

    for _ in range(60):
        controller.process_energy_sample(EnergySample(magnitude=1.0, timestamp=0.0))
    controller.process_fragment(TranscriptFragment("waiting for more", is_final=True))

    assert subscriber.finalized.wait(timeout=2.0)
    controller.stop_session()

    assert len(subscriber.utterances) == 1
    assert subscriber.utterances[0].trigger_reason == TriggerReason.SILENCE_TIMEOUT
