# speech_segmenter/ConsoleSubscriber.py
from speech_segmenter.errors import SegmenterError
from speech_segmenter.types import FinalizedUtterance


class ConsoleSubscriber:
    """Prints segmentation events to the terminal.

    Keeps every finalized utterance so the full transcript can be printed
    when the session ends.
    """

    def __init__(self):
        self.utterances: list[FinalizedUtterance] = []

    def on_speech_start(self) -> None:
        print("[SPEECH START]")

    def on_speech_end(self) -> None:
        print("[SPEECH END]")

    def on_preview_update(self, text: str) -> None:
        # Output partial text on the same line
        print(f"[PARTIAL] {text}", end='\r')

    def on_utterance_finalized(self, utterance: FinalizedUtterance) -> None:
        print(f"[FINAL] ({utterance.trigger_reason.value}, {utterance.duration_ms}ms) {utterance.text}")
        self.utterances.append(utterance)

    def on_error(self, error: SegmenterError) -> None:
        print(f"[ERROR] {error.__class__.__name__}: {error}")

    def full_transcript(self) -> str:
        return ' '.join(u.text for u in self.utterances)
