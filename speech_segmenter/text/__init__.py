"""Text subsystem - fragment accumulation, sentence boundaries and transcript cleanup."""
from speech_segmenter.text.UtteranceAccumulator import UtteranceAccumulator
from speech_segmenter.text.SentenceBoundaryClassifier import SentenceBoundaryClassifier
from speech_segmenter.text.TranscriptEnhancer import TranscriptEnhancer
from speech_segmenter.text.UtteranceFilter import UtteranceFilter

__all__ = ['UtteranceAccumulator', 'SentenceBoundaryClassifier', 'TranscriptEnhancer', 'UtteranceFilter']
