# speech_segmenter/__init__.py
from .SegmentationController import SegmentationController
from .SegmentationEventPublisher import SegmentationEventPublisher
from .SegmenterConfig import DEFAULT_CONFIG, load_config
from .types import (
    EnergySample,
    FinalizedUtterance,
    SegmentationState,
    TranscriptFragment,
    TriggerReason,
    VADState,
)

__all__ = [
    'SegmentationController',
    'SegmentationEventPublisher',
    'DEFAULT_CONFIG',
    'load_config',
    'EnergySample',
    'FinalizedUtterance',
    'SegmentationState',
    'TranscriptFragment',
    'TriggerReason',
    'VADState',
]
