"""Error taxonomy of the segmentation engine.

Only InputError is fatal (the session does not start). The others are
reported or logged while the session keeps running.
"""


class SegmenterError(Exception):
    """Base class for segmentation engine errors."""


class InputError(SegmenterError):
    """Raised when no usable audio source is provided to start a session."""


class DegradedRecognizerError(SegmenterError):
    """Recognizer fragment stream stalled or failed. Non-fatal."""


class CalibrationInsufficientData(SegmenterError):
    """Calibration finished without samples; the static threshold is used."""


class ConfigError(SegmenterError, ValueError):
    """Raised for invalid segmenter configuration values."""
