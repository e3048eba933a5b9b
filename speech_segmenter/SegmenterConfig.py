"""Configuration defaults, loading and validation for the segmentation engine.

Every numeric constant was tuned empirically. They are tunables, not
correctness constraints, so each one is a named default that a JSON file or
per-session overrides can replace.
"""
import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError


DEFAULT_CONFIG: Dict[str, Any] = {
    'calibration': {
        'max_samples': 60,            # ~1s at 60 Hz
        'timeout_ms': 1100,
        'percentile': 0.75,
    },
    'vad': {
        'static_threshold': 8.0,
        'headroom': 10.0,
        'margin_below': 12.0,
        'loud_frames_to_start': 6,
        'quiet_frames_to_stop': 10,
        'loud_frame_ceiling': 6,
        'quiet_frame_ceiling': 10,
        'noise_floor_alpha': 0.02,
    },
    'boundary': {
        'terminal_punctuation': ['.', '!', '?', ':', ';'],
        'conversational_enders': [
            'thank you', 'thanks', "that's all", "that's it", 'done', 'finished',
            'over to you', 'your turn', 'what do you think', 'any questions',
        ],
        'long_sentence_words': 6,
        'max_utterance_ms': 5000,
        'max_fragment_gap_ms': 2000,
    },
    'silence': {
        'base_delay_ms': 1800,
        'medium_word_threshold': 5,
        'medium_extra_ms': 1000,
        'medium_cap_ms': 4500,
        'long_word_threshold': 10,
        'per_word_ms': 200,
        'long_cap_ms': 6000,
    },
    'enhancer': {
        'enabled': True,
        'filler_words': ['um', 'uh', 'ah', 'er', 'mm', 'hmm'],
    },
    'filter': {
        'min_text_length': 3,
        'min_duration_ms': 500,
        'min_meaningful_words': 0,
        'min_meaningful_word_length': 3,
        'non_meaningful_words': ['um', 'uh', 'ah', 'er', 'mm', 'hmm', 'okay', 'ok', 'yeah', 'yes', 'no'],
    },
    'energy': {
        'fft_size': 256,
        'smoothing_time_constant': 0.8,
        'min_decibels': -100.0,
        'max_decibels': -30.0,
        'gain': 2.0,
    },
    'audio': {
        'sample_rate': 16000,
        'chunk_duration': 0.016,      # ~60 Hz sampling cadence
        'channels': 1,
    },
}


def load_config(config_path: Optional[str | Path] = None,
                overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build a validated configuration dictionary.

    Precedence: DEFAULT_CONFIG < JSON file < overrides. Sections are merged
    key by key, so a file or override only needs the values it changes.

    Args:
        config_path: Optional path to segmenter_config.json
        overrides: Optional per-session overrides, same nesting as the file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: config_path given but missing
        ConfigError: a value fails validation
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(path, 'r', encoding='utf-8') as f:
            _deep_merge(config, json.load(f))
        logging.info(f"Loaded segmenter config from {path}")

    if overrides:
        _deep_merge(config, overrides)

    validate_config(config)
    return config


def _deep_merge(base: Dict[str, Any], update: Dict[str, Any]) -> None:
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)


def validate_config(config: Dict[str, Any]) -> None:
    """Raise ConfigError if the configuration is inconsistent."""
    calibration = config['calibration']
    vad = config['vad']
    boundary = config['boundary']
    silence = config['silence']
    utterance_filter = config['filter']

    if calibration['max_samples'] <= 0:
        raise ConfigError("calibration.max_samples must be positive")
    if calibration['timeout_ms'] <= 0:
        raise ConfigError("calibration.timeout_ms must be positive")
    if not 0.0 <= calibration['percentile'] < 1.0:
        raise ConfigError("calibration.percentile must be in [0, 1)")

    if vad['loud_frames_to_start'] <= 0 or vad['quiet_frames_to_stop'] <= 0:
        raise ConfigError("vad frame thresholds must be positive")
    if vad['quiet_frames_to_stop'] <= vad['loud_frames_to_start']:
        raise ConfigError("vad.quiet_frames_to_stop must be greater than vad.loud_frames_to_start")
    if vad['loud_frame_ceiling'] < vad['loud_frames_to_start']:
        raise ConfigError("vad.loud_frame_ceiling must be >= vad.loud_frames_to_start")
    if vad['quiet_frame_ceiling'] < vad['quiet_frames_to_stop']:
        raise ConfigError("vad.quiet_frame_ceiling must be >= vad.quiet_frames_to_stop")
    if not 0.0 < vad['noise_floor_alpha'] <= 1.0:
        raise ConfigError("vad.noise_floor_alpha must be in (0, 1]")
    if vad['headroom'] < 0 or vad['margin_below'] < 0 or vad['static_threshold'] < 0:
        raise ConfigError("vad thresholds must be non-negative")

    if not boundary['terminal_punctuation']:
        raise ConfigError("boundary.terminal_punctuation must not be empty")
    if boundary['long_sentence_words'] <= 0:
        raise ConfigError("boundary.long_sentence_words must be positive")
    if boundary['max_utterance_ms'] <= 0 or boundary['max_fragment_gap_ms'] <= 0:
        raise ConfigError("boundary time limits must be positive")

    if silence['base_delay_ms'] <= 0:
        raise ConfigError("silence.base_delay_ms must be positive")
    if silence['medium_cap_ms'] < silence['base_delay_ms'] or silence['long_cap_ms'] < silence['base_delay_ms']:
        raise ConfigError("silence caps must be >= silence.base_delay_ms")
    if silence['long_word_threshold'] < silence['medium_word_threshold']:
        raise ConfigError("silence.long_word_threshold must be >= silence.medium_word_threshold")

    if utterance_filter['min_text_length'] < 0 or utterance_filter['min_duration_ms'] < 0:
        raise ConfigError("filter minimums must be non-negative")
