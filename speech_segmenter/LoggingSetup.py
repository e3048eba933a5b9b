# speech_segmenter/LoggingSetup.py
import io
import sys
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import TextIO

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


def _utf8_stream(stream: TextIO) -> TextIO:
    """Rewrap a console stream as UTF-8 so non-ASCII transcripts print safely."""
    if not hasattr(stream, 'buffer'):
        return stream
    return io.TextIOWrapper(stream.buffer, encoding='utf-8', errors='replace', line_buffering=True)


def _configure(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def _replace_root_handlers(root_logger: logging.Logger, handlers: list[logging.Handler]) -> None:
    """Swap in new handlers, closing the old ones so repeated setup leaks no log files."""
    for old in list(root_logger.handlers):
        root_logger.removeHandler(old)
        old.close()
    for handler in handlers:
        root_logger.addHandler(handler)


def setup_logging(logs_dir: Path,
                  verbose: bool = False,
                  is_frozen: bool = False,
                  log_filename: str = "segmenter.log") -> Path:
    """
    Configure the root logger for a segmentation session.

    Session logs go to a rotating file; a console handler on stdout is
    added unless running without a console. Calling it again replaces
    and closes the previous handlers.

    Args:
        logs_dir: Directory to store log files, created if missing
        verbose: If True, log at DEBUG (per-frame VAD diagnostics); otherwise INFO
        is_frozen: If True, skip console handler (no console attached)
        log_filename: Name of the log file inside logs_dir

    Returns:
        Path of the active log file
    """
    level = logging.DEBUG if verbose else logging.INFO
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / log_filename

    handlers: list[logging.Handler] = [
        _configure(RotatingFileHandler(log_file, maxBytes=LOG_MAX_BYTES,
                                       backupCount=LOG_BACKUP_COUNT, encoding='utf-8'), level)
    ]
    if not is_frozen:
        sys.stdout = _utf8_stream(sys.stdout)
        sys.stderr = _utf8_stream(sys.stderr)
        handlers.append(_configure(logging.StreamHandler(sys.stdout), level))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    _replace_root_handlers(root_logger, handlers)

    logging.info(f"Logging to {log_file}: level={logging.getLevelName(level)}, frozen={is_frozen}")
    return log_file
