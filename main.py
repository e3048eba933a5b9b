# main.py
import sys
import logging
from pathlib import Path
from typing import Dict

from speech_segmenter.LoggingSetup import setup_logging


# ============================================================================
# PATH RESOLUTION
# ============================================================================
def resolve_paths(script_path: Path) -> Dict[str, Path]:
    """
    Resolves application paths relative to the main script.

    Structure:
        speech-segmenter/              # APP_DIR
        ├── main.py
        ├── speech_segmenter/
        ├── config/                    # CONFIG_DIR
        └── logs/                      # LOGS_DIR

    Args:
        script_path: Path to main script

    Returns:
        Dictionary with resolved paths
    """
    project_dir = script_path.resolve().parent
    return {
        "APP_DIR": project_dir,
        "CONFIG_DIR": project_dir / "config",
        "LOGS_DIR": project_dir / "logs",
    }


def get_config_path(config_name: str, paths: Dict[str, Path]) -> Path:
    """
    Gets path to configuration file in ./config/.

    Args:
        config_name: Config filename (e.g., "segmenter_config.json")
        paths: Resolved paths from resolve_paths()

    Returns:
        Path to config file
    """
    return paths["CONFIG_DIR"] / config_name


def parse_device(value: str):
    """sounddevice accepts a device index or a (partial) device name."""
    return int(value) if value.isdigit() else value


PATHS = resolve_paths(Path(__file__))
LOGS_DIR = PATHS["LOGS_DIR"]


if __name__ == "__main__":
    try:
        verbose = "-v" in sys.argv
        is_frozen = getattr(sys, 'frozen', False)

        # Setup logging BEFORE anything else
        setup_logging(LOGS_DIR, verbose=verbose, is_frozen=is_frozen)

        config_path = get_config_path("segmenter_config.json", PATHS)
        device = None

        for arg in sys.argv:
            if arg.startswith("--config="):
                config_path = Path(arg.split("=", 1)[1])
            elif arg.startswith("--device="):
                device = parse_device(arg.split("=", 1)[1])

        from speech_segmenter.pipeline import SegmentationPipeline

        pipeline = SegmentationPipeline(
            config_path=config_path if config_path.exists() else None,
            device=device,
            verbose=verbose
        )
        pipeline.run()

    except KeyboardInterrupt:
        logging.info("Interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logging.error(f"ERROR: {type(e).__name__}: {e}")
        import traceback
        logging.error(traceback.format_exc())
        sys.exit(1)
