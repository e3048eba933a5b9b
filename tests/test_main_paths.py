# tests/test_main_paths.py
from pathlib import Path

from main import get_config_path, parse_device, resolve_paths


def test_resolve_paths_relative_to_script(tmp_path):
    script = tmp_path / "main.py"
    script.touch()

    paths = resolve_paths(script)

    assert paths["APP_DIR"] == tmp_path.resolve()
    assert paths["CONFIG_DIR"] == tmp_path.resolve() / "config"
    assert paths["LOGS_DIR"] == tmp_path.resolve() / "logs"


def test_get_config_path():
    paths = {"CONFIG_DIR": Path("/app/config")}
    assert get_config_path("segmenter_config.json", paths) == Path("/app/config/segmenter_config.json")


def test_parse_device_index_or_name():
    assert parse_device("3") == 3
    assert parse_device("USB Mic") == "USB Mic"
