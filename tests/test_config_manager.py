import json

from config_manager import AppConfig, ConfigManager
from services.codec_backend import DEFAULT_BACKEND


def test_missing_file_writes_defaults(tmp_path):
    manager = ConfigManager(path=tmp_path / "nested" / "app_settings.json")

    config = manager.load()

    assert config == AppConfig()
    assert config.max_workers == 16
    assert json.loads(manager.path.read_text(encoding="utf-8"))["backend"] == DEFAULT_BACKEND


def test_unknown_keys_are_ignored_and_known_keys_merged(tmp_path):
    path = tmp_path / "app_settings.json"
    path.write_text(json.dumps({"max_workers": 4, "byte_order": "little", "pin_root": "/opt/pin"}), encoding="utf-8")

    config = ConfigManager(path=path).load()

    assert config.max_workers == 4
    assert config.byte_order == "little"
    assert config.poll_interval_ms == 50
    assert not hasattr(config, "pin_root")


def test_corrupt_json_resets_to_defaults(tmp_path):
    path = tmp_path / "app_settings.json"
    path.write_text("{not json", encoding="utf-8")

    config = ConfigManager(path=path).load()

    assert config == AppConfig()
    assert json.loads(path.read_text(encoding="utf-8"))["max_workers"] == 16


def test_invalid_values_are_repaired(tmp_path):
    path = tmp_path / "app_settings.json"
    path.write_text(
        json.dumps({"max_workers": 0, "poll_interval_ms": "fast", "byte_order": "middle", "backend": ""}),
        encoding="utf-8",
    )

    config = ConfigManager(path=path).load()

    assert config.max_workers == 16
    assert config.poll_interval_ms == 50
    assert config.byte_order == "big"
    assert config.backend == DEFAULT_BACKEND


def test_save_round_trips(tmp_path):
    manager = ConfigManager(path=tmp_path / "app_settings.json")
    config = manager.load()
    config.show_instructions = False
    config.max_workers = 2

    manager.save(config)

    assert manager.load() == config
