"""Lightweight persistence for user-configurable settings."""

from __future__ import annotations

from dataclasses import asdict, dataclass
import json
from pathlib import Path
from typing import Any

from controllers.pipeline import DEFAULT_MAX_WORKERS
from services.codec_backend import DEFAULT_BACKEND

CONFIG_PATH = Path(__file__).resolve().parent / "config" / "app_settings.json"
BYTE_ORDERS = ("big", "little")


@dataclass
class AppConfig:
    max_workers: int = DEFAULT_MAX_WORKERS
    poll_interval_ms: int = 50
    byte_order: str = "big"
    text_encoding: str = "shift_jis"
    backend: str = DEFAULT_BACKEND
    show_instructions: bool = True


class ConfigManager:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or CONFIG_PATH
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> AppConfig:
        if not self.path.exists():
            return self._save_default()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return self._save_default()
        if not isinstance(data, dict):
            return self._save_default()

        merged: dict[str, Any] = asdict(AppConfig())
        merged.update({k: v for k, v in data.items() if k in merged})
        config = AppConfig(**merged)
        defaults = AppConfig()
        if not isinstance(config.max_workers, int) or config.max_workers < 1:
            config.max_workers = defaults.max_workers
        if not isinstance(config.poll_interval_ms, int) or config.poll_interval_ms < 1:
            config.poll_interval_ms = defaults.poll_interval_ms
        if config.byte_order not in BYTE_ORDERS:
            config.byte_order = defaults.byte_order
        if not config.text_encoding:
            config.text_encoding = defaults.text_encoding
        if not config.backend:
            config.backend = defaults.backend
        return config

    def save(self, config: AppConfig) -> None:
        self.path.write_text(json.dumps(asdict(config), indent=2), encoding="utf-8")

    def _save_default(self) -> AppConfig:
        config = AppConfig()
        self.save(config)
        return config
