"""modcheck configuration."""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_cache_dir, user_data_dir

from modcheck import __version__

APP_NAME = "modcheck"

DEFAULT_WORKERS = 4
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_ARCHIVE_BYTES = 500 * 1024 * 1024
DEFAULT_MAX_EXTRACTED_BYTES = 2 * 1024 * 1024 * 1024


def get_data_dir() -> Path:
    path = Path(user_data_dir(APP_NAME))
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    path = Path(user_cache_dir(APP_NAME))
    path.mkdir(parents=True, exist_ok=True)
    return path


class ModCheckConfig:
    """Global modcheck configuration, persisted to settings.json."""

    # key -> type used to coerce values given on the command line
    SETTINGS = {
        "workers": int,
        "timeout": float,
        "max_archive_bytes": int,
        "max_extracted_bytes": int,
        "user_agent": str,
    }

    def __init__(self, data_dir: Path | None = None, cache_dir: Path | None = None):
        self.data_dir = data_dir or get_data_dir()
        self.cache_dir = cache_dir or get_cache_dir()
        self.workers = DEFAULT_WORKERS
        self.timeout = DEFAULT_TIMEOUT
        self.max_archive_bytes = DEFAULT_MAX_ARCHIVE_BYTES
        self.max_extracted_bytes = DEFAULT_MAX_EXTRACTED_BYTES
        self.user_agent = f"{APP_NAME}/{__version__}"
        for key, value in self._load_settings().items():
            if key in self.SETTINGS:
                setattr(self, key, self.SETTINGS[key](value))

    @property
    def settings_file(self) -> Path:
        return self.data_dir / "settings.json"

    @property
    def scratch_parent(self) -> Path:
        path = self.cache_dir / "scratch"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _load_settings(self) -> dict:
        if self.settings_file.exists():
            return json.loads(self.settings_file.read_text())
        return {}

    def _save_settings(self, settings: dict) -> None:
        self.settings_file.parent.mkdir(parents=True, exist_ok=True)
        self.settings_file.write_text(json.dumps(settings, indent=2))

    def as_dict(self) -> dict:
        return {key: getattr(self, key) for key in self.SETTINGS}

    def set_value(self, key: str, raw: str) -> object:
        """Coerce and set one setting. Does not save."""
        if key not in self.SETTINGS:
            raise KeyError(key)
        value = self.SETTINGS[key](raw)
        if key in ("workers", "max_archive_bytes", "max_extracted_bytes") and value < 1:
            raise ValueError(f"{key} must be at least 1")
        if key == "timeout" and value <= 0:
            raise ValueError("timeout must be positive")
        setattr(self, key, value)
        return value

    def save(self) -> None:
        self._save_settings(self.as_dict())


_config: ModCheckConfig | None = None


def get_config() -> ModCheckConfig:
    global _config
    if _config is None:
        _config = ModCheckConfig()
    return _config
