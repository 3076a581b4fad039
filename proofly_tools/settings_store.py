"""Locate and read the user settings file."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from .config import AppConfig


class SettingsStore:
    """Load adapter settings from a well-known path."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_settings_path()

    @property
    def path(self) -> Path:
        return self._path

    def load(self, *, environ: Mapping[str, str] | None = None) -> AppConfig:
        if not self._path.exists():
            return AppConfig.from_mapping({}, environ=environ)
        return AppConfig.load(self._path, environ=environ)


def default_settings_path() -> Path:
    if os.name == "nt":
        base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
    else:
        base = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base.expanduser() / "proofly_tools" / "settings.yaml"
