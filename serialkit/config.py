"""INI-file settings store organised in groups."""

from __future__ import annotations

import configparser
import os
import stat
from pathlib import Path
from typing import Any

DEFAULT_CONFIG = "[Settings]\nLanguage=en\nTheme=default\n"


class Config:
    """Read and write ``[group] key=value`` settings in an INI file."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)
        self._parser = configparser.ConfigParser(
            interpolation=None, delimiters=("=",), strict=False
        )
        self._parser.optionxform = str  # keep key case
        if self.path.exists():
            self._parser.read(self.path, encoding="utf-8")

    def value(self, group: str, key: str, default: Any = None) -> Any:
        """Return the stored string, or ``default`` when it is absent."""
        return self._parser.get(group, key, fallback=default)

    def set_value(self, group: str, key: str, value: Any) -> None:
        """Store ``value`` under ``group``/``key``; booleans become true/false."""
        if not self._parser.has_section(group):
            self._parser.add_section(group)
        if isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = str(value)
        self._parser.set(group, key, text)

    def save(self) -> None:
        """Write all settings back to the file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as handle:
            self._parser.write(handle, space_around_delimiters=False)


def sync_default_config(
    ini_name: str | os.PathLike, default_text: str = DEFAULT_CONFIG
) -> Config:
    """Make sure the settings file exists and holds a language and theme.

    A missing file is created from ``default_text``, readable and writable
    by its owner only. In an existing file, an empty language becomes
    ``en`` and an empty theme becomes ``default``.
    """
    path = Path(ini_name)
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(default_text, encoding="utf-8")
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
        return Config(path)

    config = Config(path)
    changed = False
    for key, fallback in (("Language", "en"), ("Theme", "default")):
        if not config.value("Settings", key, ""):
            config.set_value("Settings", key, fallback)
            changed = True
    if changed:
        config.save()
    return config