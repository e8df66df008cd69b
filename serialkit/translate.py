"""Plain-text translation tables: one ``source<TAB>translation`` per line."""

from __future__ import annotations

import os


class Translate:
    """Map strings to their translations, falling back to the original."""

    def __init__(self, file_name: str | os.PathLike | None = None) -> None:
        self._map: dict[str, str] = {}
        if file_name:
            self.load(file_name)

    def load(self, file_name: str | os.PathLike) -> None:
        """Replace the table with the entries of ``file_name``.

        A missing or unreadable file leaves the table empty.
        """
        self._map.clear()
        try:
            with open(file_name, encoding="utf-8", errors="replace") as handle:
                for line in handle:
                    parts = line.split("\t")
                    if len(parts) == 2:
                        self._map[parts[0].strip()] = parts[1].strip()
        except OSError:
            pass

    def translate(self, text: str) -> str:
        """Return the translation of ``text``, or ``text`` itself."""
        return self._map.get(text, text)

    def tr(self, text: str) -> str:
        """Shorthand for :meth:`translate`."""
        return self.translate(text)