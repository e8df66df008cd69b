"""Settings pages laid out from JSON files, and the options dialog.

The layout index is a JSON object whose ``tabs`` array names page files
relative to the index. Every page holds a ``title`` and a ``view`` array
of blocks. A block is a ``block`` or ``group`` (with its own ``layout``
and ``view``) or a setting item such as ``check-box`` or ``combo-box``.
Inside a ``form`` layout a block may carry a ``label``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping

from .settingsitems import GROUP, SettingsItem, create_item
from .translate import Translate

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT_FILE = "./config/layout/settings/index.json"

UpdatedCallback = Callable[[], None]


@dataclass
class Caption:
    """A translatable text: the original and the text shown now."""

    source: str
    text: str


def _read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as handle:
        return json.load(handle)


class SettingsForm:
    """The pages, captions and setting items described by a layout."""

    def __init__(self) -> None:
        self.language_dir = Path("language")
        self.tabs: list[Caption] = []
        self.labels: list[Caption] = []
        self.groups: list[Caption] = []
        self.items: list[SettingsItem] = []
        self._path = ""
        self._translate = Translate()

    def layout(self, file_name: str | os.PathLike) -> None:
        """Build the pages listed by the index file ``file_name``.

        Raises OSError when the index cannot be read and ValueError when it
        is not a JSON object with a ``tabs`` array. Pages that are missing
        or invalid are skipped.
        """
        index_path = Path(file_name)
        self._translate = Translate()
        self._path = str(index_path.parent)
        document = _read_json(index_path)
        if not isinstance(document, dict):
            raise ValueError("settings layout index must be a JSON object")
        tabs = document.get("tabs")
        if not isinstance(tabs, list):
            raise ValueError("'tabs' must be array.")
        for entry in tabs:
            page_path = Path(self._path, entry if isinstance(entry, str) else "")
            try:
                page = _read_json(page_path)
            except OSError:
                logger.warning("This file %s is not found.", page_path)
                continue
            except ValueError as exc:
                logger.warning("JSON Parser error in %s: %s", page_path, exc)
                continue
            if not isinstance(page, dict):
                logger.warning("JSON Parser error in %s: not an object", page_path)
                continue
            self._layout_page(page)

    def _layout_page(self, page: Mapping[str, Any]) -> None:
        title = page.get("title")
        title = title if isinstance(title, str) else "Unknow"
        view = page.get("view")
        if isinstance(view, list):
            for block in view:
                if isinstance(block, Mapping):
                    self._add_block("vbox", block)
        else:
            logger.warning("JSON invalid array.")
        self.tabs.append(Caption(title, title))

    def _add_block(self, layout_kind: str, spec: Mapping[str, Any]) -> None:
        kind = spec.get("type")
        kind = kind if isinstance(kind, str) else ""
        if kind == "block":
            self._parse_view(spec)
        elif kind == "group":
            title = spec.get("title")
            title = title if isinstance(title, str) else ""
            self._parse_view(spec)
            self.groups.append(Caption(title, title))
        else:
            try:
                item = create_item(kind, spec, self._path)
            except ValueError:
                logger.warning("Invalid type: %r", kind)
                return
            item.on_mutex_changed(self._mutex_items)
            self.items.append(item)
        if layout_kind == "form":
            label = spec.get("label")
            if isinstance(label, str) and label:
                self.labels.append(Caption(label, label))

    def _parse_view(self, spec: Mapping[str, Any]) -> None:
        kind = spec.get("layout")
        kind = kind if isinstance(kind, str) else "vbox"
        view = spec.get("view")
        if isinstance(view, Mapping):
            self._add_block(kind, view)
        elif isinstance(view, list):
            for block in view:
                if isinstance(block, Mapping):
                    self._add_block(kind, block)

    def _mutex_items(self, sender: SettingsItem, enable: bool, ids: list) -> None:
        targets = set(ids)
        for item in self.items:
            if item is not sender and item.id in targets:
                item.set_enabled(enable, sender)

    def load_settings(self, config: Any) -> None:
        """Translate to the configured language and show the stored values."""
        self.retranslate(str(config.value(GROUP, "Language", "") or ""))
        for item in self.items:
            item.load_settings(config)

    def save_settings(self, config: Any) -> None:
        """Store every item's value, then follow a language change."""
        for item in self.items:
            item.save_settings(config)
        self.retranslate(str(config.value(GROUP, "Language", "") or ""))

    def retranslate(self, language: str | None = None) -> None:
        """Translate every caption; a language name loads its table first."""
        if language:
            self._translate.load(self.language_dir / language / "settings.txt")
        for caption in (*self.tabs, *self.labels, *self.groups):
            caption.text = self._translate.tr(caption.source)
        for item in self.items:
            item.retranslate(self._translate)


class OptionsDialog:
    """Edit the settings of ``config`` through the form of ``layout_file``.

    :meth:`apply` stores the values in ``config`` and tells every listener
    registered with :meth:`on_settings_updated`; writing the file is left
    to the owner of ``config``.
    """

    title = "Options"

    def __init__(
        self, config: Any, layout_file: str | os.PathLike = DEFAULT_LAYOUT_FILE
    ) -> None:
        self.config = config
        self.form = SettingsForm()
        self.form.layout(layout_file)
        self.form.load_settings(config)
        self._callbacks: list[UpdatedCallback] = []

    def apply(self) -> None:
        """Save the shown values and announce the change."""
        self.form.save_settings(self.config)
        for callback in list(self._callbacks):
            callback()

    def on_settings_updated(self, callback: UpdatedCallback) -> UpdatedCallback:
        """Call ``callback()`` after every :meth:`apply`."""
        self._callbacks.append(callback)
        return callback