"""Setting items described by JSON objects and bound to a settings key.

Every item reads and writes one key of the ``Settings`` group. An item
may name other items (by id) that it disables while its value differs
from an "active" value; listeners registered with
:meth:`SettingsItem.on_mutex_changed` carry that out.
"""

from __future__ import annotations

import abc
import os
import re
from pathlib import Path
from typing import Any, Callable, Mapping

GROUP = "Settings"

MutexCallback = Callable[["SettingsItem", bool, list], None]

_RANGE_SPLIT = re.compile(r",\s*")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() not in ("", "0", "false")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if value is None:
        return 0
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return 0.0
    try:
        return float(str(value).strip())
    except ValueError:
        return 0.0


def _json_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _json_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _json_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


class SettingsItem(abc.ABC):
    """One editable setting built from a JSON ``spec``.

    ``spec`` supplies ``key`` (the settings key), ``id`` (used by mutex
    lists) and optionally ``mutex``: ``{"active": value, "list": [ids]}``.
    ``path`` is the directory of the layout file the spec came from.
    """

    def __init__(self, spec: Mapping[str, Any], path: str | os.PathLike = "") -> None:
        self.key = _json_str(spec.get("key"))
        self.id = _json_str(spec.get("id"))
        self.path = str(path)
        self.mutex_active: Any = None
        self.mutex_list: list[str] = []
        mutex = spec.get("mutex")
        if isinstance(mutex, Mapping):
            self.mutex_active = mutex.get("active")
            ids = mutex.get("list")
            if isinstance(ids, list):
                self.mutex_list = sorted(s for s in ids if isinstance(s, str) and s)
        self._disabled_by: list[object] = []
        self._mutex_callbacks: list[MutexCallback] = []

    @abc.abstractmethod
    def load_settings(self, config: Any) -> None:
        """Show the value stored in ``config``."""

    @abc.abstractmethod
    def save_settings(self, config: Any) -> None:
        """Store the shown value in ``config``."""

    def retranslate(self, translate: Any) -> None:
        """Translate the item's own texts; most items have none."""

    @property
    def enabled(self) -> bool:
        """True while no other item disables this one."""
        return not self._disabled_by

    def set_enabled(self, enabled: bool, source: object) -> None:
        """Record that ``source`` enables or disables this item.

        The item is enabled only when no source disables it. A ``None``
        source is ignored.
        """
        if source is None:
            return
        present = any(s is source for s in self._disabled_by)
        if enabled:
            self._disabled_by = [s for s in self._disabled_by if s is not source]
        elif not present:
            self._disabled_by.append(source)

    def on_mutex_changed(self, callback: MutexCallback) -> MutexCallback:
        """Call ``callback(item, enable, ids)`` when the mutex state changes.

        ``enable`` is False while the item's value equals the active value.
        """
        self._mutex_callbacks.append(callback)
        return callback

    def _set_mutex_status(self, status: Any) -> None:
        if self.mutex_active is None or not self.mutex_list:
            return
        enable = status != self.mutex_active
        for callback in list(self._mutex_callbacks):
            callback(self, enable, list(self.mutex_list))


class ComboBoxItem(SettingsItem):
    """Choice among fixed strings or among the sub-directories of a folder.

    ``items`` is either a list of strings or ``"folder*file"``: every
    sub-directory of ``folder`` becomes a choice, shown by the first line
    of its ``file`` (or by its own name when no file is given).
    """

    def __init__(self, spec: Mapping[str, Any], path: str | os.PathLike = "") -> None:
        super().__init__(spec, path)
        self.items: list[str] = []
        self.texts: list[str] = []
        value = spec.get("items")
        if isinstance(value, list):
            for entry in value:
                if isinstance(entry, str):
                    self.texts.append(entry)
                    self.items.append(entry)
        elif isinstance(value, str):
            self._parse_items(value)
        self.current_index = 0 if self.items else -1

    def _parse_items(self, text: str) -> None:
        parts = text.split("*")
        folder = parts[0]
        mode = parts[1] if len(parts) == 2 else ""
        try:
            entries = sorted(
                entry.name
                for entry in os.scandir(folder or ".")
                if entry.is_dir() and not entry.name.startswith(".")
            )
        except OSError:
            return
        for name in entries:
            self.texts.append(self._item_text(folder, name, mode))
            self.items.append(name)

    @staticmethod
    def _item_text(folder: str, dir_name: str, file_name: str) -> str:
        if not file_name:
            return dir_name
        try:
            with open(Path(folder, dir_name, file_name), encoding="utf-8",
                      errors="replace") as handle:
                return handle.readline().strip()
        except OSError:
            return "Unknow"

    @property
    def current_item(self) -> str | None:
        """The selected value, or None when nothing is selected."""
        if 0 <= self.current_index < len(self.items):
            return self.items[self.current_index]
        return None

    def load_settings(self, config: Any) -> None:
        value = str(config.value(GROUP, self.key, "") or "")
        self.current_index = self.items.index(value) if value in self.items else -1

    def save_settings(self, config: Any) -> None:
        item = self.current_item
        if item is not None:
            config.set_value(GROUP, self.key, item)


class CheckBoxItem(SettingsItem):
    """An on/off setting with a translatable label."""

    def __init__(self, spec: Mapping[str, Any], path: str | os.PathLike = "") -> None:
        super().__init__(spec, path)
        self.text = _json_str(spec.get("text"))
        self.label = self.text
        self.checked = False

    def retranslate(self, translate: Any) -> None:
        self.label = translate.tr(self.text)

    def set_checked(self, checked: bool) -> None:
        """Change the state; mutex listeners hear of real changes."""
        checked = bool(checked)
        if checked != self.checked:
            self.checked = checked
            self._set_mutex_status(checked)

    def load_settings(self, config: Any) -> None:
        self.checked = _to_bool(config.value(GROUP, self.key, ""))
        self._set_mutex_status(self.checked)

    def save_settings(self, config: Any) -> None:
        config.set_value(GROUP, self.key, self.checked)


class _RangedItem(SettingsItem):
    minimum: float
    maximum: float

    def _clamp(self, value: float) -> float:
        return max(self.minimum, min(self.maximum, value))


class SliderItem(_RangedItem):
    """An integer setting within ``range`` (``"low, high"``, default 0..100)."""

    def __init__(self, spec: Mapping[str, Any], path: str | os.PathLike = "") -> None:
        super().__init__(spec, path)
        bounds = _RANGE_SPLIT.split(_json_str(spec.get("range")))
        if len(bounds) == 2:
            self.minimum, self.maximum = _to_int(bounds[0]), _to_int(bounds[1])
            self.maximum = max(self.minimum, self.maximum)
        else:
            self.minimum, self.maximum = 0, 100
        self._value = self.minimum

    @property
    def value(self) -> int:
        """Current value, always within the range."""
        return self._value

    @value.setter
    def value(self, value: int) -> None:
        self._value = int(self._clamp(int(value)))

    def load_settings(self, config: Any) -> None:
        self.value = _to_int(config.value(GROUP, self.key, 0))

    def save_settings(self, config: Any) -> None:
        config.set_value(GROUP, self.key, self.value)


class SpinBoxItem(_RangedItem):
    """A number between ``minimum`` and ``maximum``; ``mode: float`` for decimals."""

    def __init__(self, spec: Mapping[str, Any], path: str | os.PathLike = "") -> None:
        super().__init__(spec, path)
        self.is_float = _json_str(spec.get("mode")) == "float"
        convert = _json_float if self.is_float else _json_int
        self.minimum = convert(spec.get("minimum"))
        self.maximum = convert(spec.get("maximum"))
        self.minimum = min(self.minimum, self.maximum)
        self.fixed_size = _json_str(spec.get("size-policy")) == "fixed"
        self._value: int | float = self.minimum

    @property
    def value(self) -> int | float:
        """Current value, within the limits; floats keep two decimals."""
        return self._value

    @value.setter
    def value(self, value: int | float) -> None:
        if self.is_float:
            self._value = round(float(self._clamp(float(value))), 2)
        else:
            self._value = int(self._clamp(int(value)))

    def load_settings(self, config: Any) -> None:
        raw = config.value(GROUP, self.key, 0)
        self.value = _to_float(raw) if self.is_float else _to_int(raw)

    def save_settings(self, config: Any) -> None:
        config.set_value(GROUP, self.key, self.value)


class LineEditItem(SettingsItem):
    """A free text setting."""

    def __init__(self, spec: Mapping[str, Any], path: str | os.PathLike = "") -> None:
        super().__init__(spec, path)
        self.text = ""

    def load_settings(self, config: Any) -> None:
        self.text = str(config.value(GROUP, self.key, "") or "")

    def save_settings(self, config: Any) -> None:
        config.set_value(GROUP, self.key, self.text)


class FontSelectItem(LineEditItem):
    """A font family name chosen by the user."""

    def set_font(self, family: str) -> None:
        """Show ``family`` as the chosen font."""
        self.text = family


class FontFamilyItem(LineEditItem):
    """A font family usable in a style sheet; names with spaces are quoted."""

    def set_font(self, family: str) -> None:
        """Show ``family``, quoted when it holds a space."""
        self.text = f"'{family}'" if " " in family else family


_KINDS: dict[str, type[SettingsItem]] = {
    "combo-box": ComboBoxItem,
    "check-box": CheckBoxItem,
    "slider": SliderItem,
    "font-select": FontSelectItem,
    "font-family": FontFamilyItem,
    "spin-box": SpinBoxItem,
    "line-edit": LineEditItem,
}


def create_item(kind: str, spec: Mapping[str, Any], path: str | os.PathLike = "") -> SettingsItem:
    """Create the item for a layout ``type``; raise ValueError if unknown."""
    try:
        cls = _KINDS[kind]
    except KeyError:
        raise ValueError(f"Invalid type: {kind!r}") from None
    return cls(spec, path)