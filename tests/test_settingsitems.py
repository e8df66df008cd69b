import pytest

from serialkit.config import Config
from serialkit.settingsitems import (
    CheckBoxItem,
    ComboBoxItem,
    FontFamilyItem,
    FontSelectItem,
    LineEditItem,
    SliderItem,
    SpinBoxItem,
    create_item,
)
from serialkit.translate import Translate


@pytest.fixture
def config(tmp_path):
    return Config(tmp_path / "config.ini")


def test_spec_fields_and_sorted_mutex_list():
    item = CheckBoxItem(
        {"key": "K", "id": "me", "mutex": {"active": True, "list": ["b", "", "a"]}},
        "some/dir",
    )
    assert item.key == "K"
    assert item.id == "me"
    assert item.path == "some/dir"
    assert item.mutex_list == ["a", "b"]
    assert item.mutex_active is True


def test_combo_box_fixed_items_round_trip(config):
    spec = {"key": "Language", "items": ["en", "zh_CN", 3]}
    item = ComboBoxItem(spec)
    assert item.items == ["en", "zh_CN"]
    assert item.current_index == 0
    config.set_value("Settings", "Language", "zh_CN")
    item.load_settings(config)
    assert item.current_item == "zh_CN"
    other = ComboBoxItem(spec)
    other.current_index = 0
    other.save_settings(config)
    assert config.value("Settings", "Language") == "en"


def test_combo_box_unknown_value_saves_nothing(config):
    item = ComboBoxItem({"key": "Language", "items": ["en"]})
    config.set_value("Settings", "Language", "fr")
    item.load_settings(config)
    assert item.current_index == -1
    item.save_settings(config)
    assert config.value("Settings", "Language") == "fr"


def test_combo_box_directory_items(tmp_path):
    (tmp_path / "beta").mkdir()
    (tmp_path / "alpha").mkdir()
    (tmp_path / "alpha" / "name.txt").write_text("Alpha Theme\nmore\n")
    (tmp_path / "file.txt").write_text("not a dir")
    item = ComboBoxItem({"key": "Theme", "items": f"{tmp_path}*name.txt"})
    assert item.items == ["alpha", "beta"]
    assert item.texts == ["Alpha Theme", "Unknow"]


def test_combo_box_directory_names_without_file(tmp_path):
    (tmp_path / "one").mkdir()
    item = ComboBoxItem({"key": "Theme", "items": str(tmp_path)})
    assert item.texts == ["one"]
    missing = ComboBoxItem({"key": "Theme", "items": str(tmp_path / "none")})
    assert missing.items == []


def test_check_box_round_trip_and_translation(config, tmp_path):
    item = CheckBoxItem({"key": "Wrap", "text": "Word wrap"})
    item.set_checked(True)
    item.save_settings(config)
    other = CheckBoxItem({"key": "Wrap"})
    other.load_settings(config)
    assert other.checked is True
    table = tmp_path / "tr.txt"
    table.write_text("Word wrap\tZeilenumbruch\n")
    item.retranslate(Translate(table))
    assert item.label == "Zeilenumbruch"


def test_check_box_false_strings(config):
    item = CheckBoxItem({"key": "Flag"})
    for text in ("false", "0", ""):
        config.set_value("Settings", "Flag", text)
        item.load_settings(config)
        assert item.checked is False


def test_mutex_notifies_with_enable_flag():
    item = CheckBoxItem({"key": "A", "mutex": {"active": True, "list": ["x", "y"]}})
    events = []
    item.on_mutex_changed(lambda src, enable, ids: events.append((src, enable, ids)))
    item.set_checked(True)
    item.set_checked(True)
    item.set_checked(False)
    assert events == [(item, False, ["x", "y"]), (item, True, ["x", "y"])]


def test_mutex_without_active_value_is_silent():
    item = CheckBoxItem({"key": "A", "mutex": {"list": ["x"]}})
    events = []
    item.on_mutex_changed(lambda *args: events.append(args))
    item.set_checked(True)
    assert events == []


def test_set_enabled_tracks_each_source():
    item = LineEditItem({"key": "T"})
    first, second = object(), object()
    item.set_enabled(False, first)
    item.set_enabled(False, second)
    item.set_enabled(True, first)
    assert item.enabled is False
    item.set_enabled(True, second)
    assert item.enabled is True
    item.set_enabled(False, None)
    assert item.enabled is True


def test_slider_range_and_clamp(config):
    item = SliderItem({"key": "WindowOpacity", "range": "30, 100"})
    assert (item.minimum, item.maximum) == (30, 100)
    config.set_value("Settings", "WindowOpacity", "10")
    item.load_settings(config)
    assert item.value == 30
    item.value = 150
    assert item.value == 100
    default = SliderItem({"key": "S"})
    assert (default.minimum, default.maximum) == (0, 100)


def test_slider_round_trip(config):
    item = SliderItem({"key": "S", "range": "0,50"})
    item.value = 42
    item.save_settings(config)
    other = SliderItem({"key": "S", "range": "0,50"})
    other.load_settings(config)
    assert other.value == 42


def test_spin_box_int_and_float(config):
    ints = SpinBoxItem({"key": "N", "minimum": 1, "maximum": 10})
    ints.value = 20
    assert ints.value == 10
    floats = SpinBoxItem({"key": "F", "mode": "float", "minimum": 0.5, "maximum": 2.5})
    floats.value = 1.25
    floats.save_settings(config)
    loaded = SpinBoxItem({"key": "F", "mode": "float", "minimum": 0.5, "maximum": 2.5})
    loaded.load_settings(config)
    assert loaded.value == 1.25
    loaded.value = 0.1
    assert loaded.value == 0.5


def test_font_items():
    family = FontFamilyItem({"key": "Font"})
    family.set_font("DejaVu Sans")
    assert family.text == "'DejaVu Sans'"
    family.set_font("Consolas")
    assert family.text == "Consolas"
    select = FontSelectItem({"key": "Font"})
    select.set_font("DejaVu Sans")
    assert select.text == "DejaVu Sans"


def test_line_edit_round_trip(config):
    item = LineEditItem({"key": "Path"})
    item.text = "/tmp/docs"
    item.save_settings(config)
    other = LineEditItem({"key": "Path"})
    other.load_settings(config)
    assert other.text == "/tmp/docs"


def test_create_item_kinds():
    assert isinstance(create_item("slider", {"key": "S"}), SliderItem)
    assert isinstance(create_item("font-family", {}), FontFamilyItem)
    with pytest.raises(ValueError):
        create_item("dial", {})