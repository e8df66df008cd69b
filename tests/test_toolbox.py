from serialkit.toolbox import ToolBox


def test_transmit_reaches_every_listener():
    box = ToolBox()
    first, second = [], []
    box.on_transmit(first.append)
    box.on_transmit(second.append)
    box.transmit(bytearray(b"ping"))
    assert first == [b"ping"]
    assert second == [b"ping"]


def test_transmit_without_listeners_returns_none():
    assert ToolBox().transmit(b"x") is None


def test_set_file_path():
    box = ToolBox()
    assert box.file_path == ""
    box.set_file_path("/data/images")
    assert box.file_path == "/data/images"


def test_default_title():
    assert ToolBox().title == "Tool Box"


def test_default_receive_data_transmits_nothing():
    box = ToolBox()
    sent = []
    box.on_transmit(sent.append)
    box.receive_data(b"abc")
    assert sent == []
    box.transmit(b"abc")
    assert sent == [b"abc"]