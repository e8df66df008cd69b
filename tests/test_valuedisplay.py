from serialkit.valuedisplay import ValueDisplay


def test_single_line_creates_row():
    box = ValueDisplay()
    box.receive_data(b"vdisp speed 42 m/s\n")
    assert box.rows() == [("speed", "42", "m/s ")]


def test_line_split_over_chunks():
    box = ValueDisplay()
    box.receive_data(b"vdisp tem")
    assert box.rows() == []
    box.receive_data(b"p 21\n")
    assert box.rows() == [("temp", "21", "")]


def test_update_keeps_row_order():
    box = ValueDisplay()
    box.receive_data(b"vdisp a 1\nvdisp b 2\n")
    box.receive_data(b"VDISP a 3 x y\n")
    assert box.rows() == [("a", "3", "x y "), ("b", "2", "")]


def test_other_lines_ignored():
    box = ValueDisplay()
    box.receive_data(b"hello world\n\nvdisp\n   \n")
    assert box.rows() == []


def test_id_without_value_and_crlf():
    box = ValueDisplay()
    box.receive_data(b"vdisp flag\r\n")
    assert box.rows() == [("flag", "", "")]


def test_title_and_file_path():
    box = ValueDisplay()
    box.set_file_path("docs")
    assert box.title == "Value Display"
    assert box.file_path == "docs"