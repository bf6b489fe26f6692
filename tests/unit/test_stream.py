"""FileStream: mode checks, cursor handling and text/binary separation."""

import io
import pytest
from enctextfile import FileStream, TextFileOpenError


def test_write_and_read_basic(tmp_path):
    path = str(tmp_path / "s.bin")
    with FileStream.open(path, "wb") as f:
        f.write(b"hello")
    with FileStream.open(path, "rb") as f:
        assert f.read() == b"hello"


def test_read_partial(make_text_file):
    path = make_text_file(b"hello world")
    with FileStream.open(path, "rb") as f:
        assert f.read(5) == b"hello"
        assert f.read(6) == b" world"
        assert f.read(1) == b""


def test_seek_and_tell(make_text_file):
    path = make_text_file(b"hello world")
    with FileStream.open(path, "rb") as f:
        assert f.seek(6) == 6
        assert f.tell() == 6
        assert f.read() == b"world"
        assert f.seek(-5, 2) == 6


def test_invalid_whence(make_text_file):
    path = make_text_file(b"x")
    with FileStream.open(path, "rb") as f:
        with pytest.raises(ValueError):
            f.seek(0, 3)


def test_length(make_text_file):
    path = make_text_file(b"12345")
    with FileStream.open(path, "rb") as f:
        assert f.length() == 5


def test_length_of_writer_includes_pending_data(tmp_path):
    path = str(tmp_path / "w.bin")
    with FileStream.open(path, "wb") as f:
        f.write(b"abc")
        assert f.length() == 3


def test_flush_makes_pending_data_visible(tmp_path):
    path = tmp_path / "w.txt"
    with FileStream.open(str(path), "wt", encoding="latin-1") as f:
        f.write_text("abc")
        f.flush()
        assert path.read_bytes() == b"abc"


def test_flush_on_closed_stream(tmp_path):
    f = FileStream.open(str(tmp_path / "w.bin"), "wb")
    f.close()
    with pytest.raises(ValueError):
        f.flush()


def test_read_on_write_stream_raises(tmp_path):
    with FileStream.open(str(tmp_path / "w.bin"), "wb") as f:
        with pytest.raises(io.UnsupportedOperation):
            f.read()


def test_write_on_read_stream_raises(make_text_file):
    path = make_text_file(b"x")
    with FileStream.open(path, "rb") as f:
        with pytest.raises(io.UnsupportedOperation):
            f.write(b"y")


def test_text_mode_reads_lines(make_text_file):
    path = make_text_file(b"a\r\nb\rc\n")
    with FileStream.open(path, "rt", encoding="latin-1") as f:
        assert f.is_text
        assert f.read_text_line() == "a\n"
        assert f.read_text_line() == "b\n"
        assert f.read_text_line() == "c\n"
        assert f.read_text_line() == ""


def test_text_mode_rejects_byte_io(make_text_file):
    path = make_text_file(b"x")
    with FileStream.open(path, "rt", encoding="latin-1") as f:
        with pytest.raises(io.UnsupportedOperation):
            f.read()


def test_binary_mode_rejects_text_io(make_text_file):
    path = make_text_file(b"x")
    with FileStream.open(path, "rb") as f:
        with pytest.raises(io.UnsupportedOperation):
            f.read_text_line()


def test_text_mode_rejects_relative_seek(make_text_file):
    path = make_text_file(b"abc")
    with FileStream.open(path, "rt", encoding="latin-1") as f:
        with pytest.raises(io.UnsupportedOperation):
            f.seek(1, 1)
        assert f.seek(1) == 1
        assert f.read_text_line() == "bc"


def test_invalid_mode():
    with pytest.raises(ValueError):
        FileStream.open("whatever", "r+b")


def test_missing_file_raises_open_error(tmp_path):
    with pytest.raises(TextFileOpenError) as excinfo:
        FileStream.open(str(tmp_path / "missing.txt"), "rb")
    assert isinstance(excinfo.value, OSError)
    assert excinfo.value.path.endswith("missing.txt")


def test_closed_stream(make_text_file):
    path = make_text_file(b"x")
    f = FileStream.open(path, "rb")
    f.close()
    f.close()
    assert f.closed
    with pytest.raises(ValueError):
        f.read()


def test_unclosed_stream_warns(make_text_file):
    path = make_text_file(b"x")
    f = FileStream.open(path, "rb")
    with pytest.warns(ResourceWarning):
        f.__del__()
    assert f.closed
