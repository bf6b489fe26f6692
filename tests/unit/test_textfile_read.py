"""TextFile.open / read_line / read_line_bytes per encoding."""

import pytest
from enctextfile import Encoding, TextFile


def read_all(tf):
    lines = []
    while True:
        text, ok = tf.read_line()
        if not ok:
            break
        lines.append(text)
    return lines


# ---------------------------------------------------------------------------
# open
# ---------------------------------------------------------------------------

def test_open_missing_file_fails(tmp_path):
    tf = TextFile()
    assert tf.open(tmp_path / "nope.txt") is False
    assert tf.closed
    assert tf.path is None


def test_open_utf8_bom(make_text_file):
    path = make_text_file(b"\xef\xbb\xbfhi\n")
    with TextFile() as tf:
        assert tf.open(path)
        assert tf.encoding is Encoding.UTF8
        assert tf.bom_offset == 3
        assert tf.is_unicode
        assert tf.path == path
        assert tf.read_line() == ("hi", True)
        assert tf.read_line() == ("", False)


def test_open_utf16le_without_terminator(make_text_file):
    path = make_text_file(b"\xff\xfeh\x00i\x00")
    with TextFile() as tf:
        assert tf.open(path)
        assert tf.encoding is Encoding.UTF16LE
        assert tf.bom_offset == 2
        assert tf.read_line() == ("hi", True)
        assert tf.read_line() == ("", False)


def test_open_utf16be(make_text_file):
    path = make_text_file(b"\xfe\xff" + "a\r\nb".encode("utf-16-be"))
    with TextFile() as tf:
        assert tf.open(path)
        assert tf.encoding is Encoding.UTF16BE
        assert read_all(tf) == ["a", "b"]


def test_no_bom_keeps_caller_encoding(make_text_file):
    path = make_text_file(b"AB")
    with TextFile(Encoding.IDENTITY_8BIT) as tf:
        assert tf.open(path)
        assert tf.encoding is Encoding.IDENTITY_8BIT
        assert tf.bom_offset == 0
        assert tf.read_line() == ("AB", True)


def test_no_bom_system_text_reads_through_text_layer(make_text_file, tf):
    path = make_text_file(b"caf\xe9\r\nnext")
    assert tf.open(path)
    assert tf.encoding is Encoding.SYSTEM_TEXT
    assert not tf.is_unicode
    assert read_all(tf) == ["café", "next"]


def test_read_on_closed_file():
    tf = TextFile()
    assert tf.read_line() == ("", False)
    assert tf.read_line_bytes() == (b"", False)


# ---------------------------------------------------------------------------
# line terminators
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("encoding", [Encoding.IDENTITY_8BIT, Encoding.UTF8])
@pytest.mark.parametrize("data", [b"a\nb", b"a\r\nb"])
def test_lf_and_crlf_are_equivalent(make_text_file, encoding, data):
    path = make_text_file(data)
    with TextFile(encoding) as tf:
        assert tf.open(path)
        assert read_all(tf) == ["a", "b"]


@pytest.mark.parametrize("encoding", [Encoding.IDENTITY_8BIT, Encoding.UTF8])
def test_bare_cr_is_dropped(make_text_file, encoding):
    path = make_text_file(b"a\rb")
    with TextFile(encoding) as tf:
        assert tf.open(path)
        assert read_all(tf) == ["ab"]


@pytest.mark.parametrize(
    "encoding, codec",
    [(Encoding.UTF16LE, "utf-16-le"), (Encoding.UTF16BE, "utf-16-be")],
)
def test_utf16_terminators(make_text_file, encoding, codec):
    path = make_text_file(encoding.bom + "a\r\nb\nc\rd".encode(codec))
    with TextFile() as tf:
        assert tf.open(path)
        assert read_all(tf) == ["a", "b", "cd"]


def test_empty_lines_are_kept(make_text_file):
    path = make_text_file(b"\xef\xbb\xbf\n\r\nx\n")
    with TextFile() as tf:
        assert tf.open(path)
        assert read_all(tf) == ["", "", "x"]


def test_empty_file(make_text_file):
    path = make_text_file(b"")
    with TextFile(Encoding.UTF8) as tf:
        assert tf.open(path)
        assert tf.read_line() == ("", False)


def test_utf16_trailing_odd_byte_is_ignored(make_text_file):
    path = make_text_file(b"\xff\xfeh\x00i\x00\n")
    with TextFile() as tf:
        assert tf.open(path)
        assert tf.read_line() == ("hi", True)
        assert tf.read_line() == ("", False)


# ---------------------------------------------------------------------------
# system text
# ---------------------------------------------------------------------------

def test_system_text_keeps_embedded_nul(make_text_file, tf):
    path = make_text_file(b"ab\x00cd\nef")
    assert tf.open(path)
    assert tf.read_line() == ("ab\x00cd", True)
    assert tf.read_line() == ("ef", True)
    assert tf.read_line() == ("", False)


def test_system_text_narrow_replaces_wide_characters(make_text_file):
    path = make_text_file("x€\n".encode("utf-8"))
    with TextFile(platform_encoding="utf-8") as tf:
        assert tf.open(path)
        assert tf.read_line_bytes() == (b"x?", True)


# ---------------------------------------------------------------------------
# narrow vs wide
# ---------------------------------------------------------------------------

def test_utf8_wide_and_narrow(make_text_file):
    path = make_text_file(b"\xef\xbb\xbf" + "é€\U0001F600\n".encode("utf-8"))
    with TextFile() as tf:
        assert tf.open(path)
        assert tf.read_line() == ("é€\U0001F600", True)


def test_utf8_narrow_replaces_multibyte(make_text_file):
    path = make_text_file(b"\xef\xbb\xbf" + "aé€\nb".encode("utf-8"))
    with TextFile() as tf:
        assert tf.open(path)
        assert tf.read_line_bytes() == (b"a??", True)
        assert tf.read_line_bytes() == (b"b", True)


def test_utf16_narrow_replaces_high_units(make_text_file):
    path = make_text_file(b"\xff\xfe" + "aé€\n".encode("utf-16-le"))
    with TextFile() as tf:
        assert tf.open(path)
        assert tf.read_line_bytes() == (b"a\xe9?", True)


def test_identity_narrow_returns_raw_bytes(make_text_file):
    path = make_text_file(b"\x81\xfe\r\n")
    with TextFile(Encoding.IDENTITY_8BIT) as tf:
        assert tf.open(path)
        assert tf.read_line_bytes() == (b"\x81\xfe", True)


def test_utf16_surrogate_pair_across_window_boundary(make_text_file):
    # 6-byte window: the high and low surrogate land in different fills
    body = "ab\U0001F600c\n".encode("utf-16-le")
    path = make_text_file(b"\xff\xfe" + body)
    with TextFile(buffer_size=6) as tf:
        assert tf.open(path)
        assert tf.read_line() == ("ab\U0001F600c", True)


def test_utf8_sequence_split_across_refill(make_text_file):
    body = ("x" * 5 + "€" + "y\n" + "second\n").encode("utf-8")
    path = make_text_file(b"\xef\xbb\xbf" + body)
    with TextFile(buffer_size=7) as tf:
        assert tf.open(path)
        assert tf.read_line() == ("xxxxx€y", True)
        assert tf.read_line() == ("second", True)
        assert tf.encoding is Encoding.UTF8


def test_long_line_spans_many_fills(make_text_file):
    line = "0123456789" * 50
    path = make_text_file(b"\xef\xbb\xbf" + (line + "\n" + line).encode("ascii"))
    with TextFile(buffer_size=16) as tf:
        assert tf.open(path)
        assert read_all(tf) == [line, line]


def test_iteration(make_text_file):
    path = make_text_file(b"\xef\xbb\xbfalpha\nbeta\ngamma")
    with TextFile() as tf:
        assert tf.open(path)
        assert list(tf) == ["alpha", "beta", "gamma"]


def test_set_encoding_switches_read_path(make_text_file, tf):
    path = make_text_file(b"l1\nl\xe9\n")
    assert tf.open(path)
    assert tf.read_line() == ("l1", True)
    tf.encoding = Encoding.IDENTITY_8BIT
    assert tf.read_line() == ("l\xe9", True)
    assert tf.read_line() == ("", False)


def test_invalid_constructor_arguments():
    with pytest.raises(ValueError):
        TextFile("utf8")
    with pytest.raises(ValueError):
        TextFile(platform_encoding="no-such-codec")
    with pytest.raises(ValueError):
        TextFile(platform_errors="no-such-handler")
    with pytest.raises(ValueError):
        TextFile(buffer_size=2)
    with pytest.raises(ValueError):
        TextFile().encoding = "utf8"
