import pytest

from unixar import BadFieldError, BadHeaderEndError
from unixar.parse import layout
from unixar.parse.utils import (
    Header,
    pack_header,
    parse_number,
    parse_size,
    unpack_header,
)


def test_widths():
    assert layout.MAGIC == b"!<arch>\n"
    assert layout.END == b"`\n"
    widths = [width for _, width in layout.FIELDS]
    assert widths == [16, 12, 6, 6, 8, 10]
    assert layout.HEADER_SIZE == sum(widths) + layout.END_SIZE == 60


def test_pack_header_pads_with_spaces():
    packed = pack_header(Header("a", 1, 2, 3, "755", 4))
    assert len(packed) == layout.HEADER_SIZE
    assert packed == (
        b"a".ljust(16) + b"1".ljust(12) + b"2".ljust(6) + b"3".ljust(6)
        + b"755".ljust(8) + b"4".ljust(10) + b"`\n"
    )


def test_blank_numbers_are_none():
    packed = pack_header(Header("/", None, None, None, "", 0))
    header = unpack_header(packed, 0, 0)
    assert header == Header("/", None, None, None, "", 0)


def test_malformed_number_is_tolerated(caplog):
    assert parse_number("mtime", b"12x         ", 8) is None
    assert "Malformed mtime" in caplog.text
    assert parse_number("mtime", b"  42  ", 8) == 42


def test_malformed_size_is_fatal():
    with pytest.raises(BadFieldError):
        parse_size(b"-1        ", 8)
    with pytest.raises(BadFieldError):
        parse_size(b"          ", 8)


def test_unpack_checks_end():
    packed = bytearray(pack_header(Header("a", 0, 0, 0, "644", 0)))
    packed[-2:] = b"XX"
    with pytest.raises(BadHeaderEndError, match="at 66"):
        unpack_header(packed, 0, 8)
    assert unpack_header(packed, 0, 8, check_end=False).name == "a"


def test_non_ascii_name_survives():
    packed = pack_header(Header("café", 0, 0, 0, "644", 0))
    assert unpack_header(packed, 0, 0).name == "café"


def test_signed_numbers():
    assert parse_number("mtime", b"-1          ", 8) == -1
    assert parse_number("owner id", b"+7    ", 8) == 7
    assert parse_number("owner id", b"--7   ", 8) is None
    with pytest.raises(BadFieldError):
        parse_size(b"+5        ", 8)
