import logging
import re
from typing import BinaryIO, Iterator, NamedTuple, Optional, Union

from ..errors import BadFieldError, BadHeaderEndError, FieldTooLongError, assert_eq
from .layout import END, FIELDS, HEADER

DEFAULT_CHUNK_SIZE = 64 * 1024
# names and modes are not restricted to ASCII, but must survive a round trip
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"

LOG = logging.getLogger(__name__)

FieldValue = Union[str, int, None]
Chunk = Union[bytes, bytearray, memoryview]

# optionally signed, unlike the size field
NUMBER = re.compile(rb"[+-]?[0-9]+")


class Header(NamedTuple):
    name: str
    mtime: Optional[int]
    owner_id: Optional[int]
    group_id: Optional[int]
    mode: str
    size: int


def parse_text(raw: bytes) -> str:
    """Return a string from a space-padded buffer, with whitespace trimmed."""
    return raw.decode(TEXT_ENCODING, TEXT_ERRORS).strip()


def parse_number(name: str, raw: bytes, location: Union[int, str]) -> Optional[int]:
    """Return an integer from a space-padded decimal buffer.

    Blank or malformed values are tolerated and return ``None``.
    """
    value = raw.strip()
    if NUMBER.fullmatch(value):
        return int(value)
    if value:
        LOG.warning("Malformed %s field %r (at %s)", name, raw, location)
    return None


def parse_size(raw: bytes, location: Union[int, str]) -> int:
    """Return the content size from a space-padded decimal buffer.

    :raises BadFieldError: If the value is not a non-negative decimal integer.
    """
    value = raw.strip()
    if not value.isdigit():
        raise BadFieldError(f"size: {raw!r} is not a decimal integer (at {location})")
    return int(value)


def unpack_header(
    data: Union[bytes, bytearray],
    offset: int,
    location: int,
    check_end: bool = True,
) -> Header:
    (
        raw_name,
        raw_mtime,
        raw_owner_id,
        raw_group_id,
        raw_mode,
        raw_size,
        end,
    ) = HEADER.unpack_from(data, offset)

    if check_end:
        end_location = location + HEADER.size - len(END)
        assert_eq("header end", END, end, end_location, BadHeaderEndError)

    return Header(
        name=parse_text(raw_name),
        mtime=parse_number("mtime", raw_mtime, location),
        owner_id=parse_number("owner id", raw_owner_id, location),
        group_id=parse_number("group id", raw_group_id, location),
        mode=parse_text(raw_mode),
        size=parse_size(raw_size, location),
    )


def pack_field(name: str, value: FieldValue, width: int) -> bytes:
    """Return a field value as text, right-padded with spaces to the width.

    :raises FieldTooLongError: If the encoded value is longer than the width.
    """
    text = "" if value is None else str(value)
    raw = text.encode(TEXT_ENCODING, TEXT_ERRORS)
    if len(raw) > width:
        raise FieldTooLongError(name, raw, width)
    return raw.ljust(width, b" ")


def pack_header(header: Header) -> bytes:
    fields = [
        pack_field(name, value, width)
        for (name, width), value in zip(FIELDS, header)
    ]
    return HEADER.pack(*fields, END)


def iter_file(f: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield chunks read from a binary file object until it is exhausted."""
    while True:
        chunk = f.read(chunk_size)
        if not chunk:
            break
        yield chunk
