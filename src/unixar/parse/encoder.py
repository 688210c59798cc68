"""Encode entries as an ar archive byte stream.

Encoding is pull-based: :meth:`ArchiveEncoder.encode` is a generator of byte
chunks, and live content is only read from its source when the next chunk is
requested. A slow consumer therefore never causes a source to be drained
ahead of it.

An encoder is single use. Entries are written strictly in order, so an entry
must be fully consumed before the next one is started. After an error, every
further call raises :class:`UnixArStateError`.
"""
import logging
from typing import BinaryIO, Iterable, Iterator

from ..errors import (
    MissingSizeError,
    SizeMismatchError,
    UnixArStateError,
    assert_eq,
)
from .layout import HEADER_SIZE, MAGIC
from .models import BufferContent, StreamContent, WriteEntry
from .utils import Header, pack_header

LOG = logging.getLogger(__name__)


class ArchiveEncoder:
    def __init__(self) -> None:
        self._magic_written = False
        self._busy = False
        self._failed = False
        self._finished = False
        self._position = 0
        self._count = 0

    @property
    def position(self) -> int:
        """The number of bytes produced so far."""
        return self._position

    def _check_usable(self) -> None:
        if self._failed:
            raise UnixArStateError("Encoder failed, and cannot be used again")
        if self._finished:
            raise UnixArStateError("Encoder finished, and cannot be used again")
        if self._busy:
            raise UnixArStateError("Previous entry has not been fully encoded")

    def encode(self, entry: WriteEntry) -> Iterator[bytes]:
        """Yield the bytes for an entry, preceded by the magic for the first.

        The header is packed completely before anything is yielded, so an
        invalid header produces no output for that entry.

        :raises MissingSizeError: If streamed content has no size.
        :raises FieldTooLongError: If a header field does not fit its width.
        :raises SizeMismatchError: If streamed content has a negative size,
            or is longer or shorter than its size.
        """
        self._check_usable()
        self._busy = True
        completed = False
        try:
            yield from self._encode(entry)
            completed = True
        finally:
            self._busy = False
            # also covers a consumer abandoning the generator part way
            if not completed:
                self._failed = True

    def finish(self) -> bytes:
        """Declare the end of the entries, returning any remaining bytes.

        An archive without entries still consists of the magic.
        """
        self._check_usable()
        self._finished = True
        LOG.debug("Encoded %d entries", self._count)
        if self._magic_written:
            return b""
        self._magic_written = True
        self._position += len(MAGIC)
        return MAGIC

    def _emit(self, data: bytes) -> bytes:
        self._position += len(data)
        return data

    def _encode(self, entry: WriteEntry) -> Iterator[bytes]:
        content = entry.content
        if isinstance(content, BufferContent):
            size = content.size
        elif content.size is None:
            raise MissingSizeError(
                f"{entry.name!r}: size must be set for streamed content"
            )
        elif content.size < 0:
            raise SizeMismatchError(
                f"{entry.name!r}: size {content.size} must not be negative"
            )
        else:
            size = content.size

        header = pack_header(
            Header(
                name=entry.name,
                mtime=entry.mtime,
                owner_id=entry.owner_id,
                group_id=entry.group_id,
                mode=entry.mode,
                size=size,
            )
        )

        if not self._magic_written:
            self._magic_written = True
            yield self._emit(MAGIC)

        location = self._position
        LOG.debug("Writing entry %d at %d", self._count, location)
        yield self._emit(header)
        LOG.debug(
            "Entry '%s', content from %d to %d",
            entry.name,
            location + HEADER_SIZE,
            location + HEADER_SIZE + size,
        )

        if isinstance(content, BufferContent):
            if size:
                yield self._emit(bytes(content.data))
        else:
            yield from self._stream(entry.name, content, size)

        self._count += 1

    def _stream(self, name: str, content: StreamContent, size: int) -> Iterator[bytes]:
        written = 0
        for chunk in content.source:
            if not chunk:
                continue
            if written + len(chunk) > size:
                raise SizeMismatchError(
                    f"{name!r} content: more than {size} bytes (at {self._position})"
                )
            written += len(chunk)
            yield self._emit(bytes(chunk))
        assert_eq(
            f"{name!r} content size", size, written, self._position, SizeMismatchError
        )


def create_encoder() -> ArchiveEncoder:
    return ArchiveEncoder()


def encode_stream(entries: Iterable[WriteEntry]) -> Iterator[bytes]:
    """Lazily encode entries as byte chunks."""
    encoder = ArchiveEncoder()
    for entry in entries:
        yield from encoder.encode(entry)
    tail = encoder.finish()
    if tail:
        yield tail


def write_archive(f: BinaryIO, entries: Iterable[WriteEntry]) -> int:
    """Encode entries to a binary file object, returning the bytes written."""
    LOG.debug("Writing archive data...")
    offset = 0
    for chunk in encode_stream(entries):
        f.write(chunk)
        offset += len(chunk)
    LOG.debug("Wrote archive data, %d bytes", offset)
    return offset
