"""Decode ar archives from a stream of byte chunks.

Chunks may be split anywhere, even inside the magic or a header field. The
decoder buffers bytes until enough are available for the next step (the
magic, a header, or an entry's content), so a single chunk can complete zero,
one or many entries.

A decoder is single use. After a parse error, or once :meth:`finish` was
called, every further call raises :class:`UnixArStateError`. To decode
another archive, create a new decoder.
"""
import logging
from enum import Enum
from typing import BinaryIO, Iterable, Iterator, List, Optional, cast

from ..errors import (
    BadMagicError,
    TruncatedArchiveError,
    UnixArError,
    UnixArStateError,
    assert_eq,
)
from .layout import HEADER_SIZE, MAGIC, MAGIC_SIZE
from .models import ArchiveEntry
from .utils import DEFAULT_CHUNK_SIZE, Chunk, Header, iter_file, unpack_header

LOG = logging.getLogger(__name__)


class DecoderState(Enum):
    AwaitMagic = 0
    AwaitHeader = 1
    AwaitContent = 2
    Finished = 3
    Failed = 4


class ArchiveDecoder:
    def __init__(self) -> None:
        self._state = DecoderState.AwaitMagic
        self._buffer = bytearray()
        # read position in the buffer, and the absolute position of the buffer
        self._offset = 0
        self._position = 0
        self._need = MAGIC_SIZE
        self._header: Optional[Header] = None
        self._count = 0

    @property
    def state(self) -> DecoderState:
        return self._state

    @property
    def position(self) -> int:
        """The absolute offset of the next byte to be parsed."""
        return self._position + self._offset

    @property
    def buffered(self) -> int:
        """The number of bytes received, but not yet parsed."""
        return len(self._buffer) - self._offset

    def _check_usable(self) -> None:
        if self._state == DecoderState.Failed:
            raise UnixArStateError("Decoder failed, and cannot be used again")
        if self._state == DecoderState.Finished:
            raise UnixArStateError("Decoder finished, and cannot be used again")

    def write(self, chunk: Chunk) -> None:
        """Buffer a chunk of data, without parsing it."""
        self._check_usable()
        if self._offset:
            del self._buffer[: self._offset]
            self._position += self._offset
            self._offset = 0
        self._buffer += chunk

    def drain(self) -> Iterator[ArchiveEntry]:
        """Parse the buffered data, yielding each entry as it is completed."""
        self._check_usable()
        while self.buffered >= self._need:
            try:
                entry = self._step()
            except UnixArError:
                self._fail()
                raise
            if entry is not None:
                yield entry

    def feed(self, chunk: Chunk) -> List[ArchiveEntry]:
        """Buffer and parse a chunk of data, returning any completed entries."""
        self.write(chunk)
        return list(self.drain())

    def finish(self) -> List[ArchiveEntry]:
        """Declare the end of the data, returning any remaining entries.

        :raises TruncatedArchiveError: If the data ended in the middle of the
            magic, a header, or content.
        """
        entries = list(self.drain())
        remaining = self.buffered
        if self._state == DecoderState.AwaitMagic and remaining:
            what = "magic"
        elif self._state == DecoderState.AwaitHeader and remaining:
            what = "header"
        elif self._state == DecoderState.AwaitContent:
            what = "content"
        else:
            LOG.debug("Decoded %d entries, %d bytes", self._count, self.position)
            self._state = DecoderState.Finished
            self._release()
            return entries

        location = self.position
        self._fail()
        raise TruncatedArchiveError(
            f"{what}: {remaining} of {self._need} bytes before end of data "
            f"(at {location})"
        )

    def _fail(self) -> None:
        self._state = DecoderState.Failed
        self._release()

    def _release(self) -> None:
        self._position += len(self._buffer)
        self._buffer = bytearray()
        self._offset = 0
        self._header = None

    def _take(self, size: int) -> bytes:
        start = self._offset
        self._offset += size
        return bytes(self._buffer[start : self._offset])

    def _step(self) -> Optional[ArchiveEntry]:
        location = self.position

        if self._state == DecoderState.AwaitMagic:
            magic = self._take(MAGIC_SIZE)
            assert_eq("magic", MAGIC, magic, location, BadMagicError)
            self._state = DecoderState.AwaitHeader
            self._need = HEADER_SIZE
            return None

        if self._state == DecoderState.AwaitHeader:
            LOG.debug("Reading entry %d at %d", self._count, location)
            header = unpack_header(self._buffer, self._offset, location)
            self._offset += HEADER_SIZE
            LOG.debug(
                "Entry '%s', content from %d to %d",
                header.name,
                location + HEADER_SIZE,
                location + HEADER_SIZE + header.size,
            )
            self._header = header
            self._state = DecoderState.AwaitContent
            self._need = header.size
            return None

        # AwaitContent
        header = cast(Header, self._header)
        entry = ArchiveEntry.from_header(header, self._take(self._need))
        self._header = None
        self._state = DecoderState.AwaitHeader
        self._need = HEADER_SIZE
        self._count += 1
        return entry


def create_decoder() -> ArchiveDecoder:
    return ArchiveDecoder()


def decode_stream(chunks: Iterable[Chunk]) -> Iterator[ArchiveEntry]:
    """Lazily decode entries from an iterable of byte chunks."""
    decoder = ArchiveDecoder()
    for chunk in chunks:
        decoder.write(chunk)
        yield from decoder.drain()
    yield from decoder.finish()


def decode_file(
    f: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Iterator[ArchiveEntry]:
    """Lazily decode entries from a binary file object."""
    return decode_stream(iter_file(f, chunk_size))
