"""Random access to ar archive files.

Opening an archive reads only the fixed-width headers, to build an index of
entries and where their content starts. Content is read on demand with
positional reads, which do not share a file cursor. Reads may therefore be
issued from several threads at once. Closing the archive while reads are
outstanding is the caller's responsibility to avoid.
"""
from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import (
    BinaryIO,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
)

from pydantic import BaseModel, ConfigDict, Field

from .errors import BadMagicError, TruncatedArchiveError, assert_eq
from .parse.layout import HEADER_SIZE, MAGIC, MAGIC_SIZE
from .parse.models import WriteEntry
from .parse.utils import DEFAULT_CHUNK_SIZE, unpack_header

LOG = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class IndexedEntry(BaseModel):
    """An entry in an archive's index. The content is not loaded."""

    model_config = ConfigDict(frozen=True)

    name: str
    mtime: Optional[int]
    owner_id: Optional[int]
    group_id: Optional[int]
    mode: str
    size: int = Field(ge=0)
    # absolute position of the content in the file
    offset: int = Field(ge=0)


class ReadResult(NamedTuple):
    bytes_read: int
    buffer: Union[bytearray, memoryview]


def _read_index(fd: int, name: str, no_end_check: bool) -> List[IndexedEntry]:
    file_size = os.fstat(fd).st_size
    LOG.debug("Reading archive index of '%s' (%d bytes)...", name, file_size)

    magic = os.pread(fd, MAGIC_SIZE, 0)
    assert_eq("magic", MAGIC, magic, f"{name}:0", BadMagicError)
    position = MAGIC_SIZE

    entries: List[IndexedEntry] = []
    while True:
        data = os.pread(fd, HEADER_SIZE, position)
        if not data:
            break
        if len(data) < HEADER_SIZE:
            raise TruncatedArchiveError(
                f"header: {len(data)} of {HEADER_SIZE} bytes before end of file "
                f"(at {name}:{position})"
            )

        LOG.debug("Reading entry %d at %d", len(entries), position)
        header = unpack_header(data, 0, position, check_end=not no_end_check)
        position += HEADER_SIZE
        end = position + header.size
        if end > file_size:
            raise TruncatedArchiveError(
                f"content: {file_size - position} of {header.size} bytes "
                f"before end of file (at {name}:{position})"
            )

        LOG.debug("Entry '%s', content from %d to %d", header.name, position, end)
        entries.append(
            IndexedEntry(
                name=header.name,
                mtime=header.mtime,
                owner_id=header.owner_id,
                group_id=header.group_id,
                mode=header.mode,
                size=header.size,
                offset=position,
            )
        )
        position = end

    LOG.debug("Read archive index, %d entries", len(entries))
    return entries


class Archive:
    """An open archive file and its index.

    Use :meth:`open` rather than constructing this directly.
    """

    def __init__(self, f: BinaryIO, entries: Sequence[IndexedEntry]):
        self._file = f
        self._entries: Tuple[IndexedEntry, ...] = tuple(entries)

    @classmethod
    def open(cls, path: PathLike, no_end_check: bool = False) -> Archive:
        """Open an archive file, and index its entries.

        The file is closed again if the index cannot be read.

        :param no_end_check: Do not validate the header end markers.
        :raises BadMagicError: If the file does not start with the magic.
        :raises BadHeaderEndError: If a header end marker is wrong.
        :raises BadFieldError: If a header size field is malformed.
        :raises TruncatedArchiveError: If a header or content is cut short.
        """
        f = open(path, "rb", buffering=0)  # pylint: disable=consider-using-with
        try:
            entries = _read_index(f.fileno(), os.fspath(path), no_end_check)
        except BaseException:
            f.close()
            raise
        return cls(f, entries)

    @property
    def entries(self) -> Tuple[IndexedEntry, ...]:
        return self._entries

    @property
    def closed(self) -> bool:
        return self._file.closed

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IndexedEntry]:
        return iter(self._entries)

    def __enter__(self) -> Archive:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def get(self, name: str) -> Optional[IndexedEntry]:
        """Return the first entry with the name, since names may repeat."""
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    def read(  # pylint: disable=too-many-arguments
        self,
        entry: IndexedEntry,
        buffer: Optional[Union[bytearray, memoryview]] = None,
        offset: int = 0,
        length: Optional[int] = None,
        buffer_offset: int = 0,
    ) -> ReadResult:
        """Read an entry's content into a buffer.

        :param offset: Where to start reading, relative to the content.
        :param length: How many bytes to read. Defaults to the rest of the
            content, and is limited to it.
        :param buffer: Where to read into. Defaults to a new buffer of
            ``length`` bytes.
        :param buffer_offset: Where in the buffer to start writing.
        :raises ValueError: If an offset or the length is negative, or the
            buffer is too small. Nothing is read in this case.
        """
        if offset < 0 or buffer_offset < 0 or (length is not None and length < 0):
            raise ValueError(
                f"offset {offset}, length {length} and buffer offset "
                f"{buffer_offset} must not be negative"
            )
        remaining = max(entry.size - offset, 0)
        if length is None or length > remaining:
            length = remaining
        if buffer is None:
            buffer = bytearray(length)

        with memoryview(buffer) as view:
            if buffer_offset + length > view.nbytes:
                raise ValueError(
                    f"{length} bytes at {buffer_offset} do not fit a buffer "
                    f"of {view.nbytes} bytes"
                )
            position = entry.offset + offset
            with view.cast("B")[buffer_offset : buffer_offset + length] as target:
                count = os.preadv(self._file.fileno(), [target], position)
        return ReadResult(count, buffer)

    def read_bytes(self, entry: IndexedEntry) -> bytes:
        """Return an entry's whole content."""
        data = os.pread(self._file.fileno(), entry.size, entry.offset)
        assert_eq(
            f"{entry.name!r} content size",
            entry.size,
            len(data),
            entry.offset,
            TruncatedArchiveError,
        )
        return data

    def iter_content(
        self, entry: IndexedEntry, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> Iterator[bytes]:
        """Yield an entry's content in chunks, reading each on demand."""
        fd = self._file.fileno()
        position = entry.offset
        end = entry.offset + entry.size
        while position < end:
            chunk = os.pread(fd, min(chunk_size, end - position), position)
            if not chunk:
                raise TruncatedArchiveError(
                    f"{entry.name!r} content: {position - entry.offset} of "
                    f"{entry.size} bytes before end of file (at {position})"
                )
            position += len(chunk)
            yield chunk

    def to_write_entry(
        self, entry: IndexedEntry, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> WriteEntry:
        """Return a write entry that streams this entry's content."""
        return WriteEntry.from_source(
            entry.name,
            self.iter_content(entry, chunk_size),
            entry.size,
            mtime=entry.mtime,
            owner_id=entry.owner_id,
            group_id=entry.group_id,
            mode=entry.mode,
        )

    def close(self) -> None:
        """Release the file. Calling this more than once has no effect."""
        self._file.close()


def open_archive(path: PathLike, no_end_check: bool = False) -> Archive:
    return Archive.open(path, no_end_check=no_end_check)
