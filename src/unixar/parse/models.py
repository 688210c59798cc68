from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .utils import Chunk, Header


@dataclass
class ArchiveEntry:
    """An entry decoded from an archive stream, including its content."""

    name: str
    mtime: Optional[int]
    owner_id: Optional[int]
    group_id: Optional[int]
    mode: str
    size: int
    content: bytes

    @classmethod
    def from_header(cls, header: Header, content: bytes) -> ArchiveEntry:
        return cls(
            name=header.name,
            mtime=header.mtime,
            owner_id=header.owner_id,
            group_id=header.group_id,
            mode=header.mode,
            size=header.size,
            content=content,
        )

    def to_write_entry(self) -> WriteEntry:
        return WriteEntry(
            name=self.name,
            content=BufferContent(self.content),
            mtime=self.mtime,
            owner_id=self.owner_id,
            group_id=self.group_id,
            mode=self.mode,
        )


@dataclass(frozen=True)
class BufferContent:
    """In-memory content. The size is always the length of the buffer."""

    data: Chunk

    @property
    def size(self) -> int:
        return memoryview(self.data).nbytes


@dataclass(frozen=True)
class StreamContent:
    """Live content, pulled chunk by chunk from ``source`` while encoding.

    The size must be known up front, since the header is written before any
    content.
    """

    source: Iterable[bytes]
    size: Optional[int] = None


Content = Union[BufferContent, StreamContent]


@dataclass
class WriteEntry:
    """An entry to be encoded."""

    name: str
    content: Content
    mtime: Optional[int] = 0
    owner_id: Optional[int] = 0
    group_id: Optional[int] = 0
    mode: str = "644"

    @classmethod
    def from_bytes(  # pylint: disable=too-many-arguments
        cls,
        name: str,
        data: Chunk,
        mtime: Optional[int] = 0,
        owner_id: Optional[int] = 0,
        group_id: Optional[int] = 0,
        mode: str = "644",
    ) -> WriteEntry:
        return cls(name, BufferContent(data), mtime, owner_id, group_id, mode)

    @classmethod
    def from_source(  # pylint: disable=too-many-arguments
        cls,
        name: str,
        source: Iterable[bytes],
        size: Optional[int],
        mtime: Optional[int] = 0,
        owner_id: Optional[int] = 0,
        group_id: Optional[int] = 0,
        mode: str = "644",
    ) -> WriteEntry:
        return cls(name, StreamContent(source, size), mtime, owner_id, group_id, mode)
