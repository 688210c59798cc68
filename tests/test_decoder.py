from typing import List

import pytest

from unixar import (
    ArchiveDecoder,
    ArchiveEntry,
    BadHeaderEndError,
    BadMagicError,
    TruncatedArchiveError,
    UnixArStateError,
    decode_stream,
)
from unixar.parse.decoder import DecoderState, decode_file

from .conftest import TEST_LOG, sample_entries


def _decode(data: bytes, chunk_size: int) -> List[ArchiveEntry]:
    chunks = [data[i : i + chunk_size] for i in range(0, len(data), chunk_size)]
    return list(decode_stream(chunks))


def test_decode_concrete_entry():
    (entry,) = _decode(TEST_LOG, len(TEST_LOG))
    assert entry == ArchiveEntry(
        name="test.log",
        mtime=0,
        owner_id=0,
        group_id=0,
        mode="644",
        size=5,
        content=b"test\n",
    )


def test_decode_sample(archive_bytes):
    entries = _decode(archive_bytes, len(archive_bytes))
    expected = sample_entries()
    assert [entry.name for entry in entries] == [entry.name for entry in expected]
    for entry, write_entry in zip(entries, expected):
        assert entry.content == bytes(write_entry.content.data)
        assert entry.size == len(entry.content)
        assert entry.mtime == write_entry.mtime
        assert entry.owner_id == write_entry.owner_id
        assert entry.group_id == write_entry.group_id
        assert entry.mode == write_entry.mode


@pytest.mark.parametrize("chunk_size", [1, 2, 7, 59, 60, 61, 1000])
def test_chunk_boundaries_do_not_matter(archive_bytes, chunk_size):
    assert _decode(archive_bytes, chunk_size) == _decode(archive_bytes, len(archive_bytes))


def test_feed_returns_completed_entries():
    decoder = ArchiveDecoder()
    assert decoder.feed(TEST_LOG[:10]) == []
    assert decoder.state == DecoderState.AwaitHeader
    assert decoder.feed(TEST_LOG[10:-1]) == []
    assert decoder.state == DecoderState.AwaitContent
    (entry,) = decoder.feed(TEST_LOG[-1:])
    assert entry.content == b"test\n"
    assert decoder.buffered == 0
    assert decoder.position == len(TEST_LOG)
    assert decoder.finish() == []
    assert decoder.state == DecoderState.Finished


def test_one_chunk_many_entries(archive_bytes):
    decoder = ArchiveDecoder()
    assert len(decoder.feed(archive_bytes)) == 4


def test_bad_magic():
    decoder = ArchiveDecoder()
    with pytest.raises(BadMagicError, match="at 0"):
        decoder.feed(b"!<arch>X" + TEST_LOG[8:])
    assert decoder.state == DecoderState.Failed
    with pytest.raises(UnixArStateError):
        decoder.feed(b"more")


def test_bad_magic_yields_nothing():
    entries = []
    with pytest.raises(BadMagicError):
        for entry in decode_stream([b"not an archive", TEST_LOG]):
            entries.append(entry)
    assert entries == []


def test_bad_end():
    data = bytearray(TEST_LOG)
    data[66:68] = b"\n`"
    with pytest.raises(BadHeaderEndError, match="at 66"):
        _decode(bytes(data), 1)


def test_entries_before_error_are_delivered(archive_bytes):
    data = archive_bytes + b"garbage".ljust(60) + b"x"
    entries = []
    with pytest.raises(BadHeaderEndError):
        for entry in decode_stream([data]):
            entries.append(entry)
    assert len(entries) == 4


@pytest.mark.parametrize("cut", [3, 8 + 30, 8 + 60 + 2])
def test_truncated(cut):
    with pytest.raises(TruncatedArchiveError):
        _decode(TEST_LOG[:cut], 5)


def test_empty_input():
    assert _decode(b"", 1) == []
    assert _decode(b"!<arch>\n", 1) == []


def test_finish_twice():
    decoder = ArchiveDecoder()
    decoder.finish()
    with pytest.raises(UnixArStateError):
        decoder.finish()


def test_decode_file(archive_path):
    with archive_path.open("rb") as f:
        entries = list(decode_file(f, chunk_size=13))
    assert [entry.name for entry in entries] == [
        "debian-binary",
        "empty",
        "control.tar.gz",
        "odd",
    ]
