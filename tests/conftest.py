from pathlib import Path
from typing import List

import pytest

from unixar import WriteEntry, encode_stream

TEST_LOG = (
    b"!<arch>\n"
    b"test.log        "
    b"0           "
    b"0     "
    b"0     "
    b"644     "
    b"5         "
    b"`\n"
    b"test\n"
)


def sample_entries() -> List[WriteEntry]:
    return [
        WriteEntry.from_bytes("debian-binary", b"2.0\n", mtime=1700000000),
        WriteEntry.from_bytes("empty", b"", owner_id=1000, group_id=100),
        WriteEntry.from_bytes("control.tar.gz", bytes(range(256)) * 3, mode="100644"),
        WriteEntry.from_bytes("odd", b"abc", mtime=None),
    ]


@pytest.fixture
def archive_bytes() -> bytes:
    return b"".join(encode_stream(sample_entries()))


@pytest.fixture
def archive_path(tmp_path: Path, archive_bytes: bytes) -> Path:
    path = tmp_path / "sample.a"
    path.write_bytes(archive_bytes)
    return path
