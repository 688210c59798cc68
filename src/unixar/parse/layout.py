"""Binary layout of Unix ar archives.

An archive is the magic, followed by entries. Each entry is a fixed-width
ASCII header, immediately followed by exactly ``size`` bytes of content. No
alignment padding is written or expected between entries.
"""
from struct import Struct
from typing import Tuple

MAGIC = b"!<arch>\n"
END = b"`\n"

MAGIC_SIZE = len(MAGIC)
NAME_SIZE = 16
MTIME_SIZE = 12
OWNER_ID_SIZE = 6
GROUP_ID_SIZE = 6
MODE_SIZE = 8
SIZE_SIZE = 10
END_SIZE = len(END)

# (field name, width) in header order, excluding the end marker
FIELDS: Tuple[Tuple[str, int], ...] = (
    ("name", NAME_SIZE),
    ("mtime", MTIME_SIZE),
    ("owner_id", OWNER_ID_SIZE),
    ("group_id", GROUP_ID_SIZE),
    ("mode", MODE_SIZE),
    ("size", SIZE_SIZE),
)

HEADER = Struct("".join(f"{width}s" for _, width in FIELDS) + f"{END_SIZE}s")
HEADER_SIZE = HEADER.size
assert HEADER_SIZE == 60, HEADER_SIZE
assert MAGIC_SIZE == 8, MAGIC_SIZE
