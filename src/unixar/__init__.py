"""Stream and random-access codec for Unix ar archives."""
from .archive import Archive, IndexedEntry, open_archive
from .errors import (
    BadFieldError,
    BadHeaderEndError,
    BadMagicError,
    FieldTooLongError,
    MissingSizeError,
    SizeMismatchError,
    TruncatedArchiveError,
    UnixArEncodeError,
    UnixArError,
    UnixArParseError,
    UnixArStateError,
)
from .parse.decoder import ArchiveDecoder, create_decoder, decode_stream
from .parse.encoder import ArchiveEncoder, create_encoder, encode_stream
from .parse.models import ArchiveEntry, BufferContent, StreamContent, WriteEntry

__version__ = "0.1.0"

__all__ = [
    "Archive",
    "ArchiveDecoder",
    "ArchiveEncoder",
    "ArchiveEntry",
    "BadFieldError",
    "BadHeaderEndError",
    "BadMagicError",
    "BufferContent",
    "FieldTooLongError",
    "IndexedEntry",
    "MissingSizeError",
    "SizeMismatchError",
    "StreamContent",
    "TruncatedArchiveError",
    "UnixArEncodeError",
    "UnixArError",
    "UnixArParseError",
    "UnixArStateError",
    "WriteEntry",
    "create_decoder",
    "create_encoder",
    "decode_stream",
    "encode_stream",
    "open_archive",
]
