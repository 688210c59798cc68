from typing import Any, Type, TypeVar, Union

from typing_extensions import Protocol

T = TypeVar("T", bound="Comparable")


class Comparable(Protocol):
    def __eq__(self, other: object) -> bool:
        pass  # pragma: no cover

    def __ne__(self, other: object) -> bool:
        pass  # pragma: no cover


class UnixArError(Exception):
    """Base error for all errors in the library."""


class UnixArStateError(UnixArError):
    """A decoder or encoder was used after it failed or finished."""


class UnixArParseError(UnixArError):
    """An error when parsing archive data."""


class BadMagicError(UnixArParseError):
    """The data does not start with the archive magic."""


class BadHeaderEndError(UnixArParseError):
    """An entry header is not terminated by the end marker."""


class BadFieldError(UnixArParseError):
    """A header field required for framing could not be parsed."""


class TruncatedArchiveError(UnixArParseError):
    """The data ended in the middle of the magic, a header or content."""


class UnixArEncodeError(UnixArError):
    """An error when writing archive data."""


class FieldTooLongError(UnixArEncodeError):
    """An encoded header field does not fit its fixed width."""

    def __init__(self, field: str, value: bytes, width: int):
        self.field = field
        self.value = value
        self.width = width
        super().__init__(f"{field}: {value!r} is longer than {width} bytes")


class MissingSizeError(UnixArEncodeError):
    """Streamed content was supplied without a size."""


class SizeMismatchError(UnixArEncodeError):
    """Streamed content did not match the declared size."""


def _assert_base(  # pylint: disable=too-many-arguments
    result: bool,
    operator: str,
    name: str,
    expected: Any,
    actual: Any,
    location: Union[int, str],
    error_class: Type[UnixArError] = UnixArParseError,
) -> None:
    if not result:
        raise error_class(f"{name}: {actual!r} {operator} {expected!r} (at {location})")


def assert_eq(
    name: str,
    expected: T,
    actual: T,
    location: Union[int, str],
    error_class: Type[UnixArError] = UnixArParseError,
) -> None:
    result = actual == expected
    _assert_base(result, "==", name, expected, actual, location, error_class)
