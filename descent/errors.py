"""
Exceptions raised while decoding Descent HOG, RDL and TXB data.

All format errors derive from ``ValueError`` so callers that only care about
"bad input" can catch that.
"""

from typing import Optional


class DescentFormatError(ValueError):
    """Base class for malformed or unsupported input."""

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        field: Optional[str] = None,
    ):
        self.offset = offset
        self.field = field
        context = []
        if field is not None:
            context.append(f"field={field}")
        if offset is not None:
            context.append(f"offset={offset} (0x{offset:X})")
        if context:
            message = f"{message} [{', '.join(context)}]"
        super().__init__(message)


class InvalidMagicError(DescentFormatError):
    """Container or level signature does not match."""


class TruncatedInputError(DescentFormatError):
    """A declared size or offset runs past the end of the buffer."""


class SizeMismatchError(DescentFormatError):
    """Level header file size disagrees with the actual buffer length."""


class OutOfBoundsError(DescentFormatError):
    """A cursor read would run past the end of the buffer."""

    def __init__(self, offset: int, size: int, length: int, field: Optional[str] = None):
        self.size = size
        self.length = length
        super().__init__(
            f"Read of {size} bytes would exceed buffer length {length}",
            offset=offset,
            field=field,
        )


class MalformedGeometryError(DescentFormatError):
    """Mine data could not be decoded."""


class IndexOutOfRangeError(MalformedGeometryError):
    """A decoded vertex or cube index exceeds its table."""


class PayloadConsumedError(RuntimeError):
    """A HOG entry payload was fetched more than once."""
