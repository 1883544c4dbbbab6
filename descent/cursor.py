"""
Bounds-checked little-endian reader over an in-memory buffer.
"""

import struct
from typing import Optional, Union

from descent.errors import OutOfBoundsError

Buffer = Union[bytes, bytearray, memoryview]

_U8 = struct.Struct("<B")
_I8 = struct.Struct("<b")
_U16 = struct.Struct("<H")
_I16 = struct.Struct("<h")
_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")

# 16:16 fixed point
FIXED_ONE = 65536.0


class ByteCursor:
    """
    Forward reader with absolute and relative seeking.

    Every read checks the remaining length first and raises
    ``OutOfBoundsError`` naming the offset and, when given, the field being
    read. Seeking itself is unchecked so a caller may position the cursor at
    the end of the buffer; the next read reports the problem.

    Example:
        >>> cursor = ByteCursor(b"\\x34\\x12\\xff")
        >>> hex(cursor.read_u16())
        '0x1234'
        >>> cursor.position
        2
    """

    __slots__ = ("_data", "_pos")

    def __init__(self, data: Buffer, offset: int = 0):
        self._data = data
        self._pos = 0
        self.seek(offset)

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self) -> Buffer:
        return self._data

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return max(len(self._data) - self._pos, 0)

    def seek(self, offset: int) -> None:
        """Move to an absolute offset."""
        if offset < 0:
            raise ValueError(f"Cannot seek to negative offset {offset}")
        self._pos = offset

    def skip(self, size: int, field: Optional[str] = None) -> None:
        """Advance ``size`` bytes, failing if that passes the end."""
        self._check(size, field)
        self._pos += size

    def _check(self, size: int, field: Optional[str]) -> None:
        if self._pos + size > len(self._data):
            raise OutOfBoundsError(self._pos, size, len(self._data), field)

    def _unpack(self, fmt: struct.Struct, field: Optional[str]):
        self._check(fmt.size, field)
        value = fmt.unpack_from(self._data, self._pos)[0]
        self._pos += fmt.size
        return value

    def read_bytes(self, size: int, field: Optional[str] = None) -> bytes:
        self._check(size, field)
        chunk = bytes(self._data[self._pos:self._pos + size])
        self._pos += size
        return chunk

    def read_u8(self, field: Optional[str] = None) -> int:
        return self._unpack(_U8, field)

    def read_i8(self, field: Optional[str] = None) -> int:
        return self._unpack(_I8, field)

    def read_u16(self, field: Optional[str] = None) -> int:
        return self._unpack(_U16, field)

    def read_i16(self, field: Optional[str] = None) -> int:
        return self._unpack(_I16, field)

    def read_u32(self, field: Optional[str] = None) -> int:
        return self._unpack(_U32, field)

    def read_i32(self, field: Optional[str] = None) -> int:
        return self._unpack(_I32, field)

    def read_fixed(self, field: Optional[str] = None) -> float:
        """Read a signed 16:16 fixed point value as a float."""
        return self.read_i32(field) / FIXED_ONE
