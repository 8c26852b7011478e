"""
Borsh binary encoding used by the NEAR ledger.

Only the primitives needed for transactions are implemented: little-endian
unsigned integers, fixed byte arrays, length-prefixed byte vectors and UTF-8
strings, options and vectors of values.
"""
import struct
from typing import Callable, List, Optional, TypeVar

T = TypeVar('T')


class BorshError(ValueError):
    """Raised when a value cannot be encoded or a buffer cannot be decoded."""
    pass


class BorshWriter:
    """Accumulates Borsh-encoded values into a byte buffer."""

    def __init__(self):
        self._buffer = bytearray()

    def output(self) -> bytes:
        return bytes(self._buffer)

    def u8(self, value: int) -> None:
        self._uint(value, 1)

    def u32(self, value: int) -> None:
        self._uint(value, 4)

    def u64(self, value: int) -> None:
        self._uint(value, 8)

    def u128(self, value: int) -> None:
        self._uint(value, 16)

    def fixed_bytes(self, value: bytes, length: int) -> None:
        if len(value) != length:
            raise BorshError(f"Expected {length} bytes, got {len(value)}")
        self._buffer.extend(value)

    def u8_vec(self, value: bytes) -> None:
        self.u32(len(value))
        self._buffer.extend(value)

    def string(self, value: str) -> None:
        self.u8_vec(value.encode("utf-8"))

    def option(self, value: Optional[T], write: Callable[[T], None]) -> None:
        if value is None:
            self.u8(0)
        else:
            self.u8(1)
            write(value)

    def vec(self, values, write: Callable[[T], None]) -> None:
        self.u32(len(values))
        for value in values:
            write(value)

    def _uint(self, value: int, size: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise BorshError(f"Expected int, got {type(value).__name__}")
        if value < 0 or value >= 1 << (size * 8):
            raise BorshError(f"Value {value} does not fit in u{size * 8}")
        self._buffer.extend(value.to_bytes(size, "little"))


class BorshReader:
    """Reads Borsh-encoded values from a byte buffer."""

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def finish(self) -> None:
        """Raise if unread bytes are left in the buffer."""
        if self.remaining:
            raise BorshError(f"{self.remaining} trailing bytes after decoding")

    def u8(self) -> int:
        return self._uint(1)

    def u32(self) -> int:
        return struct.unpack("<I", self._take(4))[0]

    def u64(self) -> int:
        return self._uint(8)

    def u128(self) -> int:
        return self._uint(16)

    def fixed_bytes(self, length: int) -> bytes:
        return self._take(length)

    def u8_vec(self) -> bytes:
        return self._take(self.u32())

    def string(self) -> str:
        raw = self.u8_vec()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BorshError(f"Invalid UTF-8 string: {e}") from e

    def option(self, read: Callable[[], T]) -> Optional[T]:
        flag = self.u8()
        if flag == 0:
            return None
        if flag != 1:
            raise BorshError(f"Invalid option flag: {flag}")
        return read()

    def vec(self, read: Callable[[], T]) -> List[T]:
        return [read() for _ in range(self.u32())]

    def _uint(self, size: int) -> int:
        return int.from_bytes(self._take(size), "little")

    def _take(self, length: int) -> bytes:
        if self.remaining < length:
            raise BorshError(f"Unexpected end of buffer: need {length} bytes, have {self.remaining}")
        chunk = self._data[self._offset:self._offset + length]
        self._offset += length
        return chunk
