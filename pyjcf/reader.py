"""
Positional big-endian reads over an immutable buffer.
"""

import struct

from .errors import UnexpectedEnd


_U2 = struct.Struct(">H")
_U4 = struct.Struct(">I")
_S2 = struct.Struct(">h")
_S4 = struct.Struct(">i")


class ByteReader:
    """Cursor over a bytes buffer.

    Every read either returns the full amount requested and advances, or
    raises UnexpectedEnd without moving. ``base`` is added to reported
    offsets so that readers over a slice of the file still point at the
    right place in the original input.
    """

    def __init__(self, data: bytes, base: int = 0):
        self.data = data
        self.pos = 0
        self.base = base

    @property
    def offset(self) -> int:
        """Absolute offset of the cursor in the original input."""
        return self.base + self.pos

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def _require(self, size: int):
        available = len(self.data) - self.pos
        if size > available:
            raise UnexpectedEnd(size, available, self.offset)

    def read_u1(self) -> int:
        self._require(1)
        val = self.data[self.pos]
        self.pos += 1
        return val

    def read_s1(self) -> int:
        val = self.read_u1()
        return val - 0x100 if val & 0x80 else val

    def read_u2(self) -> int:
        self._require(2)
        val = _U2.unpack_from(self.data, self.pos)[0]
        self.pos += 2
        return val

    def read_s2(self) -> int:
        self._require(2)
        val = _S2.unpack_from(self.data, self.pos)[0]
        self.pos += 2
        return val

    def read_u4(self) -> int:
        self._require(4)
        val = _U4.unpack_from(self.data, self.pos)[0]
        self.pos += 4
        return val

    def read_s4(self) -> int:
        self._require(4)
        val = _S4.unpack_from(self.data, self.pos)[0]
        self.pos += 4
        return val

    def read_bytes(self, length: int) -> bytes:
        self._require(length)
        val = self.data[self.pos:self.pos + length]
        self.pos += length
        return val

    def skip(self, length: int):
        self._require(length)
        self.pos += length

    def seek(self, pos: int):
        """Move to ``pos`` (relative to this reader's buffer)."""
        if pos < 0 or pos > len(self.data):
            raise UnexpectedEnd(pos - self.pos, self.remaining(), self.offset)
        self.pos = pos

    def read_u2_list(self) -> tuple[int, ...]:
        """Read a u2 count followed by that many u2 values."""
        count = self.read_u2()
        return tuple(self.read_u2() for _ in range(count))
