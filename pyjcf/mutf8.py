"""
Decoder for the modified UTF-8 used by CONSTANT_Utf8 entries.

Differences from standard UTF-8: NUL is written as the two-byte sequence
C0 80, there are no four-byte forms, and supplementary characters are
stored as a surrogate pair with each half encoded in three bytes.
"""

from typing import Optional

from .errors import InvalidText


def _is_surrogate_pair(data: bytes, i: int) -> bool:
    """Check for 11101101 1010xxxx 10xxxxxx 11101101 1011xxxx 10xxxxxx."""
    if i + 6 > len(data):
        return False
    return (data[i] == 0xED
            and data[i + 1] & 0xF0 == 0xA0
            and data[i + 2] & 0xC0 == 0x80
            and data[i + 3] == 0xED
            and data[i + 4] & 0xF0 == 0xB0
            and data[i + 5] & 0xC0 == 0x80)


def decode_modified_utf8(data: bytes, offset: Optional[int] = None) -> str:
    """Decode ``data`` into a str.

    ``offset`` is the absolute position of ``data`` in the input and is
    only used for error reporting.
    """
    chars = []
    i = 0
    n = len(data)

    def fail(reason: str):
        raise InvalidText(reason, i, None if offset is None else offset + i)

    def continuation(k: int) -> int:
        if i + k >= n:
            fail("truncated multi-byte sequence")
        b = data[i + k]
        if b & 0xC0 != 0x80:
            fail(f"expected continuation byte, got {b:#04x}")
        return b & 0x3F

    while i < n:
        b = data[i]
        if b < 0x80:
            if b == 0:
                fail("NUL must be encoded as C0 80")
            chars.append(chr(b))
            i += 1
        elif b & 0xE0 == 0xC0:
            y = continuation(1)
            chars.append(chr(((b & 0x1F) << 6) | y))
            i += 2
        elif _is_surrogate_pair(data, i):
            v, w, y, z = data[i + 1], data[i + 2], data[i + 4], data[i + 5]
            code_point = (0x10000
                          + ((v & 0x0F) << 16)
                          + ((w & 0x3F) << 10)
                          + ((y & 0x0F) << 6)
                          + (z & 0x3F))
            chars.append(chr(code_point))
            i += 6
        elif b & 0xF0 == 0xE0:
            y = continuation(1)
            z = continuation(2)
            code_point = ((b & 0x0F) << 12) | (y << 6) | z
            if 0xD800 <= code_point <= 0xDFFF:
                fail(f"unpaired surrogate U+{code_point:04X}")
            chars.append(chr(code_point))
            i += 3
        else:
            fail(f"invalid leading byte {b:#04x}")

    return "".join(chars)
