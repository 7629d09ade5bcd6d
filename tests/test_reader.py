"""Tests for the byte cursor."""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyjcf.errors import UnexpectedEnd
from pyjcf.reader import ByteReader


class TestPrimitives:
    def test_unsigned_reads(self):
        r = ByteReader(bytes([0xCA, 0xFE, 0xBA, 0xBE, 0x00, 0x34, 0x7F]))
        assert r.read_u4() == 0xCAFEBABE
        assert r.read_u2() == 52
        assert r.read_u1() == 0x7F
        assert r.at_end()

    def test_signed_reads(self):
        r = ByteReader(bytes([0xFF, 0xFF, 0xFE, 0xFF, 0xFF, 0xFF, 0xFD]))
        assert r.read_s1() == -1
        assert r.read_s2() == -2
        assert r.read_s4() == -3

    def test_read_bytes_and_remaining(self):
        r = ByteReader(b"abcdef")
        assert r.read_bytes(4) == b"abcd"
        assert r.remaining() == 2
        assert r.read_bytes(0) == b""

    def test_u2_list(self):
        r = ByteReader(bytes([0x00, 0x02, 0x00, 0x07, 0x01, 0x00]))
        assert r.read_u2_list() == (7, 256)


class TestBounds:
    def test_short_read_raises(self):
        r = ByteReader(b"\x01")
        with pytest.raises(UnexpectedEnd) as exc_info:
            r.read_u2()
        assert exc_info.value.wanted == 2
        assert exc_info.value.available == 1

    def test_failed_read_does_not_advance(self):
        r = ByteReader(b"\x01\x02\x03")
        with pytest.raises(UnexpectedEnd):
            r.read_u4()
        assert r.pos == 0
        assert r.read_u1() == 1

    def test_offset_includes_base(self):
        r = ByteReader(b"\x00\x00", base=40)
        r.read_u1()
        assert r.offset == 41
        with pytest.raises(UnexpectedEnd) as exc_info:
            r.read_u2()
        assert exc_info.value.offset == 41

    def test_seek_past_end(self):
        r = ByteReader(b"abc")
        r.seek(3)
        assert r.at_end()
        with pytest.raises(UnexpectedEnd):
            r.seek(4)

    def test_skip_past_end(self):
        r = ByteReader(b"abc")
        with pytest.raises(UnexpectedEnd):
            r.skip(4)
