"""Tests for the modified UTF-8 decoder."""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyjcf.errors import InvalidText
from pyjcf.mutf8 import decode_modified_utf8


class TestValidText:
    def test_empty(self):
        assert decode_modified_utf8(b"") == ""

    def test_ascii(self):
        assert decode_modified_utf8(b"java/lang/Object") == "java/lang/Object"

    def test_two_byte_form(self):
        # U+00E9 LATIN SMALL LETTER E WITH ACUTE
        assert decode_modified_utf8(b"caf\xc3\xa9") == "café"

    def test_nul_is_two_bytes(self):
        assert decode_modified_utf8(b"a\xc0\x80b") == "a\x00b"

    def test_three_byte_form(self):
        # U+20AC EURO SIGN
        assert decode_modified_utf8(b"\xe2\x82\xac") == "€"

    def test_supplementary_as_surrogate_pair(self):
        # U+1F600 is D83D DE00, each half encoded in three bytes
        data = b"\xed\xa0\xbd\xed\xb8\x80"
        assert decode_modified_utf8(data) == "\U0001F600"

    def test_surrogate_pair_between_ascii(self):
        data = b"x\xed\xa0\x80\xed\xb0\x80y"
        assert decode_modified_utf8(data) == "x\U00010000y"


class TestInvalidText:
    @pytest.mark.parametrize("lead", [0xF8, 0xF9, 0xFC, 0xFE, 0xFF])
    def test_high_leading_byte(self, lead):
        with pytest.raises(InvalidText):
            decode_modified_utf8(bytes([0x41, lead, 0x41]))

    def test_four_byte_utf8_rejected(self):
        with pytest.raises(InvalidText):
            decode_modified_utf8("\U0001F600".encode("utf-8"))

    def test_plain_zero_byte(self):
        with pytest.raises(InvalidText):
            decode_modified_utf8(b"a\x00b")

    def test_stray_continuation_byte(self):
        with pytest.raises(InvalidText):
            decode_modified_utf8(b"\x80")

    def test_truncated_two_byte(self):
        with pytest.raises(InvalidText):
            decode_modified_utf8(b"ab\xc3")

    def test_truncated_three_byte(self):
        with pytest.raises(InvalidText):
            decode_modified_utf8(b"\xe2\x82")

    def test_bad_continuation(self):
        with pytest.raises(InvalidText):
            decode_modified_utf8(b"\xc3\x41")

    def test_lone_high_surrogate(self):
        with pytest.raises(InvalidText):
            decode_modified_utf8(b"\xed\xa0\xbd")

    def test_lone_low_surrogate(self):
        with pytest.raises(InvalidText):
            decode_modified_utf8(b"\xed\xb8\x80abc")

    def test_error_reports_position_and_offset(self):
        with pytest.raises(InvalidText) as exc_info:
            decode_modified_utf8(b"abc\xff", offset=100)
        assert exc_info.value.position == 3
        assert exc_info.value.offset == 103
        assert exc_info.value.kind == "InvalidText"

    def test_offset_none_without_base(self):
        with pytest.raises(InvalidText) as exc_info:
            decode_modified_utf8(b"\xff")
        assert exc_info.value.offset is None
