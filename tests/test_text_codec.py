"""
String codec tests: hex/decimal parsing, padding, canonical output.

Run with: pytest tests/test_text_codec.py -v
"""

import pytest

from hintcodec.errors import ParseError, ValueOverflowError
from hintcodec.text import (
    canonical_hex,
    coerce_text,
    has_hex_prefix,
    hex_bytes_padded,
    int_to_bytes,
    parse_decimal,
    parse_hex_or_decimal,
    parse_int,
    strip_hex_prefix,
)


class TestHexPrefix:
    """Tests for prefix detection."""

    def test_lower_and_upper_prefix(self):
        assert has_hex_prefix("0x12")
        assert has_hex_prefix("0X12")
        assert not has_hex_prefix("12")
        assert not has_hex_prefix("x12")

    def test_strip_prefix(self):
        assert strip_hex_prefix("0xabc") == "abc"
        assert strip_hex_prefix("0Xabc") == "abc"
        assert strip_hex_prefix("abc") == "abc"


class TestHexBytesPadded:
    """Tests for hex_bytes_padded."""

    def test_plain_hex(self):
        assert hex_bytes_padded("0x0102") == b"\x01\x02"

    def test_without_prefix(self):
        assert hex_bytes_padded("ff") == b"\xff"

    def test_odd_length_gets_leading_zero(self):
        assert hex_bytes_padded("0x1") == b"\x01"
        assert hex_bytes_padded("0x123") == b"\x01\x23"

    def test_underscores_are_ignored(self):
        assert hex_bytes_padded("0x1_2") == hex_bytes_padded("0x12")
        assert hex_bytes_padded("0xde_ad_be_ef") == b"\xde\xad\xbe\xef"

    def test_left_padding(self):
        assert hex_bytes_padded("0x1", 4) == b"\x00\x00\x00\x01"

    def test_exact_width_is_accepted(self):
        assert hex_bytes_padded("0x0102", 2) == b"\x01\x02"

    def test_overflow(self):
        with pytest.raises(ValueOverflowError) as exc:
            hex_bytes_padded("0x010203", 2)
        assert exc.value.width == 2
        assert exc.value.actual == 3

    def test_invalid_character(self):
        with pytest.raises(ParseError):
            hex_bytes_padded("0xzz")

    def test_whitespace_is_rejected(self):
        with pytest.raises(ParseError):
            hex_bytes_padded("0x12 34")

    def test_empty_after_prefix(self):
        assert hex_bytes_padded("0x") == b""
        assert hex_bytes_padded("0x", 2) == b"\x00\x00"

    def test_non_string_rejected(self):
        with pytest.raises(ParseError):
            hex_bytes_padded(b"0x12")


class TestParseHexOrDecimal:
    """Tests for parse_hex_or_decimal."""

    def test_decimal_first(self):
        assert parse_int("123") == 123

    def test_prefixed_is_hex(self):
        assert parse_int("0x123") == 291

    def test_non_decimal_falls_back_to_hex(self):
        assert parse_int("FF") == 255
        assert parse_int("ab") == 171

    def test_decimal_with_underscores(self):
        assert parse_int("1_000") == 1000

    def test_edge_underscores_are_not_decimal(self):
        assert parse_decimal("_10") is None
        assert parse_decimal("10_") is None
        assert parse_decimal("1__0") is None
        assert parse_int("_10") == 0x10
        assert parse_int("10_") == 0x10

    def test_padding_to_target(self):
        assert parse_hex_or_decimal("123", 2) == b"\x00\x7b"
        assert parse_hex_or_decimal("FF", 2) == b"\x00\xff"

    def test_decimal_overflow(self):
        with pytest.raises(ValueOverflowError):
            parse_hex_or_decimal("65536", 2)

    def test_hex_overflow(self):
        with pytest.raises(ValueOverflowError):
            parse_hex_or_decimal("0x010203", 2)

    def test_empty_is_rejected_by_default(self):
        with pytest.raises(ParseError):
            parse_hex_or_decimal("")

    def test_empty_allowed_as_zero(self):
        assert parse_hex_or_decimal("", 2, allow_empty=True) == b"\x00\x00"

    def test_zero(self):
        assert parse_hex_or_decimal("0", 1) == b"\x00"
        assert parse_int("0") == 0

    def test_negative_is_not_decimal(self):
        with pytest.raises(ParseError):
            parse_hex_or_decimal("-1")

    def test_overflow_is_a_parse_error(self):
        with pytest.raises(ParseError):
            parse_hex_or_decimal("0x" + "ff" * 33, 32)


class TestDecimalAndBytes:
    """Tests for the small integer helpers."""

    def test_parse_decimal(self):
        assert parse_decimal("42") == 42
        assert parse_decimal("4_2") == 42
        assert parse_decimal("_") is None
        assert parse_decimal("0x2a") is None

    def test_int_to_bytes_minimal(self):
        assert int_to_bytes(0) == b""
        assert int_to_bytes(1) == b"\x01"
        assert int_to_bytes(256) == b"\x01\x00"


class TestCanonicalHex:
    """Tests for canonical text output."""

    def test_int_padded(self):
        assert canonical_hex(1, 4) == "0x00000001"

    def test_lower_case(self):
        assert canonical_hex(0xABCDEF) == "0xabcdef"

    def test_bytes_exact_length(self):
        assert canonical_hex(b"\x00\x01") == "0x0001"

    def test_empty_bytes(self):
        assert canonical_hex(b"") == "0x"

    def test_too_wide(self):
        with pytest.raises(ValueOverflowError):
            canonical_hex(1 << 32, 4)

    def test_negative(self):
        with pytest.raises(ParseError):
            canonical_hex(-1)

    def test_text_round_trip(self):
        text = canonical_hex(0x1234, 32)
        assert parse_int(text, 32) == 0x1234


class TestCoerceText:
    """Tests for structured input coercion."""

    def test_string_passes_through(self):
        assert coerce_text("0x1") == "0x1"

    def test_integer_allowed(self):
        assert coerce_text(17) == "17"

    def test_integer_disallowed(self):
        with pytest.raises(ParseError, match="Expected a string"):
            coerce_text(17, allow_integer=False)

    def test_bool_rejected(self):
        with pytest.raises(ParseError):
            coerce_text(True)

    def test_negative_rejected(self):
        with pytest.raises(ParseError):
            coerce_text(-5)

    @pytest.mark.parametrize("value", [1.5, None, [1], {"a": 1}])
    def test_other_shapes_rejected(self, value):
        with pytest.raises(ParseError):
            coerce_text(value)

    def test_field_name_in_error(self):
        with pytest.raises(ParseError) as exc:
            coerce_text(None, field_name="balance")
        assert exc.value.field == "balance"
        assert str(exc.value).startswith("balance: ")
