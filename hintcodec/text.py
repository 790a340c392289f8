"""
hintcodec String Codec

Conversion between configuration text and raw big-endian bytes. Every value
type parses and serializes through these helpers, so the rules live in one
place:

    Input                    Decimal tried?   Result (target_len=2)
    ───────────────────────  ───────────────  ─────────────────────
    "123"                    yes              b"\\x00\\x7b"
    "FF"                     yes, fails       b"\\x00\\xff"
    "0x1_2"                  no               b"\\x00\\x12"
    "0x1"                    no               b"\\x00\\x01"
    "0x010203"               no               ValueOverflowError

Canonical output is always ``0x`` + lower-case hex, zero-padded to the
type's byte width. There is no decimal output form.

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

from __future__ import annotations

import re
from typing import Any, Optional, Union

from hintcodec.errors import ParseError, ValueOverflowError


HEX_DIGITS_PATTERN = re.compile(r'^[0-9a-fA-F]*$')
DECIMAL_PATTERN = re.compile(r'^[0-9]+(_[0-9]+)*$')


def has_hex_prefix(text: str) -> bool:
    """True if ``text`` starts with ``0x`` or ``0X``."""
    return text.startswith("0x") or text.startswith("0X")


def strip_hex_prefix(text: str) -> str:
    if has_hex_prefix(text):
        return text[2:]
    return text


def _pad_to_width(data: bytes, target_len: Optional[int], text: str) -> bytes:
    if target_len is None:
        return data
    if len(data) > target_len:
        raise ValueOverflowError("text", target_len, len(data), text)
    return data.rjust(target_len, b'\x00')


def hex_bytes_padded(text: str, target_len: Optional[int] = None) -> bytes:
    """
    Decode hex text to bytes, optionally left-padded to ``target_len``.

    The ``0x``/``0X`` prefix is optional and ``_`` separators are ignored.
    Odd-length input gets a single leading ``0`` digit.

    Raises:
        ParseError: If the text contains a non-hex character
        ValueOverflowError: If the decoded bytes exceed ``target_len``
    """
    if not isinstance(text, str):
        raise ParseError("text", f"Expected string, got {type(text).__name__}", text)

    digits = strip_hex_prefix(text).replace("_", "")
    if not HEX_DIGITS_PATTERN.match(digits):
        raise ParseError("text", "Invalid hex string", text)
    if len(digits) % 2 == 1:
        digits = "0" + digits

    return _pad_to_width(bytes.fromhex(digits), target_len, text)


def parse_decimal(text: str) -> Optional[int]:
    """Parse unsigned decimal text, or return None if it is not decimal."""
    if not DECIMAL_PATTERN.match(text):
        return None
    return int(text.replace("_", ""))


def int_to_bytes(value: int) -> bytes:
    """Minimal big-endian encoding of a non-negative integer (0 -> b"")."""
    return value.to_bytes((value.bit_length() + 7) // 8, 'big')


def parse_hex_or_decimal(
    text: str,
    target_len: Optional[int] = None,
    allow_empty: bool = False,
) -> bytes:
    """
    Parse configuration text into big-endian bytes.

    Unprefixed text is tried as an unsigned decimal first. Anything
    prefixed, or anything that is not decimal, is decoded as hex.

    Args:
        text: Input text
        target_len: Fixed byte width of the destination type, if any
        allow_empty: Treat ``""`` as zero instead of rejecting it

    Returns:
        Decoded bytes, left-padded to ``target_len`` when given

    Raises:
        ParseError: Empty or malformed input
        ValueOverflowError: Value wider than ``target_len``
    """
    if not isinstance(text, str):
        raise ParseError("text", f"Expected string, got {type(text).__name__}", text)

    if text == "":
        if not allow_empty:
            raise ParseError("text", "Empty value", text)
        return _pad_to_width(b"", target_len, text)

    if not has_hex_prefix(text):
        decimal = parse_decimal(text)
        if decimal is not None:
            return _pad_to_width(int_to_bytes(decimal), target_len, text)

    return hex_bytes_padded(text, target_len)


def parse_int(text: str, target_len: Optional[int] = None) -> int:
    """Parse text to an unsigned integer using the hex/decimal rules."""
    return int.from_bytes(parse_hex_or_decimal(text, target_len), 'big')


def canonical_hex(value: Union[int, bytes], width: Optional[int] = None) -> str:
    """
    Canonical text form: ``0x`` + lower-case hex, zero-padded to ``width``.

    ``bytes`` input with ``width=None`` is rendered at its exact length.
    """
    if isinstance(value, int):
        if value < 0:
            raise ParseError("value", "Negative values not supported", value)
        data = int_to_bytes(value)
    else:
        data = bytes(value)

    if width is not None:
        if len(data) > width:
            raise ValueOverflowError("value", width, len(data), value)
        data = data.rjust(width, b'\x00')

    return "0x" + data.hex()


def coerce_text(value: Any, allow_integer: bool = True, field_name: str = "value") -> str:
    """
    Normalize structured input (JSON/YAML scalar) to text.

    Strings pass through. Non-negative integers become their decimal text
    when ``allow_integer`` is set. Every other shape is rejected.
    """
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        raise ParseError(field_name, "Expected a string or an integer, got bool", value)
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        if not allow_integer:
            raise ParseError(field_name, "Expected a string, got int", value)
        if value < 0:
            raise ParseError(field_name, "Negative values not supported", value)
        return str(value)
    expected = "a string or an integer" if allow_integer else "a string"
    raise ParseError(
        field_name,
        f"Expected {expected}, got {type(value).__name__}",
        value,
    )
