"""
hintcodec Error Types

Every failure in the marshalling layer surfaces as one of the exceptions
below. Nothing in the codec recovers locally: parse, decode and encode either
return a value or raise, and the caller decides what to do with the failure.

    CodecError
    ├── ParseError            malformed text, unsupported input shape
    │   └── ValueOverflowError  value wider than the type's fixed byte width
    └── MemoryFault           unknown cell, wrong cell type, bad address

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

from __future__ import annotations

from typing import Any


class CodecError(Exception):
    """Base exception for marshalling failures."""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")


class ParseError(CodecError):
    """Text or structured input could not be turned into a value."""
    pass


class ValueOverflowError(ParseError):
    """Decoded value does not fit in the declared byte width."""

    def __init__(self, field: str, width: int, actual: int, value: Any = None):
        self.width = width
        self.actual = actual
        super().__init__(
            field,
            f"value does not fit in target type ({actual} bytes > {width} bytes)",
            value,
        )


class MemoryFault(CodecError):
    """VM memory access failed or returned an unexpected cell."""
    pass
