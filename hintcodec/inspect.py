"""
hintcodec Value Inspector

Human-readable rendering of values sitting in VM memory, for debugging VM
programs. Output is gated by the VM log level (``inspect.log_level``):

    Severity    Prefix    Printed when log level is
    ────────    ──────    ─────────────────────────
    value       Value:    always
    info        Info:     info, debug
    debug       Debug:    debug

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, Callable, Optional, TextIO

from hintcodec.config import get_config
from hintcodec.memory import Relocatable, VMMemory
from hintcodec.observability import CodecLayer, get_logger
from hintcodec.text import int_to_bytes
from hintcodec.types import Felt, UInt384, Uint256


logger = get_logger("inspect", CodecLayer.INSPECT)


class Severity(Enum):
    """Output severity of an inspected value."""
    VALUE = "value"
    INFO = "info"
    DEBUG = "debug"

    @property
    def prefix(self) -> str:
        return {"value": "Value", "info": "Info", "debug": "Debug"}[self.value]


# =============================================================================
# RENDERING
# =============================================================================

def render_felt(value: int) -> str:
    """Decimal form."""
    return str(value)


def render_felt_hex(value: int) -> str:
    """Unpadded ``0x`` hex form."""
    return hex(value)


def render_short_string(value: int) -> str:
    """
    Decode a felt holding a short string (big-endian ASCII/UTF-8 bytes).

    Leading zero bytes are dropped; invalid UTF-8 sequences are replaced.
    """
    return int_to_bytes(value).decode("utf-8", errors="replace")


def render_uint256(value: Uint256) -> str:
    return value.to_text()


def render_uint384(value: UInt384) -> str:
    return value.to_text()


# =============================================================================
# INSPECTOR
# =============================================================================

class ValueInspector:
    """Reads values from memory and prints them if the log level allows."""

    def __init__(self, stream: Optional[TextIO] = None, log_level: Optional[str] = None):
        self.stream = stream
        self.log_level = (log_level or get_config().inspect.log_level.get()).lower()

    def enabled(self, severity: Severity) -> bool:
        if severity is Severity.VALUE:
            return True
        if severity is Severity.INFO:
            return self.log_level in ("info", "debug")
        return self.log_level == "debug"

    def _emit(
        self,
        severity: Severity,
        read: Callable[[], Any],
        render: Callable[[Any], str],
        prefix: Optional[str] = None,
    ) -> Optional[str]:
        # Nothing is read from memory unless the line is printed
        if not self.enabled(severity):
            return None
        line = f"{prefix or severity.prefix}: {render(read())}"
        print(line, file=self.stream or sys.stdout)
        logger.debug("Value inspected", operation="inspect", severity=severity.value)
        return line

    def felt(self, memory: VMMemory, address: Relocatable,
             severity: Severity = Severity.VALUE) -> Optional[str]:
        return self._emit(severity, lambda: Felt.from_memory(memory, address).value, render_felt)

    def felt_hex(self, memory: VMMemory, address: Relocatable,
                 severity: Severity = Severity.VALUE) -> Optional[str]:
        return self._emit(severity, lambda: Felt.from_memory(memory, address).value, render_felt_hex)

    def string(self, memory: VMMemory, address: Relocatable,
               severity: Severity = Severity.VALUE) -> Optional[str]:
        prefix = "String" if severity is Severity.VALUE else None
        return self._emit(
            severity,
            lambda: Felt.from_memory(memory, address).value,
            render_short_string,
            prefix,
        )

    def uint256(self, memory: VMMemory, address: Relocatable,
                severity: Severity = Severity.VALUE) -> Optional[str]:
        return self._emit(severity, lambda: Uint256.from_memory(memory, address), render_uint256)

    def uint384(self, memory: VMMemory, address: Relocatable,
                severity: Severity = Severity.VALUE) -> Optional[str]:
        return self._emit(severity, lambda: UInt384.from_memory(memory, address), render_uint384)
