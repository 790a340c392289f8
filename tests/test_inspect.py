"""
Value inspector tests: rendering and severity gating.
"""

import io

import pytest

from hintcodec.inspect import (
    Severity,
    ValueInspector,
    render_felt,
    render_felt_hex,
    render_short_string,
)
from hintcodec.types import UInt384, Uint256


class TestRendering:
    """Tests for the render helpers."""

    def test_felt_decimal(self):
        assert render_felt(1234) == "1234"

    def test_felt_hex(self):
        assert render_felt_hex(255) == "0xff"

    def test_short_string(self):
        assert render_short_string(int.from_bytes(b"hello", 'big')) == "hello"

    def test_short_string_zero(self):
        assert render_short_string(0) == ""

    def test_short_string_invalid_utf8(self):
        assert render_short_string(0xFF) == "�"


class TestValueInspector:
    """Tests for gated output."""

    def _inspector(self, level):
        stream = io.StringIO()
        return ValueInspector(stream=stream, log_level=level), stream

    def test_value_always_printed(self, memory, base):
        memory.insert_value(base, 42)
        inspector, stream = self._inspector("error")
        assert inspector.felt(memory, base) == "Value: 42"
        assert stream.getvalue() == "Value: 42\n"

    def test_info_gated(self, memory, base):
        memory.insert_value(base, 42)
        inspector, stream = self._inspector("warning")
        assert inspector.felt(memory, base, Severity.INFO) is None
        assert stream.getvalue() == ""

        inspector, stream = self._inspector("info")
        assert inspector.felt_hex(memory, base, Severity.INFO) == "Info: 0x2a"

    def test_debug_needs_debug_level(self, memory, base):
        memory.insert_value(base, 42)
        inspector, _ = self._inspector("info")
        assert inspector.felt(memory, base, Severity.DEBUG) is None

        inspector, stream = self._inspector("debug")
        assert inspector.felt(memory, base, Severity.DEBUG) == "Debug: 42"
        assert stream.getvalue() == "Debug: 42\n"

    def test_gated_output_does_not_read(self, memory, base):
        inspector, _ = self._inspector("info")
        assert inspector.felt(memory, base + 5, Severity.DEBUG) is None

    def test_string_prefix(self, memory, base):
        memory.insert_value(base, int.from_bytes(b"gm", 'big'))
        inspector, _ = self._inspector("info")
        assert inspector.string(memory, base) == "String: gm"
        assert inspector.string(memory, base, Severity.INFO) == "Info: gm"

    def test_uint256(self, memory, base):
        Uint256(0x1234).encode(memory, base)
        inspector, _ = self._inspector("info")
        assert inspector.uint256(memory, base) == "Value: 0x" + "00" * 30 + "1234"

    def test_uint384(self, memory, base):
        UInt384(1).encode(memory, base)
        inspector, _ = self._inspector("info")
        assert inspector.uint384(memory, base) == "Value: 0x" + "00" * 47 + "01"

    def test_level_from_config(self, monkeypatch, memory, base):
        memory.insert_value(base, 1)
        monkeypatch.setenv("HINTCODEC_LOG_LEVEL_VM", "debug")
        stream = io.StringIO()
        inspector = ValueInspector(stream=stream)
        assert inspector.enabled(Severity.DEBUG)
        assert inspector.felt(memory, base, Severity.DEBUG) == "Debug: 1"

    def test_default_level_is_info(self):
        inspector = ValueInspector(stream=io.StringIO())
        assert inspector.enabled(Severity.INFO)
        assert not inspector.enabled(Severity.DEBUG)

    @pytest.mark.parametrize("severity,prefix", [
        (Severity.VALUE, "Value"),
        (Severity.INFO, "Info"),
        (Severity.DEBUG, "Debug"),
    ])
    def test_prefixes(self, severity, prefix):
        assert severity.prefix == prefix
