"""
CLI tests: commands, output formats, exit codes.
"""

import json
from pathlib import Path

import pytest
import yaml

from hintcodec.cli import CodecCLI, OutputFormat, format_output, main


def run(capsys, *args):
    code = CodecCLI().run(list(args))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


class TestParseCommand:

    def test_parse_decimal(self, capsys):
        code, out, _ = run(capsys, "parse", "uint256", "123")
        assert code == 0
        result = json.loads(out)
        assert result["canonical"] == "0x" + "00" * 31 + "7b"
        assert result["decimal"] == "123"

    def test_parse_keccak_bytes(self, capsys):
        code, out, _ = run(capsys, "parse", "keccak_bytes", "0x0102")
        assert code == 0
        assert json.loads(out) == {"kind": "keccak_bytes", "canonical": "0x0102", "length": 2}

    def test_parse_overflow_exit_code(self, capsys):
        code, _, err = run(capsys, "parse", "uint256", "0x" + "ff" * 33)
        assert code == 1
        assert "does not fit" in err

    def test_quiet(self, capsys):
        code, _, err = run(capsys, "--quiet", "parse", "felt", "0xzz")
        assert code == 1
        assert err == ""

    def test_yaml_output(self, capsys):
        code, out, _ = run(capsys, "--format", "yaml", "parse", "felt", "1")
        assert code == 0
        assert yaml.safe_load(out)["decimal"] == "1"


class TestEncodeDecodeCommands:

    def test_encode_uint256(self, capsys):
        code, out, _ = run(capsys, "encode", "uint256", "1")
        assert code == 0
        result = json.loads(out)
        assert result["n_fields"] == 2
        assert [c["value"] for c in result["cells"]] == ["0x1", "0x0"]
        assert [c["address"] for c in result["cells"]] == ["0:0", "0:1"]

    def test_encode_keccak_bytes_shows_pointer(self, capsys):
        code, out, _ = run(capsys, "encode", "keccak_bytes", "0x010203040506070809")
        assert code == 0
        cells = json.loads(out)["cells"]
        assert cells[0] == {"address": "0:0", "value": "1:0"}
        assert len(cells) == 3

    def test_decode_uint256_bits32(self, capsys):
        code, out, _ = run(capsys, "decode", "uint256_bits32", "--cells", *(["0"] * 7 + ["1"]))
        assert code == 0
        assert json.loads(out)["canonical"] == "0x" + "00" * 31 + "01"

    def test_decode_wrong_cell_count(self, capsys):
        code, _, err = run(capsys, "decode", "uint384", "--cells", "1", "2")
        assert code == 1
        assert "occupies 4 cells" in err

    def test_decode_keccak_bytes_with_length(self, capsys):
        code, out, _ = run(capsys, "decode", "keccak_bytes", "--cells", "0x0201", "--length", "2")
        assert code == 0
        assert json.loads(out)["canonical"] == "0x0102"

    def test_decode_bad_cell(self, capsys):
        code, _, err = run(capsys, "decode", "felt", "--cells", "nope")
        assert code == 2
        assert "Invalid cell value" in err


class TestRecordsCommand:

    def test_canonicalize_file(self, capsys, tmp_path):
        path = tmp_path / "fees.yaml"
        path.write_text("base: '0x1'\npriority: '2'\n")
        code, out, _ = run(capsys, "records", str(path), "--kind", "uint256")
        assert code == 0
        assert json.loads(out) == {
            "base": "0x" + "00" * 31 + "01",
            "priority": "0x" + "00" * 31 + "02",
        }


class TestConfigCommand:

    def test_get(self, capsys):
        code, out, _ = run(capsys, "config", "get", "inspect.log_level")
        assert code == 0
        assert json.loads(out) == {"path": "inspect.log_level", "value": "info"}

    def test_show(self, capsys):
        code, out, _ = run(capsys, "config", "show")
        assert code == 0
        assert set(json.loads(out)) == {"memory", "inspect", "observability"}

    def test_validate(self, capsys):
        code, out, _ = run(capsys, "config", "validate")
        assert code == 0
        assert json.loads(out)["valid"] is True

    def test_validate_failure(self, capsys, monkeypatch):
        monkeypatch.setenv("HINTCODEC_LOG_LEVEL_VM", "loud")
        code, _, err = run(capsys, "config", "validate")
        assert code == 1
        assert "inspect.log_level" in err

    def test_get_integer_shows_hex(self, capsys):
        code, out, _ = run(capsys, "config", "get", "memory.max_offset")
        assert code == 0
        assert json.loads(out)["hex"] == "0xffffffffffffffff"

    def test_schema(self, capsys):
        code, out, _ = run(capsys, "config", "schema")
        assert code == 0
        assert "memory" in json.loads(out)["properties"]

    def test_bad_path(self, capsys):
        code, _, _ = run(capsys, "config", "get", "nope.nothing")
        assert code == 1

    def test_missing_subcommand(self, capsys):
        code, _, _ = run(capsys, "config")
        assert code == 2


class TestUsage:

    def test_no_command_prints_help(self, capsys):
        code, out, _ = run(capsys)
        assert code == 0
        assert "usage" in out

    def test_unknown_kind(self, capsys):
        code, _, _ = run(capsys, "parse", "uint128", "1")
        assert code == 2

    def test_format_output(self):
        assert json.loads(format_output({"a": 1})) == {"a": 1}
        assert yaml.safe_load(format_output({"a": 1}, OutputFormat.YAML)) == {"a": 1}


class TestPackaging:
    """Tests for the project metadata."""

    PYPROJECT = Path(__file__).resolve().parents[1] / "pyproject.toml"

    def test_console_script_points_at_main(self):
        text = self.PYPROJECT.read_text()
        assert 'hintcodec = "hintcodec.cli:main"' in text
        assert callable(main)

    def test_description_is_inline(self):
        lines = self.PYPROJECT.read_text().splitlines()
        assert any(line.startswith("description = ") for line in lines)
        assert not any(line.startswith("readme") for line in lines)
