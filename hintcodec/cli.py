#!/usr/bin/env python3
"""
hintcodec CLI

Command-line access to the marshalling layer: canonicalize configuration
values, preview the cells a value encodes to, and decode cells back.

Usage:
    hintcodec <command> [subcommand] [options]

Commands:
    parse       Parse a value and print its canonical form
    encode      Show the memory cells a value encodes to
    decode      Decode a value from a list of cells
    records     Canonicalize every value in a JSON/YAML file
    config      Configuration management

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

from __future__ import annotations

import argparse
import json
import sys
from enum import Enum
from typing import Any, List, Optional

import yaml

from hintcodec import __version__
from hintcodec.config import ConfigError
from hintcodec.errors import CodecError, MemoryFault
from hintcodec.memory import MaybeRelocatable, Relocatable, SegmentedMemory
from hintcodec.observability import CodecLayer, get_logger
from hintcodec.types import KeccakBytes, ValueKind, value_type


logger = get_logger("cli", CodecLayer.CLI)


class OutputFormat(Enum):
    """Output format options."""
    JSON = "json"
    YAML = "yaml"


class CLIError(Exception):
    """CLI error with exit code."""
    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


def format_output(data: Any, fmt: OutputFormat = OutputFormat.JSON) -> str:
    """Format data for output."""
    if fmt == OutputFormat.YAML:
        return yaml.dump(data, default_flow_style=False, sort_keys=False)
    return json.dumps(data, indent=2, default=str)


def _parse_cell(text: str) -> MaybeRelocatable:
    """A cell given on the command line: ``seg:off`` pointer or hex/decimal int."""
    if ":" in text:
        return Relocatable.parse(text)
    try:
        return int(text, 0)
    except ValueError as e:
        raise CLIError(f"Invalid cell value: {text}", exit_code=2) from e


def _render_cell(value: MaybeRelocatable) -> Any:
    return str(value) if isinstance(value, Relocatable) else hex(value)


class CodecCLI:
    """Main CLI application."""

    def __init__(self):
        kinds = [k.value for k in ValueKind]

        self.parser = argparse.ArgumentParser(
            prog="hintcodec",
            description="VM value marshalling toolkit",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.parser.add_argument(
            "--version", "-V",
            action="version",
            version=f"hintcodec {__version__}",
        )
        self.parser.add_argument(
            "--format", "-f",
            choices=[f.value for f in OutputFormat],
            default="json",
            help="Output format (default: json)",
        )
        self.parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress error messages",
        )

        self.subparsers = self.parser.add_subparsers(dest="command", help="Commands")

        parse = self.subparsers.add_parser("parse", help="Canonicalize a value")
        parse.add_argument("kind", choices=kinds, help="Value kind")
        parse.add_argument("text", help="Hex (0x...) or decimal text")

        encode = self.subparsers.add_parser("encode", help="Show encoded cells")
        encode.add_argument("kind", choices=kinds, help="Value kind")
        encode.add_argument("text", help="Hex (0x...) or decimal text")

        decode = self.subparsers.add_parser("decode", help="Decode cells into a value")
        decode.add_argument("kind", choices=kinds, help="Value kind")
        decode.add_argument("--cells", "-c", nargs="+", required=True,
                            help="Cell values (int, 0x-hex) in address order")
        decode.add_argument("--length", "-l", type=int,
                            help="Byte length (keccak_bytes only)")

        records = self.subparsers.add_parser("records", help="Canonicalize values in a file")
        records.add_argument("path", help="JSON or YAML file")
        records.add_argument("--kind", "-k", choices=kinds, required=True, help="Value kind")

        config = self.subparsers.add_parser("config", help="Configuration management")
        config_sub = config.add_subparsers(dest="subcommand")
        get = config_sub.add_parser("get", help="Get configuration value")
        get.add_argument("path", help="Config path (e.g., inspect.log_level)")
        config_sub.add_parser("show", help="Show all configuration")
        config_sub.add_parser("validate", help="Validate configuration")
        config_sub.add_parser("schema", help="Export configuration schema")

    def run(self, args: Optional[List[str]] = None) -> int:
        """Run the CLI."""
        try:
            parsed = self.parser.parse_args(args)
        except SystemExit as e:
            return int(e.code or 0)

        if not parsed.command:
            self.parser.print_help()
            return 0

        try:
            fmt = OutputFormat(parsed.format)
            result = self._dispatch(parsed)

            if result is not None:
                print(format_output(result, fmt))

            return 0

        except CLIError as e:
            if not parsed.quiet:
                print(f"Error: {e}", file=sys.stderr)
            return e.exit_code

        except (CodecError, ConfigError) as e:
            logger.info("Command failed", operation=parsed.command, error=str(e))
            if not parsed.quiet:
                print(f"Error: {e}", file=sys.stderr)
            return 1

    def _dispatch(self, args: argparse.Namespace) -> Any:
        """Dispatch command to handler."""
        cmd = args.command
        subcmd = getattr(args, "subcommand", None)

        handler_name = f"_handle_{cmd}_{subcmd}" if subcmd else f"_handle_{cmd}"
        handler = getattr(self, handler_name, None)

        if handler is None:
            raise CLIError(f"Unknown command: {cmd} {subcmd or ''}", exit_code=2)

        return handler(args)

    # Value handlers
    def _handle_parse(self, args: argparse.Namespace) -> Any:
        value = value_type(args.kind).from_text(args.text)
        result = {"kind": args.kind, "canonical": value.to_text()}
        if args.kind != ValueKind.KECCAK_BYTES.value:
            result["decimal"] = str(int(value))
        else:
            result["length"] = len(value)
        return result

    def _handle_encode(self, args: argparse.Namespace) -> Any:
        value = value_type(args.kind).from_text(args.text)
        memory = SegmentedMemory()
        base = memory.add_memory_segment()
        end = value.encode(memory, base)
        return {
            "kind": args.kind,
            "canonical": value.to_text(),
            "n_fields": end - base,
            "cells": [
                {"address": str(address), "value": _render_cell(cell)}
                for address, cell in memory.dump()
            ],
        }

    def _handle_decode(self, args: argparse.Namespace) -> Any:
        cls = value_type(args.kind)
        cells = [_parse_cell(c) for c in args.cells]
        memory = SegmentedMemory()
        base = memory.add_memory_segment()

        if cls is KeccakBytes:
            # Cells are the packed words; lay them out behind a pointer
            words = memory.add_memory_segment()
            memory.load_data(words, cells)
            memory.insert_value(base, words)
            value = KeccakBytes.from_memory(memory, base, args.length)
        else:
            if len(cells) != cls.n_fields():
                raise MemoryFault(
                    "cells",
                    f"{args.kind} occupies {cls.n_fields()} cells, got {len(cells)}",
                    len(cells),
                )
            memory.load_data(base, cells)
            value = cls.from_memory(memory, base)

        return {"kind": args.kind, "canonical": value.to_text()}

    def _handle_records(self, args: argparse.Namespace) -> Any:
        from hintcodec.records import canonicalize_values, load_document
        return canonicalize_values(args.kind, load_document(args.path))

    # Config handlers
    def _handle_config_get(self, args: argparse.Namespace) -> Any:
        from hintcodec.config import get_config_manager
        value = get_config_manager().get(args.path)
        if isinstance(value, int):
            return {"path": args.path, "value": value, "hex": hex(value)}
        return {"path": args.path, "value": value}

    def _handle_config_show(self, args: argparse.Namespace) -> Any:
        from hintcodec.config import get_config_manager
        return get_config_manager().config.to_dict()

    def _handle_config_validate(self, args: argparse.Namespace) -> Any:
        from hintcodec.config import get_config_manager
        errors = get_config_manager().validate()
        if errors:
            raise CLIError("Invalid configuration: " + "; ".join(errors))
        return {"valid": True, "errors": []}

    def _handle_config_schema(self, args: argparse.Namespace) -> Any:
        from hintcodec.config import get_config_manager
        return get_config_manager().export_schema()


def main() -> int:
    """CLI entry point."""
    cli = CodecCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
