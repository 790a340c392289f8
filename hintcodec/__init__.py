"""
hintcodec: VM Value Marshalling

Typed bridge between host-side Python values and the multi-cell layouts a
field-element VM keeps in its segmented memory. Configuration text becomes
typed values, typed values become memory cells, and memory cells become
typed values again, with canonical text for logs and debugging.

Architecture
────────────

    ┌─────────────────────────────────────────────────────────────────────────┐
    │                         VALUE MARSHALLING                                │
    │                                                                          │
    │  SURFACES                                                               │
    │    cli.py          parse / encode / decode / records / config           │
    │    inspect.py      Severity-gated rendering of values in memory         │
    │    records.py      Composite records, JSON Schema checked documents     │
    │                                                                          │
    │  VALUE TYPES                                                            │
    │    types.py        Felt, Uint256, Uint256Bits32, UInt384, KeccakBytes   │
    │                                                                          │
    │  FOUNDATION                                                             │
    │    text.py         Hex/decimal parsing, canonical hex output            │
    │    memory.py       Relocatable addresses, segmented write-once memory   │
    │    errors.py       ParseError, ValueOverflowError, MemoryFault          │
    │    config.py       YAML + environment configuration                     │
    │    observability.py Structured logging                                  │
    │                                                                          │
    └─────────────────────────────────────────────────────────────────────────┘

Core Concepts
─────────────

    Cell: One memory slot holding a field element or a Relocatable pointer.
    Cells are write-once; rewriting a cell with a different value faults.

    Limb: A fixed-width slice of a wide integer stored in one cell. Each
    kind fixes its own limb width and limb order.

    Canonical text: ``0x`` + lower-case hex zero-padded to the kind's byte
    width. Parsing canonical text gives back the same value.

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

__version__ = "0.1.0"

# Lazy imports to avoid circular dependencies
def __getattr__(name):
    """Lazy import hintcodec modules on first access."""

    # Error exports
    if name in ("CodecError", "ParseError", "ValueOverflowError", "MemoryFault"):
        from hintcodec import errors
        return getattr(errors, name)

    # Memory exports
    if name in ("Relocatable", "VMMemory", "SegmentedMemory", "FIELD_PRIME",
                "MaybeRelocatable"):
        from hintcodec import memory
        return getattr(memory, name)

    # Value type exports
    if name in ("ValueKind", "ValueType", "Felt", "Uint256", "Uint256Bits32",
                "UInt384", "KeccakBytes", "KeccakBytesRef", "value_type"):
        from hintcodec import types
        return getattr(types, name)

    # Text codec exports
    if name in ("hex_bytes_padded", "parse_hex_or_decimal", "canonical_hex"):
        from hintcodec import text
        return getattr(text, name)

    # Record exports
    if name in ("Record", "RecordField", "load_records", "load_document",
                "canonicalize_values"):
        from hintcodec import records
        return getattr(records, name)

    # Inspector exports
    if name in ("ValueInspector", "Severity"):
        from hintcodec import inspect
        return getattr(inspect, name)

    # Config exports
    if name in ("get_config", "get_config_manager", "ConfigError"):
        from hintcodec import config
        return getattr(config, name)

    raise AttributeError(f"module 'hintcodec' has no attribute '{name}'")

__all__ = [
    # Version info
    "__version__",
    # Errors
    "CodecError",
    "ParseError",
    "ValueOverflowError",
    "MemoryFault",
    # Memory
    "Relocatable",
    "VMMemory",
    "SegmentedMemory",
    "FIELD_PRIME",
    # Value types
    "ValueKind",
    "ValueType",
    "Felt",
    "Uint256",
    "Uint256Bits32",
    "UInt384",
    "KeccakBytes",
    "KeccakBytesRef",
    "value_type",
    # Text
    "hex_bytes_padded",
    "parse_hex_or_decimal",
    "canonical_hex",
    # Records
    "Record",
    "load_records",
    # Inspector
    "ValueInspector",
    "Severity",
]
