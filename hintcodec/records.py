"""
hintcodec Records

Wrapper records compose value types into the struct layouts VM programs
declare. A record is a dataclass whose fields are annotated with value
types, or with ``List[...]`` of one:

    @dataclass(frozen=True)
    class BlockHeader(Record):
        number: Felt
        parent_hash: Uint256
        extra_data: KeccakBytes
        receipts: List[Uint256]

Scalar fields are laid out inline, one after another. A list field takes
one pointer cell; its elements are encoded back to back in a fresh segment.

    a+0      number
    a+1..2   parent_hash
    a+3      ──► extra_data words
    a+4      ──► [receipt 0 (2 cells), receipt 1 (2 cells), ...]

Records load from JSON/YAML documents. Each document is checked against a
JSON Schema derived from the field annotations before any value is parsed.

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

from __future__ import annotations

import dataclasses
import json
import typing
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar, Union

import yaml
from jsonschema import Draft202012Validator

from hintcodec.errors import ParseError
from hintcodec.memory import Relocatable, VMMemory
from hintcodec.observability import CodecLayer, get_logger, timed_operation
from hintcodec.types import KeccakBytes, ValueKind, ValueType, value_type


logger = get_logger("records", CodecLayer.RECORDS)

R = TypeVar("R", bound="Record")

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


@dataclass(frozen=True)
class RecordField:
    """One field of a record layout."""
    name: str
    value_type: Type[ValueType]
    is_list: bool = False

    def n_fields(self) -> int:
        return 1 if self.is_list else self.value_type.n_fields()

    def json_schema(self) -> Dict[str, Any]:
        schema = value_json_schema(self.value_type)
        if self.is_list:
            return {"type": "array", "items": schema}
        return schema


def value_json_schema(cls: Type[ValueType]) -> Dict[str, Any]:
    """JSON Schema for one value of the given kind."""
    if cls.accepts_integer_literal:
        return {"type": ["string", "integer"], "minimum": 0}
    return {"type": "string"}


@lru_cache(maxsize=None)
def record_layout(cls: type) -> Tuple[RecordField, ...]:
    """Resolve a record class's field annotations into its layout."""
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__name__} is not a dataclass")

    hints = typing.get_type_hints(cls)
    layout: List[RecordField] = []
    for f in dataclasses.fields(cls):
        hint = hints[f.name]
        is_list = typing.get_origin(hint) in (list, List)
        target = typing.get_args(hint)[0] if is_list else hint
        if not (isinstance(target, type) and issubclass(target, ValueType)):
            raise TypeError(f"{cls.__name__}.{f.name}: unsupported field type {hint!r}")
        layout.append(RecordField(f.name, target, is_list))
    return tuple(layout)


@lru_cache(maxsize=None)
def _validator(cls: type) -> Draft202012Validator:
    return Draft202012Validator(cls.json_schema())


def _decode_value(
    cls: Type[ValueType],
    memory: VMMemory,
    address: Relocatable,
    length: Optional[int] = None,
) -> Tuple[ValueType, Relocatable]:
    # Record fields hold values, so byte buffers are always read in full
    if issubclass(cls, KeccakBytes):
        return cls.decode(memory, address, length, materialize=True)
    return cls.decode(memory, address)


class Record:
    """Base class for wrapper records. Subclasses must be dataclasses."""

    @classmethod
    def layout(cls) -> Tuple[RecordField, ...]:
        return record_layout(cls)

    @classmethod
    def n_fields(cls) -> int:
        """Inline cell count: scalar fields plus one pointer per list."""
        return sum(f.n_fields() for f in cls.layout())

    @classmethod
    def json_schema(cls) -> Dict[str, Any]:
        """JSON Schema (Draft 2020-12) for the record's document form."""
        layout = cls.layout()
        return {
            "$schema": JSON_SCHEMA_DIALECT,
            "title": cls.__name__,
            "type": "object",
            "properties": {f.name: f.json_schema() for f in layout},
            "required": [f.name for f in layout],
        }

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls: Type[R], data: Any) -> R:
        """
        Build a record from a parsed JSON/YAML document.

        Raises:
            ParseError: Document shape does not match the schema, or a value
                fails to parse
        """
        errors = sorted(_validator(cls).iter_errors(data), key=lambda e: list(e.path))
        if errors:
            first = errors[0]
            path = ".".join(str(p) for p in first.path) or cls.__name__
            logger.warning("Record document rejected", operation="from_dict",
                           record=cls.__name__, path=path, errors=len(errors))
            raise ParseError(path, first.message, first.instance)

        values: Dict[str, Any] = {}
        for f in cls.layout():
            raw = data[f.name]
            if f.is_list:
                values[f.name] = [
                    f.value_type.parse(item, field_name=f"{f.name}[{i}]")
                    for i, item in enumerate(raw)
                ]
            else:
                values[f.name] = f.value_type.parse(raw, field_name=f.name)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Document form with every value in canonical text."""
        out: Dict[str, Any] = {}
        for f in self.layout():
            value = getattr(self, f.name)
            out[f.name] = [v.to_text() for v in value] if f.is_list else value.to_text()
        return out

    # -------------------------------------------------------------------------
    # Memory
    # -------------------------------------------------------------------------

    def to_memory(self, memory: VMMemory, address: Relocatable) -> Relocatable:
        """Encode every field in order; returns the address after the record."""
        for f in self.layout():
            value = getattr(self, f.name)
            if f.is_list:
                base = memory.add_memory_segment()
                cursor = base
                for item in value:
                    cursor = item.encode(memory, cursor)
                memory.insert_value(address, base)
                address = address + 1
            else:
                address = value.encode(memory, address)
        return address

    encode = to_memory

    @classmethod
    def from_memory(
        cls: Type[R],
        memory: VMMemory,
        address: Relocatable,
        lengths: Optional[Dict[str, int]] = None,
    ) -> R:
        """
        Decode a record stored at ``address``.

        ``lengths`` gives the element count of list fields, or the byte
        length of KeccakBytes fields. Missing list counts are taken from
        the size of the element segment.
        """
        lengths = lengths or {}
        values: Dict[str, Any] = {}
        for f in cls.layout():
            if f.is_list:
                base = memory.get_relocatable(address)
                count = lengths.get(f.name)
                if count is None:
                    used = memory.segment_used_size(base.segment_index) - base.offset
                    count = max(used, 0) // f.value_type.n_fields()
                items = []
                cursor = base
                for _ in range(count):
                    item, cursor = _decode_value(f.value_type, memory, cursor)
                    items.append(item)
                values[f.name] = items
                address = address + 1
            else:
                values[f.name], address = _decode_value(f.value_type, memory, address, lengths.get(f.name))
        return cls(**values)

    @classmethod
    def decode(
        cls: Type[R],
        memory: VMMemory,
        address: Relocatable,
        lengths: Optional[Dict[str, int]] = None,
    ) -> Tuple[R, Relocatable]:
        return cls.from_memory(memory, address, lengths), address + cls.n_fields()


# =============================================================================
# FILES
# =============================================================================

def load_document(path: Union[str, Path]) -> Any:
    """Read a ``.json`` file with json, anything else with yaml.safe_load."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ParseError(str(path), f"Cannot read document: {e}", None) from e


@timed_operation(logger, "load_records")
def load_records(path: Union[str, Path], record_cls: Type[R]) -> List[R]:
    """Load one record or a list of records from a JSON/YAML file."""
    data = load_document(path)
    documents = data if isinstance(data, list) else [data]
    records = [record_cls.from_dict(doc) for doc in documents]
    logger.info("Records loaded", operation="load_records",
                path=str(path), record=record_cls.__name__, count=len(records))
    return records


def canonicalize_values(kind: Union[str, ValueKind], data: Any) -> Any:
    """
    Parse a value, a list of values or a mapping of values of one kind
    and return the same shape with canonical text.
    """
    cls = value_type(kind)
    if isinstance(data, list):
        return [cls.parse(item, field_name=f"[{i}]").to_text() for i, item in enumerate(data)]
    if isinstance(data, dict):
        return {str(k): cls.parse(v, field_name=str(k)).to_text() for k, v in data.items()}
    return cls.parse(data).to_text()
