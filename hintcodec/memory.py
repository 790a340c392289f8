"""
hintcodec VM Memory

The marshalling layer talks to VM memory through the narrow ``VMMemory``
protocol: read an integer cell, read a pointer cell, write a cell, allocate
a segment. ``SegmentedMemory`` is a complete in-process implementation of
that protocol with the same semantics as the VM's own memory:

    ┌────────────── segment 0 ──────────────┐ ┌──── segment 1 ────┐
    │ 0:0  0:1  0:2  0:3  ...               │ │ 1:0  1:1  ...     │
    └───────────────────────────────────────┘ └───────────────────┘

    - Addresses are ``Relocatable(segment_index, offset)`` pairs
    - Cells hold a field element (int in [0, P)) or a Relocatable
    - Cells are write-once: rewriting with a different value faults
    - Reading an unbound cell faults

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple, Union, runtime_checkable

from hintcodec.config import get_config
from hintcodec.errors import MemoryFault
from hintcodec.observability import CodecLayer, get_logger


logger = get_logger("memory", CodecLayer.MEMORY)

# Order of the VM's native field: 2**251 + 17 * 2**192 + 1
FIELD_PRIME: int = 0x800000000000011000000000000000000000000000000000000000000000001

# Offsets are machine-word sized
MAX_OFFSET: int = 2**64 - 1


# =============================================================================
# ADDRESSES
# =============================================================================

@dataclass(frozen=True, order=True)
class Relocatable:
    """
    Address of a memory cell: a segment index plus an offset into it.

    Arithmetic with integers moves within the segment and is bounds-checked;
    leaving ``[0, MAX_OFFSET]`` raises MemoryFault.
    """
    segment_index: int
    offset: int

    def __post_init__(self):
        if self.segment_index < 0:
            raise MemoryFault("address", "Negative segment index", self.segment_index)
        if not 0 <= self.offset <= MAX_OFFSET:
            raise MemoryFault("address", "Offset out of addressable range", self.offset)

    @classmethod
    def parse(cls, text: str) -> "Relocatable":
        """Parse the ``"segment:offset"`` form produced by ``str()``."""
        parts = text.split(":")
        if len(parts) != 2:
            raise MemoryFault("address", "Expected segment:offset", text)
        try:
            return cls(int(parts[0]), int(parts[1]))
        except ValueError as e:
            raise MemoryFault("address", "Expected segment:offset", text) from e

    def __add__(self, other: int) -> "Relocatable":
        if isinstance(other, bool) or not isinstance(other, int):
            return NotImplemented
        offset = self.offset + other
        if not 0 <= offset <= MAX_OFFSET:
            raise MemoryFault("address", f"Offset overflow: {self} + {other}", offset)
        return Relocatable(self.segment_index, offset)

    def __sub__(self, other: Union[int, "Relocatable"]) -> Union[int, "Relocatable"]:
        if isinstance(other, Relocatable):
            if other.segment_index != self.segment_index:
                raise MemoryFault(
                    "address",
                    f"Cannot subtract addresses from different segments: {self} - {other}",
                    other,
                )
            return self.offset - other.offset
        if isinstance(other, bool) or not isinstance(other, int):
            return NotImplemented
        return self + (-other)

    def __str__(self) -> str:
        return f"{self.segment_index}:{self.offset}"


MaybeRelocatable = Union[int, Relocatable]


# =============================================================================
# MEMORY PROTOCOL
# =============================================================================

@runtime_checkable
class VMMemory(Protocol):
    """Memory operations the marshalling layer consumes."""

    def get_integer(self, address: Relocatable) -> int:
        ...

    def get_relocatable(self, address: Relocatable) -> Relocatable:
        ...

    def insert_value(self, address: Relocatable, value: MaybeRelocatable) -> None:
        ...

    def add_memory_segment(self) -> Relocatable:
        ...

    def segment_used_size(self, segment_index: int) -> int:
        ...


def is_field_element(value: object) -> bool:
    """True for an int in [0, FIELD_PRIME)."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value < FIELD_PRIME
    )


# =============================================================================
# IN-MEMORY IMPLEMENTATION
# =============================================================================

class SegmentedMemory:
    """
    Segmented, write-once VM memory held in Python dictionaries.

    Limits come from ``memory.*`` in the active configuration unless passed
    explicitly.
    """

    def __init__(
        self,
        max_segments: Optional[int] = None,
        max_offset: Optional[int] = None,
    ):
        config = get_config().memory
        self.max_segments = max_segments if max_segments is not None else config.max_segments.get()
        self.max_offset = max_offset if max_offset is not None else config.max_offset.get()
        self._segments: List[Dict[int, MaybeRelocatable]] = []

    @property
    def num_segments(self) -> int:
        return len(self._segments)

    def add_memory_segment(self) -> Relocatable:
        """Allocate a new, empty segment and return its base address."""
        if len(self._segments) >= self.max_segments:
            logger.error("Segment limit reached", error_code="SEGMENT_LIMIT",
                         max_segments=self.max_segments)
            raise MemoryFault(
                "segment",
                f"Segment limit exceeded: {self.max_segments}",
                len(self._segments),
            )
        self._segments.append({})
        base = Relocatable(len(self._segments) - 1, 0)
        logger.debug("Segment allocated", operation="add_memory_segment", base=str(base))
        return base

    def _segment(self, address: Relocatable) -> Dict[int, MaybeRelocatable]:
        if not isinstance(address, Relocatable):
            raise MemoryFault("address", f"Expected Relocatable, got {type(address).__name__}", address)
        if address.segment_index >= len(self._segments):
            raise MemoryFault("address", f"Unknown segment: {address.segment_index}", str(address))
        if address.offset > self.max_offset:
            raise MemoryFault("address", f"Offset exceeds memory limit: {address}", str(address))
        return self._segments[address.segment_index]

    def insert_value(self, address: Relocatable, value: MaybeRelocatable) -> None:
        """
        Write one cell.

        Raises:
            MemoryFault: Unknown segment, value outside the field, or a cell
                already holding a different value
        """
        segment = self._segment(address)

        if not isinstance(value, Relocatable) and not is_field_element(value):
            raise MemoryFault(
                str(address),
                "Value is not a field element or relocatable",
                value,
            )

        existing = segment.get(address.offset)
        if existing is not None and existing != value:
            logger.error("Inconsistent memory assignment", error_code="INCONSISTENT_MEMORY",
                         address=str(address), existing=str(existing), new=str(value))
            raise MemoryFault(
                str(address),
                f"Inconsistent memory assignment: {existing} != {value}",
                value,
            )
        segment[address.offset] = value

    def load_data(self, address: Relocatable, values: List[MaybeRelocatable]) -> Relocatable:
        """Write consecutive cells starting at ``address``; return the next free one."""
        for i, value in enumerate(values):
            self.insert_value(address + i, value)
        return address + len(values)

    def get(self, address: Relocatable) -> Optional[MaybeRelocatable]:
        """Read one cell, or None if it has not been written."""
        return self._segment(address).get(address.offset)

    def get_integer(self, address: Relocatable) -> int:
        """
        Read a field-element cell.

        Raises:
            MemoryFault: Cell unknown, holds a pointer, or is out of field range
        """
        value = self.get(address)
        if value is None:
            raise MemoryFault(str(address), "Unknown memory cell", None)
        if isinstance(value, Relocatable):
            raise MemoryFault(str(address), "Expected integer, found relocatable", str(value))
        if not is_field_element(value):
            raise MemoryFault(str(address), "Cell value is not a field element", value)
        return value

    def get_relocatable(self, address: Relocatable) -> Relocatable:
        """Read a pointer cell."""
        value = self.get(address)
        if value is None:
            raise MemoryFault(str(address), "Unknown memory cell", None)
        if not isinstance(value, Relocatable):
            raise MemoryFault(str(address), "Expected relocatable, found integer", value)
        return value

    def get_range(self, address: Relocatable, size: int) -> List[Optional[MaybeRelocatable]]:
        """Read ``size`` consecutive cells; unknown cells come back as None."""
        return [self.get(address + i) for i in range(size)]

    def segment_used_size(self, segment_index: int) -> int:
        """One past the highest written offset in the segment."""
        if not 0 <= segment_index < len(self._segments):
            raise MemoryFault("segment", f"Unknown segment: {segment_index}", segment_index)
        segment = self._segments[segment_index]
        return max(segment) + 1 if segment else 0

    def dump(self) -> List[Tuple[Relocatable, MaybeRelocatable]]:
        """All written cells in address order."""
        return [
            (Relocatable(index, offset), segment[offset])
            for index, segment in enumerate(self._segments)
            for offset in sorted(segment)
        ]

    def __len__(self) -> int:
        return sum(len(segment) for segment in self._segments)
