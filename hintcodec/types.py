"""
hintcodec Value Types

Encoding contracts between native Python values and the VM's multi-cell
layouts. Every kind implements the same ``ValueType`` interface: parse from
text, decode from memory, encode into memory, report its cell count.

Cell Layouts (address ``a``):

    Felt            a+0 = value
    Uint256         a+0 = low 128 bits        a+1 = high 128 bits
    Uint256Bits32   a+0 = bits 255..224  ...  a+7 = bits 31..0
    UInt384         a+0 = bits 95..0     ...  a+3 = bits 383..288
    KeccakBytes     a+0 = pointer ──► [u64 LE word 0, word 1, ...]

The two 256-bit kinds deliberately use opposite limb orders: each matches
the struct layout the VM program declares for it.

Text Widths:

    Felt, Uint256, Uint256Bits32    32 bytes
    UInt384                         48 bytes
    KeccakBytes                     exact length, no padding

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type, TypeVar, Union

from hintcodec.errors import MemoryFault, ParseError, ValueOverflowError
from hintcodec.memory import FIELD_PRIME, Relocatable, VMMemory
from hintcodec.observability import CodecLayer, get_logger
from hintcodec.text import (
    canonical_hex,
    coerce_text,
    hex_bytes_padded,
    parse_hex_or_decimal,
)


logger = get_logger("types", CodecLayer.TYPES)

V = TypeVar("V", bound="ValueType")

WORD_BYTES = 8


# =============================================================================
# VALUE KINDS
# =============================================================================

class ValueKind(Enum):
    """Closed set of wire formats understood by the marshalling layer."""
    FELT = "felt"
    UINT256 = "uint256"
    UINT256_BITS32 = "uint256_bits32"
    UINT384 = "uint384"
    KECCAK_BYTES = "keccak_bytes"


# =============================================================================
# VALUE TYPE CONTRACT
# =============================================================================

class ValueType(ABC):
    """
    Uniform interface for every value kind.

    Subclasses declare:
        kind:                   ValueKind tag
        byte_width:             fixed text width in bytes, None if unbounded
        accepts_integer_literal whether structured input may be a bare int
    """

    kind: ClassVar[ValueKind]
    byte_width: ClassVar[Optional[int]] = None
    # Only Felt sets this. The wide kinds take text alone, since JSON numbers
    # above 2**53 lose precision in most producers.
    accepts_integer_literal: ClassVar[bool] = False

    @classmethod
    @abstractmethod
    def n_fields(cls) -> int:
        """Number of cells occupied inline."""

    @classmethod
    @abstractmethod
    def from_bytes_be(cls: Type[V], data: bytes) -> V:
        """Build a value from big-endian bytes."""

    @classmethod
    @abstractmethod
    def from_memory(cls: Type[V], memory: VMMemory, address: Relocatable) -> V:
        """Read the value stored at ``address``."""

    @abstractmethod
    def to_memory(self, memory: VMMemory, address: Relocatable) -> Relocatable:
        """Write the value at ``address`` and return the next free address."""

    @abstractmethod
    def to_text(self) -> str:
        """Canonical text form."""

    @classmethod
    def decode(cls: Type[V], memory: VMMemory, address: Relocatable) -> Tuple[V, Relocatable]:
        """Read the value and return it with the address just past it."""
        value = cls.from_memory(memory, address)
        next_address = address + cls.n_fields()
        logger.debug("Decoded value", operation="decode", kind=cls.kind.value,
                     address=str(address), text=value.to_text())
        return value, next_address

    def encode(self, memory: VMMemory, address: Relocatable) -> Relocatable:
        """Write the value; returns ``address + n_fields()``."""
        next_address = self.to_memory(memory, address)
        logger.debug("Encoded value", operation="encode", kind=self.kind.value,
                     address=str(address), text=self.to_text())
        return next_address

    @classmethod
    def from_text(cls: Type[V], text: str) -> V:
        """Parse configuration text (hex or decimal)."""
        return cls.from_bytes_be(parse_hex_or_decimal(text, cls.byte_width))

    @classmethod
    def parse(cls: Type[V], value: Any, field_name: str = "value") -> V:
        """Parse structured input: text, or for some kinds a non-negative int."""
        text = coerce_text(value, allow_integer=cls.accepts_integer_literal, field_name=field_name)
        try:
            return cls.from_text(text)
        except ParseError as e:
            if e.field == field_name:
                raise
            if isinstance(e, ValueOverflowError):
                raise ValueOverflowError(field_name, e.width, e.actual, value) from e
            raise ParseError(field_name, e.message, value) from e

    def __str__(self) -> str:
        return self.to_text()


def _read_int(memory: VMMemory, address: Relocatable) -> int:
    value = memory.get_integer(address)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < FIELD_PRIME:
        raise MemoryFault(str(address), "Cell value is not a field element", value)
    return value


# =============================================================================
# SCALAR FIELD VALUE
# =============================================================================

@dataclass(frozen=True)
class Felt(ValueType):
    """
    Single field element, the VM's atomic unit.

    The wrapped integer is reduced modulo FIELD_PRIME on construction, so
    ``Felt(FIELD_PRIME + 1) == Felt(1)``.
    """
    value: int

    kind: ClassVar[ValueKind] = ValueKind.FELT
    byte_width: ClassVar[Optional[int]] = None
    accepts_integer_literal: ClassVar[bool] = True

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ParseError("felt", f"Expected int, got {type(self.value).__name__}", self.value)
        object.__setattr__(self, "value", self.value % FIELD_PRIME)

    @classmethod
    def n_fields(cls) -> int:
        return 1

    @classmethod
    def from_bytes_be(cls, data: bytes) -> "Felt":
        return cls(int.from_bytes(data, 'big'))

    @classmethod
    def from_memory(cls, memory: VMMemory, address: Relocatable) -> "Felt":
        return cls(_read_int(memory, address))

    def to_memory(self, memory: VMMemory, address: Relocatable) -> Relocatable:
        memory.insert_value(address, self.value)
        return address + 1

    def to_bytes_be(self) -> bytes:
        return self.value.to_bytes(32, 'big')

    def to_text(self) -> str:
        return canonical_hex(self.value, 32)

    def __int__(self) -> int:
        return self.value


# =============================================================================
# MULTI-LIMB INTEGERS
# =============================================================================

@dataclass(frozen=True)
class _BoundedUint(ValueType):
    """Unsigned integer limited to ``8 * byte_width`` bits."""
    value: int

    byte_width: ClassVar[Optional[int]] = 32

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ParseError(self.kind.value, f"Expected int, got {type(self.value).__name__}", self.value)
        if self.value < 0:
            raise ParseError(self.kind.value, "Negative values not supported", self.value)
        actual = (self.value.bit_length() + 7) // 8
        if actual > self.byte_width:
            raise ValueOverflowError(self.kind.value, self.byte_width, actual, self.value)

    @classmethod
    def from_bytes_be(cls, data: bytes):
        return cls(int.from_bytes(data, 'big'))

    @classmethod
    def _read_limbs(cls, memory: VMMemory, address: Relocatable, count: int, bits: int) -> List[int]:
        """Read ``count`` cells, each of which must fit in ``bits`` bits."""
        limbs = []
        for i in range(count):
            limb = _read_int(memory, address + i)
            if limb >> bits:
                raise MemoryFault(
                    str(address + i),
                    f"Limb {i} of {cls.kind.value} is wider than {bits} bits",
                    limb,
                )
            limbs.append(limb)
        return limbs

    def to_bytes_be(self) -> bytes:
        return self.value.to_bytes(self.byte_width, 'big')

    def to_text(self) -> str:
        return canonical_hex(self.value, self.byte_width)

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True)
class Uint256(_BoundedUint):
    """256-bit integer as two 128-bit limbs, low limb first."""

    kind: ClassVar[ValueKind] = ValueKind.UINT256
    byte_width: ClassVar[Optional[int]] = 32

    LIMB_BITS: ClassVar[int] = 128

    @classmethod
    def n_fields(cls) -> int:
        return 2

    @classmethod
    def from_limbs(cls, low: int, high: int) -> "Uint256":
        return cls(high << cls.LIMB_BITS | low)

    def to_limbs(self) -> Tuple[int, int]:
        """(low, high)"""
        mask = (1 << self.LIMB_BITS) - 1
        return self.value & mask, self.value >> self.LIMB_BITS

    @classmethod
    def from_memory(cls, memory: VMMemory, address: Relocatable) -> "Uint256":
        low, high = cls._read_limbs(memory, address, 2, cls.LIMB_BITS)
        return cls.from_limbs(low, high)

    def to_memory(self, memory: VMMemory, address: Relocatable) -> Relocatable:
        low, high = self.to_limbs()
        memory.insert_value(address + 0, low)
        memory.insert_value(address + 1, high)
        return address + 2


@dataclass(frozen=True)
class Uint256Bits32(_BoundedUint):
    """
    256-bit integer as eight 32-bit limbs, most significant limb first.

    Cell ``a+0`` holds bits 255..224 and cell ``a+7`` holds bits 31..0,
    matching the word order of SHA-256 style state arrays.
    """

    kind: ClassVar[ValueKind] = ValueKind.UINT256_BITS32
    byte_width: ClassVar[Optional[int]] = 32

    LIMB_BITS: ClassVar[int] = 32
    LIMB_COUNT: ClassVar[int] = 8

    @classmethod
    def n_fields(cls) -> int:
        return cls.LIMB_COUNT

    @classmethod
    def from_limbs(cls, limbs: List[int]) -> "Uint256Bits32":
        if len(limbs) != cls.LIMB_COUNT:
            raise ParseError("limbs", f"Expected {cls.LIMB_COUNT} limbs, got {len(limbs)}", limbs)
        value = 0
        for limb in limbs:
            value = (value << cls.LIMB_BITS) | limb
        return cls(value)

    def to_limbs(self) -> List[int]:
        mask = (1 << self.LIMB_BITS) - 1
        return [
            (self.value >> ((self.LIMB_COUNT - 1 - i) * self.LIMB_BITS)) & mask
            for i in range(self.LIMB_COUNT)
        ]

    @classmethod
    def from_memory(cls, memory: VMMemory, address: Relocatable) -> "Uint256Bits32":
        return cls.from_limbs(cls._read_limbs(memory, address, cls.LIMB_COUNT, cls.LIMB_BITS))

    def to_memory(self, memory: VMMemory, address: Relocatable) -> Relocatable:
        for i, limb in enumerate(self.to_limbs()):
            memory.insert_value(address + i, limb)
        return address + self.LIMB_COUNT


@dataclass(frozen=True)
class UInt384(_BoundedUint):
    """
    384-bit integer as four 96-bit limbs.

    The value is cut into 12-byte groups of its 48-byte big-endian form;
    the least significant group goes to ``a+0``.
    """

    kind: ClassVar[ValueKind] = ValueKind.UINT384
    byte_width: ClassVar[Optional[int]] = 48

    LIMB_BYTES: ClassVar[int] = 12

    @classmethod
    def n_fields(cls) -> int:
        return 4

    @classmethod
    def from_limbs(cls, d0: int, d1: int, d2: int, d3: int) -> "UInt384":
        return cls(d3 << 288 | d2 << 192 | d1 << 96 | d0)

    def to_limbs(self) -> Tuple[int, int, int, int]:
        """(d0, d1, d2, d3), least significant first."""
        padded = self.to_bytes_be()
        groups = [
            int.from_bytes(padded[i:i + self.LIMB_BYTES], 'big')
            for i in range(0, 48, self.LIMB_BYTES)
        ]
        return groups[3], groups[2], groups[1], groups[0]

    @classmethod
    def from_memory(cls, memory: VMMemory, address: Relocatable) -> "UInt384":
        return cls.from_limbs(*cls._read_limbs(memory, address, 4, cls.LIMB_BYTES * 8))

    def to_memory(self, memory: VMMemory, address: Relocatable) -> Relocatable:
        for i, limb in enumerate(self.to_limbs()):
            memory.insert_value(address + i, limb)
        return address + 4


# =============================================================================
# SEGMENT-PACKED BYTE BUFFER
# =============================================================================

@dataclass(frozen=True)
class KeccakBytes(ValueType):
    """
    Arbitrary-length byte buffer stored out of line.

    The bytes are packed into 8-byte little-endian words (the layout the
    Keccak routine consumes) and written to a freshly allocated segment;
    only the pointer to that segment is stored inline.
    """
    data: bytes

    kind: ClassVar[ValueKind] = ValueKind.KECCAK_BYTES
    byte_width: ClassVar[Optional[int]] = None
    accepts_integer_literal: ClassVar[bool] = False

    def __post_init__(self):
        if isinstance(self.data, (bytearray, memoryview)):
            object.__setattr__(self, "data", bytes(self.data))
        elif not isinstance(self.data, bytes):
            raise ParseError("keccak_bytes", f"Expected bytes, got {type(self.data).__name__}", self.data)

    @classmethod
    def n_fields(cls) -> int:
        return 1

    @classmethod
    def from_bytes_be(cls, data: bytes) -> "KeccakBytes":
        return cls(data)

    @classmethod
    def from_text(cls, text: str) -> "KeccakBytes":
        # Byte buffers are always hex; "1234" is two bytes, not a number
        return cls(hex_bytes_padded(text))

    @classmethod
    def from_words(cls, words: List[int], length: Optional[int] = None) -> "KeccakBytes":
        data = b"".join(word.to_bytes(WORD_BYTES, 'little') for word in words)
        if length is not None:
            if length > len(data):
                raise MemoryFault("length", f"Length {length} exceeds {len(words)} words", length)
            data = data[:length]
        return cls(data)

    def to_limbs(self) -> List[int]:
        """The buffer as little-endian u64 words, last word zero-padded."""
        return [
            int.from_bytes(self.data[i:i + WORD_BYTES].ljust(WORD_BYTES, b'\x00'), 'little')
            for i in range(0, len(self.data), WORD_BYTES)
        ]

    @classmethod
    def read_pointer(cls, memory: VMMemory, address: Relocatable) -> Relocatable:
        """Base of the segment holding the words, without reading them."""
        return memory.get_relocatable(address)

    @classmethod
    def from_memory(
        cls,
        memory: VMMemory,
        address: Relocatable,
        length: Optional[int] = None,
    ) -> "KeccakBytes":
        """
        Materialize the buffer behind the pointer at ``address``.

        The byte length is not stored in memory. With ``length`` given,
        exactly ``ceil(length / 8)`` words are read and the result is
        trimmed to ``length`` bytes; without it, every word in the segment
        is read and the result is a whole number of words.
        """
        return cls.from_segment(memory, cls.read_pointer(memory, address), length)

    @classmethod
    def from_segment(
        cls,
        memory: VMMemory,
        base: Relocatable,
        length: Optional[int] = None,
    ) -> "KeccakBytes":
        """Read the words starting at ``base``; see ``from_memory``."""
        if length is None:
            n_words = memory.segment_used_size(base.segment_index) - base.offset
        else:
            if length < 0:
                raise MemoryFault("length", "Negative length", length)
            n_words = -(-length // WORD_BYTES)
        words = [_read_int(memory, base + i) for i in range(max(n_words, 0))]
        return cls.from_words(words, length)

    @classmethod
    def decode(
        cls,
        memory: VMMemory,
        address: Relocatable,
        length: Optional[int] = None,
        materialize: bool = False,
    ) -> Tuple[Union["KeccakBytes", "KeccakBytesRef"], Relocatable]:
        """
        Read the pointer cell at ``address``.

        Returns a ``KeccakBytesRef`` unless ``length`` is given or
        ``materialize`` is set, in which case the words are read too.
        """
        if length is None and not materialize:
            ref = KeccakBytesRef(cls.read_pointer(memory, address))
            logger.debug("Decoded value", operation="decode", kind=cls.kind.value,
                         address=str(address), pointer=str(ref.pointer))
            return ref, address + 1
        value = cls.from_memory(memory, address, length)
        logger.debug("Decoded value", operation="decode", kind=cls.kind.value,
                     address=str(address), length=len(value.data))
        return value, address + 1

    def to_memory(self, memory: VMMemory, address: Relocatable) -> Relocatable:
        segment = memory.add_memory_segment()
        for i, word in enumerate(self.to_limbs()):
            memory.insert_value(segment + i, word)
        memory.insert_value(address, segment)
        return address + 1

    def to_text(self) -> str:
        return canonical_hex(self.data)

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class KeccakBytesRef:
    """Pointer to a packed byte buffer whose words have not been read yet."""
    pointer: Relocatable

    def materialize(self, memory: VMMemory, length: Optional[int] = None) -> KeccakBytes:
        return KeccakBytes.from_segment(memory, self.pointer, length)


# =============================================================================
# REGISTRY
# =============================================================================

VALUE_TYPES: Dict[ValueKind, Type[ValueType]] = {
    ValueKind.FELT: Felt,
    ValueKind.UINT256: Uint256,
    ValueKind.UINT256_BITS32: Uint256Bits32,
    ValueKind.UINT384: UInt384,
    ValueKind.KECCAK_BYTES: KeccakBytes,
}


def value_type(kind: Union[str, ValueKind]) -> Type[ValueType]:
    """Look up the class for a kind tag (``"uint256"`` or ``ValueKind.UINT256``)."""
    if isinstance(kind, str):
        try:
            kind = ValueKind(kind.lower())
        except ValueError:
            valid = ", ".join(k.value for k in ValueKind)
            raise ParseError("kind", f"Unknown value kind (expected one of: {valid})", kind)
    return VALUE_TYPES[kind]
