#!/usr/bin/env python3

"""Type graph nodes.

A :class:`TypeInfo` wraps one of the ``*Type`` variants below. The type map
in :class:`DebugData` is keyed by the DIE offset each node was built from.

Sub-structure without an identity of its own (array elements, bitfield
storage types) is owned by the node. Named aggregates used as members or
bases are stored as :class:`TypeRef` and looked up again through
:meth:`TypeInfo.get_reference`, which keeps self-referential types finite.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class ScalarKind(Enum):
    """Scalar base types and their byte sizes."""

    SINT8 = ("sint8", 1)
    SINT16 = ("sint16", 2)
    SINT32 = ("sint32", 4)
    SINT64 = ("sint64", 8)
    UINT8 = ("uint8", 1)
    UINT16 = ("uint16", 2)
    UINT32 = ("uint32", 4)
    UINT64 = ("uint64", 8)
    FLOAT = ("float", 4)
    DOUBLE = ("double", 8)
    BOOL = ("bool", 1)

    @property
    def type_name(self) -> str:
        return self.value[0]

    @property
    def size(self) -> int:
        return self.value[1]

    @classmethod
    def signed_of_size(cls, byte_size: int) -> ScalarKind | None:
        return _SIGNED_BY_SIZE.get(byte_size)

    @classmethod
    def unsigned_of_size(cls, byte_size: int) -> ScalarKind | None:
        return _UNSIGNED_BY_SIZE.get(byte_size)


_SIGNED_BY_SIZE = {
    1: ScalarKind.SINT8,
    2: ScalarKind.SINT16,
    4: ScalarKind.SINT32,
    8: ScalarKind.SINT64,
}
_UNSIGNED_BY_SIZE = {
    1: ScalarKind.UINT8,
    2: ScalarKind.UINT16,
    4: ScalarKind.UINT32,
    8: ScalarKind.UINT64,
}


@dataclass(frozen=True)
class ScalarType:
    kind: ScalarKind

    @property
    def size(self) -> int:
        return self.kind.size


@dataclass(frozen=True)
class PointerType:
    """Pointer or reference; the pointee is never expanded."""

    size: int
    target: int | None = None


@dataclass(frozen=True)
class ArrayType:
    """Array with its dimensions flattened, outermost first."""

    element: TypeInfo
    dims: tuple[int, ...]
    size: int
    stride: int


@dataclass(frozen=True)
class RecordType:
    """Common base of struct, union and class layouts.

    ``members`` maps member name to ``(type, byte offset)`` in declaration order.
    """

    members: dict[str, tuple[TypeInfo, int]]
    size: int


@dataclass(frozen=True)
class StructType(RecordType):
    pass


@dataclass(frozen=True)
class UnionType(RecordType):
    pass


@dataclass(frozen=True)
class ClassType(RecordType):
    """Class layout with its direct base classes.

    ``inherited_members`` names the entries of ``members`` that were copied
    from base classes (offset already adjusted).
    """

    inheritance: dict[str, tuple[TypeInfo, int]] = field(default_factory=dict)
    inherited_members: frozenset[str] = frozenset()


@dataclass(frozen=True)
class EnumType:
    size: int
    signed: bool
    enumerators: dict[str, int]


@dataclass(frozen=True)
class BitfieldType:
    """Bitfield inside a storage unit.

    The storage unit's byte offset is the offset recorded with the member;
    ``bit_offset`` counts from the least significant bit of that unit.
    """

    basetype: TypeInfo
    bit_offset: int
    bit_size: int


@dataclass(frozen=True)
class TypeRef:
    """Reference by offset key to a node that lives in the type map."""

    offset: int
    size: int


DbgDataType = Union[
    ScalarType,
    PointerType,
    ArrayType,
    StructType,
    UnionType,
    ClassType,
    EnumType,
    BitfieldType,
    TypeRef,
]

# Leaves of the type graph: resolution cannot descend into them
LEAF_TYPES = (ScalarType, PointerType, EnumType, BitfieldType)


@dataclass(frozen=True)
class TypeInfo:
    """A node of the type graph."""

    datatype: DbgDataType
    name: str | None = None
    unit_idx: int = -1
    dbginfo_offset: int = 0

    def get_size(self) -> int:
        """Size of the type in bytes."""
        datatype = self.datatype
        if isinstance(datatype, BitfieldType):
            return datatype.basetype.get_size()
        return datatype.size

    def get_reference(self, types: Mapping[int, TypeInfo]) -> TypeInfo:
        """Follow a :class:`TypeRef` into ``types``; other nodes return themselves."""
        if isinstance(self.datatype, TypeRef):
            return types.get(self.datatype.offset, self)
        return self

    def is_leaf(self) -> bool:
        return isinstance(self.datatype, LEAF_TYPES)

    def describe(self) -> str:
        """Short human readable description, e.g. ``struct foo`` or ``uint32[2][3]``."""
        datatype = self.datatype
        if isinstance(datatype, ScalarType):
            return self.name or datatype.kind.type_name
        if isinstance(datatype, PointerType):
            return self.name or "pointer"
        if isinstance(datatype, ArrayType):
            dims = "".join(f"[{dim}]" for dim in datatype.dims)
            return f"{datatype.element.describe()}{dims}"
        if isinstance(datatype, BitfieldType):
            return f"{datatype.basetype.describe()}:{datatype.bit_size}"
        if isinstance(datatype, TypeRef):
            return self.name or f"<type@0x{datatype.offset:x}>"

        keyword = {
            ClassType: "class",
            StructType: "struct",
            UnionType: "union",
            EnumType: "enum",
        }[type(datatype)]
        return f"{keyword} {self.name}" if self.name else f"{keyword} <anonymous>"
