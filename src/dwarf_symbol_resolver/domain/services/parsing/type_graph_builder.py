#!/usr/bin/env python3

"""Builds the offset-keyed type graph from type DIEs.

:meth:`TypeGraphBuilder.get_type` turns the DIE at a type offset into a
:class:`TypeInfo` and memoizes it under that offset. Named aggregates that
appear as members or bases are stored as :class:`TypeRef` nodes, pointers
never expand their pointee, and an offset that is still being built is
returned as a reference. Together this keeps recursive types finite.
"""

from collections.abc import Mapping
from math import prod
from typing import Any

from elftools.common.exceptions import DWARFError, ELFError
from elftools.dwarf.die import DIE

from ....infrastructure.config import get_config
from ....infrastructure.logging import get_logger
from ...exceptions import DwarfAttributeError, TypeBuildError
from ...models.dwarf import (
    ArrayType,
    BitfieldType,
    ClassInfo,
    ClassType,
    DbgDataType,
    EnumType,
    PointerType,
    RecordType,
    ScalarKind,
    ScalarType,
    StructType,
    TypeInfo,
    TypeRef,
    UnionType,
)
from ...models.dwarf.tag_constants import (
    DW_ATE_BOOLEAN,
    DW_ATE_FLOAT,
    POINTER_TAGS,
    SIGNED_ENCODINGS,
    TRANSPARENT_TAGS,
    UNSIGNED_ENCODINGS,
)
from .array_parser import parse_array_dimensions
from .attributes import (
    decode_name,
    get_byte_size_attribute,
    get_data_member_location_attribute,
    get_declaration_attribute,
    get_external_attribute,
    get_name_attribute,
    get_typeref_attribute,
)

logger = get_logger(__name__)

Members = dict[str, tuple[TypeInfo, int]]

RECORD_TAGS = frozenset({"DW_TAG_structure_type", "DW_TAG_class_type", "DW_TAG_union_type"})


def _optional_name(die: DIE) -> str | None:
    try:
        return get_name_attribute(die)
    except DwarfAttributeError:
        return None


class TypeGraphBuilder:
    """Resolves type offsets into type nodes, building each offset once.

    Args:
        dwarf_info: pyelftools DWARFInfo used to fetch DIEs by offset
        class_table: Class scopes recorded by the variable walk
        unit_offsets: CU offset to unit index, for the owning unit of each node
        config: Extraction tunables, defaults to :func:`get_config`
    """

    def __init__(
        self,
        dwarf_info: Any,
        class_table: Mapping[int, ClassInfo] | None = None,
        unit_offsets: Mapping[int, int] | None = None,
        config: Mapping[str, Any] | None = None,
    ):
        self.dwarf_info = dwarf_info
        self.class_table = class_table or {}
        self.unit_offsets = unit_offsets or {}
        config = config if config is not None else get_config()
        self.merge_base_members = config["MERGE_BASE_MEMBERS"]
        self.default_int_size = config["DEFAULT_INT_SIZE"]
        self.little_endian = dwarf_info.config.little_endian

        self.types: dict[int, TypeInfo] = {}
        self.typenames: dict[str, int] = {}
        self._types_in_progress: set[int] = set()

        self._definitions: dict[tuple[str, str], int] = {}
        for offset, info in self.class_table.items():
            if not info.is_declaration:
                self._definitions.setdefault((info.namespace, info.name), offset)

    def resolve_declaration(self, offset: int) -> int:
        """Map a class/struct declaration offset onto its full definition.

        Offsets that are not declarations, or whose definition is not part of
        the debug info, are returned unchanged.
        """
        info = self.class_table.get(offset)
        if info is None or not info.is_declaration:
            return offset
        return self._definitions.get((info.namespace, info.name), offset)

    def get_type(self, offset: int) -> TypeInfo:
        """Return the type node for the type DIE at ``offset``.

        Raises:
            TypeBuildError: If the DIE cannot be read or lacks required attributes
        """
        cached = self.types.get(offset)
        if cached is not None:
            return cached

        die = self._get_die(offset)

        if offset in self._types_in_progress:
            logger.debug(f"Type at 0x{offset:x} references itself, storing a reference")
            return TypeInfo(
                TypeRef(offset, get_byte_size_attribute(die) or 0),
                _optional_name(die),
                self._unit_idx(die),
                offset,
            )

        self._types_in_progress.add(offset)
        try:
            typeinfo = self._build(die)
        except (DwarfAttributeError, DWARFError, ELFError) as e:
            raise TypeBuildError(f"Cannot build type at 0x{offset:x}: {e}") from e
        finally:
            self._types_in_progress.discard(offset)

        self.types[offset] = typeinfo
        if typeinfo.name is not None:
            self.typenames.setdefault(typeinfo.name, offset)
        return typeinfo

    def _get_die(self, offset: int) -> DIE:
        try:
            return self.dwarf_info.get_DIE_from_refaddr(offset)
        except (DWARFError, ELFError, KeyError, ValueError) as e:
            raise TypeBuildError(f"No DIE at offset 0x{offset:x}: {e}") from e

    def _unit_idx(self, die: DIE) -> int:
        return self.unit_offsets.get(die.cu.cu_offset, -1)

    def _build(self, die: DIE) -> TypeInfo:
        tag = die.tag
        name = _optional_name(die)

        if tag in TRANSPARENT_TAGS:
            return self._build_transparent(die, name)

        if tag in RECORD_TAGS and get_declaration_attribute(die):
            definition = self.resolve_declaration(die.offset)
            if definition != die.offset:
                return self.get_type(definition)

        datatype: DbgDataType
        if tag == "DW_TAG_base_type":
            datatype = self._build_base(die, name)
        elif tag in POINTER_TAGS:
            datatype = self._build_pointer(die)
        elif tag == "DW_TAG_array_type":
            datatype = self._build_array(die)
        elif tag in RECORD_TAGS:
            datatype = self._build_record(die)
        elif tag == "DW_TAG_enumeration_type":
            datatype = self._build_enum(die)
        else:
            logger.debug(f"Unsupported type tag {tag} at 0x{die.offset:x}, using an integer")
            datatype = ScalarType(self._default_int(get_byte_size_attribute(die)))

        return TypeInfo(datatype, name, self._unit_idx(die), die.offset)

    def _build_transparent(self, die: DIE, name: str | None) -> TypeInfo:
        # typedef/const/volatile of void; only reachable through pointers in valid code
        if "DW_AT_type" not in die.attributes:
            return TypeInfo(
                ScalarType(self._default_int(None)), name, self._unit_idx(die), die.offset
            )

        target = self.get_type(get_typeref_attribute(die))
        display_name = name if die.tag == "DW_TAG_typedef" else target.name
        return TypeInfo(target.datatype, display_name, self._unit_idx(die), die.offset)

    def _default_int(self, byte_size: int | None) -> ScalarKind:
        return (
            ScalarKind.unsigned_of_size(byte_size or 0)
            or ScalarKind.unsigned_of_size(self.default_int_size)
            or ScalarKind.UINT32
        )

    def _build_base(self, die: DIE, name: str | None) -> ScalarType:
        encoding_attr = die.attributes.get("DW_AT_encoding")
        encoding = encoding_attr.value if encoding_attr is not None else None
        byte_size = get_byte_size_attribute(die) or 0

        kind: ScalarKind | None = None
        if encoding in SIGNED_ENCODINGS:
            kind = ScalarKind.signed_of_size(byte_size)
        elif encoding in UNSIGNED_ENCODINGS:
            kind = ScalarKind.unsigned_of_size(byte_size)
        elif encoding == DW_ATE_FLOAT:
            kind = {4: ScalarKind.FLOAT, 8: ScalarKind.DOUBLE}.get(byte_size)
        elif encoding == DW_ATE_BOOLEAN:
            kind = ScalarKind.BOOL if byte_size == 1 else ScalarKind.unsigned_of_size(byte_size)

        if kind is None:
            logger.debug(
                f"Base type {name} at 0x{die.offset:x} has unsupported encoding "
                f"{encoding} / size {byte_size}"
            )
            kind = self._default_int(byte_size)
        return ScalarType(kind)

    def _build_pointer(self, die: DIE) -> PointerType:
        size = get_byte_size_attribute(die) or die.cu["address_size"]
        target = get_typeref_attribute(die) if "DW_AT_type" in die.attributes else None
        return PointerType(size=size, target=target)

    def _build_array(self, die: DIE) -> ArrayType:
        element = self.get_type(get_typeref_attribute(die))
        dims = parse_array_dimensions(die) or [0]

        stride_attr = die.attributes.get("DW_AT_byte_stride")
        bit_stride_attr = die.attributes.get("DW_AT_bit_stride")
        if isinstance(element.datatype, ArrayType):
            # array of arrays: fold into one dimension list
            inner = element.datatype
            dims = dims + list(inner.dims)
            stride = inner.stride
            element = inner.element
        elif stride_attr is not None and isinstance(stride_attr.value, int):
            stride = stride_attr.value
        elif bit_stride_attr is not None and isinstance(bit_stride_attr.value, int):
            stride = bit_stride_attr.value // 8
        else:
            stride = element.get_size()

        size = get_byte_size_attribute(die)
        if size is None:
            size = prod(dims) * stride
        return ArrayType(element=element, dims=tuple(dims), size=size, stride=stride)

    def _as_member_type(self, typeref: int, typeinfo: TypeInfo) -> TypeInfo:
        """Named aggregates are referenced by key; everything else is owned."""
        if isinstance(typeinfo.datatype, RecordType) and typeinfo.name is not None:
            return TypeInfo(
                TypeRef(typeref, typeinfo.get_size()),
                typeinfo.name,
                typeinfo.unit_idx,
                typeref,
            )
        return typeinfo

    def _build_record(self, die: DIE) -> RecordType:
        size = get_byte_size_attribute(die) or 0
        is_union = die.tag == "DW_TAG_union_type"
        members: Members = {}
        inheritance: Members = {}

        for child in die.iter_children():
            if child.tag == "DW_TAG_member":
                self._add_member(child, members, is_union)
            elif child.tag == "DW_TAG_inheritance":
                self._add_base(child, inheritance)

        if is_union:
            return UnionType(members=members, size=size)
        if die.tag == "DW_TAG_class_type" or inheritance:
            inherited = self._merge_base_members(members, inheritance)
            return ClassType(
                members=members,
                size=size,
                inheritance=inheritance,
                inherited_members=frozenset(inherited),
            )
        return StructType(members=members, size=size)

    def _merge_base_members(self, members: Members, inheritance: Members) -> list[str]:
        """Make base class members reachable on the derived class; own members win."""
        if not self.merge_base_members:
            return []

        inherited = []
        for base_ref, base_offset in inheritance.values():
            base = base_ref.get_reference(self.types).datatype
            if not isinstance(base, RecordType):
                continue
            for member_name, (member_type, member_offset) in base.members.items():
                if member_name not in members:
                    members[member_name] = (member_type, base_offset + member_offset)
                    inherited.append(member_name)
        return inherited

    def _add_member(self, member_die: DIE, members: Members, is_union: bool) -> None:
        # static data members live outside the object
        if get_external_attribute(member_die) or get_declaration_attribute(member_die):
            return

        name = _optional_name(member_die)
        try:
            typeref = get_typeref_attribute(member_die)
            membertype = self.get_type(typeref)
        except (DwarfAttributeError, TypeBuildError) as e:
            logger.debug(f"Skipping member {name} at 0x{member_die.offset:x}: {e}")
            return

        offset = get_data_member_location_attribute(member_die)
        if offset is None and not is_union and "DW_AT_data_bit_offset" not in member_die.attributes:
            logger.debug(f"Member {name} at 0x{member_die.offset:x} has no location, assuming 0")
        offset = offset or 0

        if "DW_AT_bit_size" in member_die.attributes:
            membertype, offset = self._build_bitfield(member_die, membertype, offset)
        elif name is None and isinstance(membertype.datatype, RecordType):
            # anonymous struct/union: its members belong to the parent
            for inner_name, (inner_type, inner_offset) in membertype.datatype.members.items():
                members.setdefault(inner_name, (inner_type, offset + inner_offset))
            return
        else:
            membertype = self._as_member_type(typeref, membertype)

        if name is None:
            logger.debug(f"Skipping unnamed member at 0x{member_die.offset:x}")
            return
        members[name] = (membertype, offset)

    def _build_bitfield(
        self, member_die: DIE, basetype: TypeInfo, member_offset: int
    ) -> tuple[TypeInfo, int]:
        """Return the bitfield node and the byte offset of its storage unit.

        The resulting bit offset counts from the least significant bit of the
        storage unit.
        """
        attributes = member_die.attributes
        bit_size = attributes["DW_AT_bit_size"].value
        storage_size = get_byte_size_attribute(member_die) or basetype.get_size() or 1
        storage_bits = storage_size * 8

        if "DW_AT_data_bit_offset" in attributes:
            # DWARF4+: bit position from the start of the enclosing object
            absolute = member_offset * 8 + attributes["DW_AT_data_bit_offset"].value
            storage_offset = (absolute // storage_bits) * storage_size
            bit_offset = absolute - storage_offset * 8
            if not self.little_endian:
                bit_offset = storage_bits - bit_offset - bit_size
        elif "DW_AT_bit_offset" in attributes:
            # DWARF2/3: distance from the most significant bit of the storage unit
            storage_offset = member_offset
            bit_offset = storage_bits - attributes["DW_AT_bit_offset"].value - bit_size
        else:
            storage_offset = member_offset
            bit_offset = 0

        bitfield = TypeInfo(
            BitfieldType(basetype=basetype, bit_offset=bit_offset, bit_size=bit_size),
            basetype.name,
            basetype.unit_idx,
            member_die.offset,
        )
        return bitfield, storage_offset

    def _add_base(self, inheritance_die: DIE, inheritance: Members) -> None:
        try:
            typeref = get_typeref_attribute(inheritance_die)
            basetype = self.get_type(typeref)
        except (DwarfAttributeError, TypeBuildError) as e:
            logger.debug(f"Skipping base class at 0x{inheritance_die.offset:x}: {e}")
            return

        offset = get_data_member_location_attribute(inheritance_die) or 0
        class_info = self.class_table.get(typeref)
        if class_info is not None and class_info.name != "unknown_class":
            name = class_info.name
        else:
            name = basetype.name or f"base_{offset}"

        inheritance[name] = (self._as_member_type(typeref, basetype), offset)

    def _build_enum(self, die: DIE) -> EnumType:
        underlying: TypeInfo | None = None
        if "DW_AT_type" in die.attributes:
            try:
                underlying = self.get_type(get_typeref_attribute(die))
            except TypeBuildError as e:
                logger.debug(f"Enum at 0x{die.offset:x} has unusable underlying type: {e}")

        size = get_byte_size_attribute(die)
        if size is None:
            size = underlying.get_size() if underlying is not None else 4

        enumerators: dict[str, int] = {}
        for child in die.iter_children():
            if child.tag != "DW_TAG_enumerator":
                continue
            name_attr = child.attributes.get("DW_AT_name")
            value_attr = child.attributes.get("DW_AT_const_value")
            if name_attr is None or value_attr is None:
                continue
            value = value_attr.value
            if isinstance(value, (bytes, bytearray, list)):
                value = int.from_bytes(
                    bytes(value), "little" if self.little_endian else "big", signed=True
                )
            enumerators[decode_name(name_attr.value)] = value

        if underlying is not None and isinstance(underlying.datatype, ScalarType):
            signed = underlying.datatype.kind.type_name.startswith("sint")
        else:
            signed = any(value < 0 for value in enumerators.values())

        return EnumType(size=size, signed=signed, enumerators=enumerators)
