#!/usr/bin/env python3

"""Unit tests for the type graph node models."""

import pytest

from dwarf_symbol_resolver.domain.models.dwarf import (
    ArrayType,
    BitfieldType,
    DebugData,
    EnumType,
    PointerType,
    ScalarKind,
    ScalarType,
    TypeInfo,
    TypeRef,
    UnionType,
)
from tests.conftest import INNER, MY_STRUCT


class TestScalarKind:
    @pytest.mark.unit
    def test_sizes(self) -> None:
        assert ScalarKind.UINT8.size == 1
        assert ScalarKind.SINT16.size == 2
        assert ScalarKind.FLOAT.size == 4
        assert ScalarKind.DOUBLE.size == 8
        assert ScalarKind.BOOL.type_name == "bool"

    @pytest.mark.unit
    def test_lookup_by_size(self) -> None:
        assert ScalarKind.signed_of_size(4) is ScalarKind.SINT32
        assert ScalarKind.unsigned_of_size(8) is ScalarKind.UINT64
        assert ScalarKind.unsigned_of_size(16) is None


class TestTypeInfo:
    @pytest.mark.unit
    def test_sizes(self) -> None:
        uint16 = TypeInfo(ScalarType(ScalarKind.UINT16))

        assert uint16.get_size() == 2
        assert TypeInfo(PointerType(8)).get_size() == 8
        assert TypeInfo(ArrayType(uint16, (3, 2), 12, 2)).get_size() == 12
        assert TypeInfo(BitfieldType(uint16, 3, 4)).get_size() == 2
        assert TypeInfo(TypeRef(0x40, 24)).get_size() == 24

    @pytest.mark.unit
    def test_leaves(self) -> None:
        assert TypeInfo(ScalarType(ScalarKind.UINT8)).is_leaf()
        assert TypeInfo(PointerType(4)).is_leaf()
        assert TypeInfo(EnumType(4, False, {})).is_leaf()
        assert not TypeInfo(UnionType({}, 4)).is_leaf()
        assert not TypeInfo(TypeRef(0x10, 4)).is_leaf()

    @pytest.mark.unit
    def test_get_reference(self, debug_data: DebugData) -> None:
        member_type, _ = debug_data.types[MY_STRUCT].datatype.members["in"]

        assert member_type.get_reference(debug_data.types) is debug_data.types[INNER]
        assert debug_data.types[INNER].get_reference(debug_data.types) is debug_data.types[INNER]

    @pytest.mark.unit
    def test_dangling_reference_returns_itself(self) -> None:
        ref = TypeInfo(TypeRef(0x999, 4))
        assert ref.get_reference({}) is ref

    @pytest.mark.unit
    def test_describe(self, debug_data: DebugData) -> None:
        uint8 = TypeInfo(ScalarType(ScalarKind.UINT8))

        assert uint8.describe() == "uint8"
        assert TypeInfo(ScalarType(ScalarKind.UINT8), "u8").describe() == "u8"
        assert TypeInfo(ArrayType(uint8, (4, 2), 8, 1)).describe() == "uint8[4][2]"
        assert TypeInfo(PointerType(4)).describe() == "pointer"
        assert TypeInfo(UnionType({}, 4)).describe() == "union <anonymous>"
        assert debug_data.types[MY_STRUCT].describe() == "struct my_struct"
        assert TypeInfo(TypeRef(0x30, 8)).describe() == "<type@0x30>"


class TestDebugData:
    @pytest.mark.unit
    def test_unit_names(self, debug_data: DebugData) -> None:
        assert debug_data.get_unit_name(1) == "lib/file2.c"
        assert debug_data.get_unit_name(5) is None
        assert debug_data.get_unit_name(-1) is None

    @pytest.mark.unit
    def test_find_section(self, debug_data: DebugData) -> None:
        assert debug_data.find_section(0x1234) == ".bss"
        assert debug_data.find_section(0xCAFE00) == ".data"
        assert debug_data.find_section(0x8000) is None
