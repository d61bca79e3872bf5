#!/usr/bin/env python3

"""DWARF extraction domain models."""

from .class_info import ClassInfo
from .debug_data import DebugData
from .symbol_info import SymbolInfo
from .type_info import (
    ArrayType,
    BitfieldType,
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
from .var_info import VarInfo

__all__ = [
    "ArrayType",
    "BitfieldType",
    "ClassInfo",
    "ClassType",
    "DbgDataType",
    "DebugData",
    "EnumType",
    "PointerType",
    "RecordType",
    "ScalarKind",
    "ScalarType",
    "StructType",
    "SymbolInfo",
    "TypeInfo",
    "TypeRef",
    "UnionType",
    "VarInfo",
]
