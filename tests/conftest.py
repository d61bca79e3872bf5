"""Pytest configuration and shared fixtures."""

import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, Mock

import pytest
from elftools.dwarf.structs import DWARFStructs

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from dwarf_symbol_resolver.domain.models.dwarf import (
    ArrayType,
    ClassType,
    DebugData,
    PointerType,
    ScalarKind,
    ScalarType,
    StructType,
    TypeInfo,
    TypeRef,
    VarInfo,
)
from dwarf_symbol_resolver.infrastructure.config import Config

# Attributes whose value is a reference to another DIE
REFERENCE_ATTRIBUTES = frozenset(
    {"DW_AT_type", "DW_AT_specification", "DW_AT_abstract_origin"}
)
STRING_ATTRIBUTES = frozenset({"DW_AT_name", "DW_AT_linkage_name", "DW_AT_MIPS_linkage_name"})


class MockDwarf:
    """Builds a single compile unit of mocked pyelftools DIEs.

    DIEs are registered by absolute offset. Reference attributes are given
    as absolute offsets and stored CU-relative with DW_FORM_ref4, the way
    pyelftools reports them.
    """

    def __init__(self, little_endian: bool = True, address_size: int = 4, cu_offset: int = 0):
        self.dies: dict[int, Mock] = {}
        self.root: Mock | None = None

        self.cu = MagicMock()
        self.cu.cu_offset = cu_offset
        self.cu.structs = DWARFStructs(
            little_endian=little_endian, dwarf_format=32, address_size=address_size
        )
        self.cu.__getitem__.side_effect = {"address_size": address_size, "version": 4}.__getitem__
        self.cu.iter_DIEs.side_effect = lambda: self._iter_subtree(self.root)

        self.dwarf_info = Mock()
        self.dwarf_info.config.little_endian = little_endian
        self.dwarf_info.get_DIE_from_refaddr.side_effect = self.dies.__getitem__
        self.dwarf_info.iter_CUs.side_effect = lambda: iter([self.cu])

    def _make_attribute(self, name: str, value: Any) -> Mock:
        if name in REFERENCE_ATTRIBUTES:
            return Mock(value=value - self.cu.cu_offset, form="DW_FORM_ref4")
        if name in STRING_ATTRIBUTES:
            return Mock(value=value.encode("utf-8"), form="DW_FORM_strp")
        if name == "DW_AT_location":
            return Mock(value=list(value), form="DW_FORM_exprloc")
        if name in ("DW_AT_declaration", "DW_AT_external"):
            return Mock(value=bool(value), form="DW_FORM_flag_present")
        return Mock(value=value, form="DW_FORM_data4")

    def die(self, tag: str, offset: int, children: list[Mock] | None = None, **attrs: Any) -> Mock:
        """Create and register a DIE; ``attrs`` use the DW_AT_ names without prefix."""
        children = children or []
        die = Mock()
        die.tag = tag
        die.offset = offset
        die.cu = self.cu
        die.dwarfinfo = self.dwarf_info
        die.has_children = bool(children)
        die.is_null.return_value = False
        die.attributes = {
            f"DW_AT_{key}": self._make_attribute(f"DW_AT_{key}", value)
            for key, value in attrs.items()
        }
        die.iter_children.side_effect = lambda: iter(children)
        die.get_DIE_from_attribute.side_effect = lambda attr_name: self.dies[
            die.attributes[attr_name].value + self.cu.cu_offset
        ]
        die.children = children
        self.dies[offset] = die
        return die

    def compile_unit(self, name: str | None, children: list[Mock]) -> Mock:
        attrs = {"name": name} if name is not None else {}
        self.root = self.die("DW_TAG_compile_unit", self.cu.cu_offset + 0xB, children, **attrs)
        return self.root

    def _iter_subtree(self, die: Mock | None) -> Iterator[Mock]:
        if die is None:
            return
        yield die
        if die.has_children:
            for child in die.children:
                yield from self._iter_subtree(child)
            null = Mock()
            null.is_null.return_value = True
            yield null


def addr_expr(address: int, size: int = 4) -> list[int]:
    """DW_OP_addr expression for a little endian target."""
    return [0x03, *address.to_bytes(size, "little")]


@pytest.fixture
def mock_dwarf() -> MockDwarf:
    return MockDwarf()


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config() -> Config:
    """Load configuration from environment."""
    return Config.from_env()


@pytest.fixture(scope="session")
def elf_file_path(config: Config) -> Path:
    """
    Return path to ELF file, skipping test if not available.
    """
    if not config.elf_file_path.exists():
        pytest.skip(f"ELF file not found at {config.elf_file_path}")
    return config.elf_file_path


# Offsets of the types in the sample debug data
UINT8, UINT16, UINT32 = 0x10, 0x11, 0x12
ARR, MATRIX = 0x20, 0x21
INNER, MY_STRUCT = 0x30, 0x40
BASE, DERIVED = 0x50, 0x60
STRUCT_PTR, INNER_ARRAY = 0x70, 0x80


def build_sample_debug_data() -> DebugData:
    """Hand-built snapshot of a small C/C++ program.

    ::

        uint32 arr[2];                      // 0x1234, file1.c
        struct my_struct {                  // 0xcafe00, file1.c
            uint8 a; uint32 b; struct inner { uint32 x, y; } in;
            uint16 matrix[10][7];
        } my_struct;
        static uint32 var;                  // 0 in file1.c; 1000 in init() and
                                            // 2000 in namespace app, file2.c
        class Derived : Base { uint32 own; } obj;   // 0x3000
        struct my_struct *ptr;              // 0x4000
        struct inner structs[3];            // 0x5000
        namespace ns { uint32 x; my_struct cfg; }   // 0x6000, 0x7000
    """
    uint8 = TypeInfo(ScalarType(ScalarKind.UINT8), "uint8", 0, UINT8)
    uint16 = TypeInfo(ScalarType(ScalarKind.UINT16), "uint16", 0, UINT16)
    uint32 = TypeInfo(ScalarType(ScalarKind.UINT32), "uint32", 0, UINT32)
    inner = TypeInfo(
        StructType(members={"x": (uint32, 0), "y": (uint32, 4)}, size=8), "inner", 0, INNER
    )
    base = TypeInfo(ClassType(members={"base_val": (uint32, 0)}, size=4), "Base", 1, BASE)

    types = {
        UINT8: uint8,
        UINT16: uint16,
        UINT32: uint32,
        ARR: TypeInfo(ArrayType(uint32, (2,), 8, 4), None, 0, ARR),
        MATRIX: TypeInfo(ArrayType(uint16, (10, 7), 140, 2), None, 0, MATRIX),
        INNER: inner,
        MY_STRUCT: TypeInfo(
            StructType(
                members={
                    "a": (uint8, 0),
                    "b": (uint32, 4),
                    "in": (TypeInfo(TypeRef(INNER, 8), "inner", 0, INNER), 8),
                    "matrix": (TypeInfo(ArrayType(uint16, (10, 7), 140, 2), None, 0, MATRIX), 16),
                },
                size=156,
            ),
            "my_struct",
            0,
            MY_STRUCT,
        ),
        BASE: base,
        DERIVED: TypeInfo(
            ClassType(
                members={"own": (uint32, 4), "base_val": (uint32, 0)},
                size=8,
                inheritance={"Base": (TypeInfo(TypeRef(BASE, 4), "Base", 1, BASE), 0)},
                inherited_members=frozenset({"base_val"}),
            ),
            "Derived",
            1,
            DERIVED,
        ),
        STRUCT_PTR: TypeInfo(PointerType(4, MY_STRUCT), None, 0, STRUCT_PTR),
        INNER_ARRAY: TypeInfo(ArrayType(inner, (3,), 24, 8), None, 0, INNER_ARRAY),
    }

    variables = {
        "arr": [VarInfo(0x1234, ARR, 0)],
        "my_struct": [VarInfo(0xCAFE00, MY_STRUCT, 0)],
        "var": [
            VarInfo(0, UINT32, 0),
            VarInfo(1000, UINT32, 1, function="init"),
            VarInfo(2000, UINT32, 1, namespaces=("app",)),
        ],
        "obj": [VarInfo(0x3000, DERIVED, 1)],
        "ptr": [VarInfo(0x4000, STRUCT_PTR, 0)],
        "structs": [VarInfo(0x5000, INNER_ARRAY, 0)],
        "_ZN2ns1xE": [VarInfo(0x6000, UINT32, 1, namespaces=("ns",))],
        "_ZN2ns3cfgE": [VarInfo(0x7000, MY_STRUCT, 1, namespaces=("ns",))],
    }

    return DebugData(
        variables=variables,
        types=types,
        typenames={"uint8": UINT8, "uint16": UINT16, "uint32": UINT32, "inner": INNER},
        demangled_names={"ns::x": "_ZN2ns1xE", "ns::cfg": "_ZN2ns3cfgE"},
        unit_names=["src/file1.c", "lib/file2.c"],
        sections={".bss": (0x1000, 0x8000), ".data": (0xCAFE00, 0xCB0000)},
    )


@pytest.fixture
def debug_data() -> DebugData:
    return build_sample_debug_data()
