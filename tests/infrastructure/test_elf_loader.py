#!/usr/bin/env python3

"""Tests for ElfLoader."""

from pathlib import Path
from unittest.mock import MagicMock, Mock

import pytest
from elftools.elf.sections import SymbolTableSection

from dwarf_symbol_resolver.domain.exceptions import LoadError
from dwarf_symbol_resolver.infrastructure.elf_loader import ElfLoader


def make_section(name: str, address: int, size: int) -> MagicMock:
    section = MagicMock()
    section.name = name
    section.__getitem__.side_effect = {"sh_addr": address, "sh_size": size}.__getitem__
    return section


def make_symbol(
    name: str,
    value: int,
    bind: str = "STB_GLOBAL",
    sym_type: str = "STT_OBJECT",
    shndx: object = 3,
) -> MagicMock:
    symbol = MagicMock()
    symbol.name = name
    symbol.__getitem__.side_effect = {
        "st_info": {"bind": bind, "type": sym_type},
        "st_shndx": shndx,
        "st_value": value,
    }.__getitem__
    return symbol


@pytest.fixture
def loader() -> ElfLoader:
    """Loader with a mocked ELFFile in place of an opened file."""
    loader = ElfLoader(Path("firmware.elf"))
    loader.elf_file = Mock()
    return loader


class TestOpen:
    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "missing.elf"

        with pytest.raises(LoadError, match="could not open file") as exc_info:
            ElfLoader(path).open()

        assert exc_info.value.path == path

    @pytest.mark.unit
    def test_not_an_elf_file(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_bytes(b"definitely not an ELF file")

        with pytest.raises(LoadError, match="Failed to parse file"):
            with ElfLoader(path):
                pass

    @pytest.mark.unit
    def test_requires_open(self) -> None:
        with pytest.raises(RuntimeError, match="not opened"):
            ElfLoader(Path("firmware.elf")).get_sections()


class TestLoadDwarfInfo:
    @pytest.mark.unit
    def test_missing_debug_info(self, loader: ElfLoader) -> None:
        loader.elf_file.get_section_by_name.return_value = None

        with pytest.raises(LoadError, match="The section .debug_info is missing"):
            loader.load_dwarf_info()

    @pytest.mark.unit
    def test_zero_compile_units(self, loader: ElfLoader) -> None:
        loader.elf_file.get_dwarf_info.return_value.iter_CUs.return_value = iter([])

        with pytest.raises(LoadError, match="zero compile units contain debug info"):
            loader.load_dwarf_info()

    @pytest.mark.unit
    def test_returns_dwarf_info(self, loader: ElfLoader) -> None:
        dwarf_info = loader.elf_file.get_dwarf_info.return_value
        dwarf_info.iter_CUs.side_effect = lambda: iter([Mock(), Mock()])

        assert loader.load_dwarf_info() is dwarf_info


class TestSectionsAndSymbols:
    @pytest.mark.unit
    def test_sections(self, loader: ElfLoader) -> None:
        loader.elf_file.iter_sections.return_value = [
            make_section("", 0, 0),
            make_section(".text", 0x1000, 0x200),
            make_section(".debug_info", 0, 0x4000),
            make_section(".bss", 0x8000, 0x100),
        ]

        assert loader.get_sections() == {".text": (0x1000, 0x1200), ".bss": (0x8000, 0x8100)}

    @pytest.mark.unit
    def test_symbol_table_keeps_global_data(self, loader: ElfLoader) -> None:
        symtab = Mock(spec=SymbolTableSection)
        symtab.iter_symbols.return_value = [
            make_symbol("counter", 0x2000),
            make_symbol("shared", 0x2100, sym_type="STT_COMMON"),
            make_symbol("weak_data", 0x2200, bind="STB_WEAK"),
            make_symbol("local_data", 0x2300, bind="STB_LOCAL"),
            make_symbol("main", 0x400, sym_type="STT_FUNC"),
            make_symbol("extern_data", 0, shndx="SHN_UNDEF"),
            make_symbol("at_zero", 0),
            make_symbol("", 0x2400),
        ]
        loader.elf_file.iter_sections.return_value = [make_section(".text", 0x1000, 4), symtab]

        assert loader.get_symbol_table() == {
            "counter": 0x2000,
            "shared": 0x2100,
            "weak_data": 0x2200,
        }


@pytest.mark.integration
def test_open_real_elf(elf_file_path: Path) -> None:
    with ElfLoader(elf_file_path) as loader:
        assert loader.load_dwarf_info() is not None
        assert loader.get_sections()
    assert loader.elf_file is None
