#!/usr/bin/env python3

"""ELF container access: DWARF info, section ranges and data symbols."""

from pathlib import Path
from types import TracebackType
from typing import IO, Any

from elftools.common.exceptions import DWARFError, ELFError, ELFParseError
from elftools.elf.elffile import ELFFile
from elftools.elf.sections import SymbolTableSection

from ..domain.exceptions import LoadError
from .logging import get_logger

logger = get_logger(__name__)

# Symbol types that describe data objects
DATA_SYMBOL_TYPES = frozenset({"STT_OBJECT", "STT_COMMON"})

ELF_ERRORS = (ELFError, ELFParseError, DWARFError)


class ElfLoader:
    """Opens an ELF file and exposes what the debug data reader needs.

    The file handle stays open for the lifetime of the loader because
    pyelftools reads section contents lazily. Use it as a context manager::

        with ElfLoader(path) as loader:
            dwarf_info = loader.load_dwarf_info()
    """

    def __init__(self, elf_path: Path) -> None:
        self.elf_path = Path(elf_path)
        self.elf_file: ELFFile | None = None
        self._file_handle: IO[bytes] | None = None

    def open(self) -> None:
        """Open the file and parse the ELF headers.

        Raises:
            LoadError: If the file cannot be read or is not an ELF file
        """
        try:
            self._file_handle = open(self.elf_path, "rb")
        except OSError as e:
            raise LoadError(
                self.elf_path, f"Error: could not open file {self.elf_path}: {e}"
            ) from e

        try:
            self.elf_file = ELFFile(self._file_handle)
        except ELF_ERRORS as e:
            self.close()
            raise LoadError(
                self.elf_path, f"Error: Failed to parse file '{self.elf_path}': {e}"
            ) from e

        logger.debug(
            f"Opened ELF file {self.elf_path} ({self.elf_file.get_machine_arch()}, "
            f"{'little' if self.elf_file.little_endian else 'big'} endian)"
        )

    def close(self) -> None:
        if self._file_handle is not None:
            self._file_handle.close()
            self._file_handle = None
        self.elf_file = None

    def __enter__(self) -> "ElfLoader":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def _require_elf(self) -> ELFFile:
        if self.elf_file is None:
            raise RuntimeError("ELF file not opened. Call open() first.")
        return self.elf_file

    def load_dwarf_info(self) -> Any:
        """Parse the DWARF sections.

        Raises:
            LoadError: If .debug_info is missing, unreadable or has no compile units
        """
        elf_file = self._require_elf()

        if elf_file.get_section_by_name(".debug_info") is None:
            raise LoadError(
                self.elf_path,
                f"Error: {self.elf_path} does not contain DWARF2+ debug info. "
                "The section .debug_info is missing.",
            )

        try:
            dwarf_info = elf_file.get_dwarf_info()
        except ELF_ERRORS as e:
            raise LoadError(
                self.elf_path, f"Error: Failed to load DWARF info from '{self.elf_path}': {e}"
            ) from e

        if self._count_units(dwarf_info) == 0:
            raise LoadError(
                self.elf_path,
                f"Error: {self.elf_path} does not contain DWARF2+ debug info - "
                "zero compile units contain debug info.",
            )

        return dwarf_info

    @staticmethod
    def _count_units(dwarf_info: Any) -> int:
        count = 0
        try:
            for _ in dwarf_info.iter_CUs():
                count += 1
        except ELF_ERRORS as e:
            logger.warning(f"Stopped reading compile units after {count}: {e}")
        return count

    def get_sections(self) -> dict[str, tuple[int, int]]:
        """Return ``name -> (start, end)`` for every section with an address and size."""
        sections = {}
        for section in self._require_elf().iter_sections():
            address = section["sh_addr"]
            size = section["sh_size"]
            if address != 0 and size != 0 and section.name:
                sections[section.name] = (address, address + size)
        return sections

    def get_symbol_table(self) -> dict[str, int]:
        """Return global, defined data symbols with a non-zero address."""
        symbols: dict[str, int] = {}
        for section in self._require_elf().iter_sections():
            if not isinstance(section, SymbolTableSection):
                continue
            for symbol in section.iter_symbols():
                if (
                    symbol.name
                    and symbol["st_info"]["bind"] != "STB_LOCAL"
                    and symbol["st_info"]["type"] in DATA_SYMBOL_TYPES
                    and symbol["st_shndx"] != "SHN_UNDEF"
                    and symbol["st_value"] != 0
                ):
                    symbols.setdefault(symbol.name, symbol["st_value"])

        logger.debug(f"Symbol table holds {len(symbols)} data symbols")
        return symbols
