#!/usr/bin/env python3

"""Loads a DebugData snapshot from an ELF file."""

from pathlib import Path

from ..domain.models.dwarf import DebugData
from ..domain.services import DebugDataReader
from ..infrastructure.elf_loader import ElfLoader
from ..infrastructure.logging import get_logger, log_timing

logger = get_logger(__name__)


@log_timing
def load_debug_data(elf_path: Path | str) -> DebugData:
    """Extract variables and types from the DWARF info of an ELF file.

    Args:
        elf_path: Path to the ELF file

    Returns:
        Immutable snapshot of the file's variables and types

    Raises:
        LoadError: If the file cannot be read or lacks usable DWARF info
    """
    with ElfLoader(Path(elf_path)) as loader:
        dwarf_info = loader.load_dwarf_info()
        reader = DebugDataReader(
            dwarf_info,
            symbol_table=loader.get_symbol_table(),
            sections=loader.get_sections(),
        )
        debug_data = reader.read_debug_info_entries()

    logger.debug(f"Loaded debug data from {elf_path}")
    return debug_data
