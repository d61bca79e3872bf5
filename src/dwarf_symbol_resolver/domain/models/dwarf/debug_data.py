#!/usr/bin/env python3

"""Immutable snapshot of everything one load extracted from a binary."""

from dataclasses import dataclass, field

from .type_info import TypeInfo
from .var_info import VarInfo


@dataclass(frozen=True)
class DebugData:
    """Variables, types and name indexes of one loaded ELF file.

    Built once per binary by :func:`load_debug_data` and never updated
    afterwards; load a new snapshot to pick up a rebuilt binary.

    Attributes:
        variables: Variable name to all its VarInfo entries, in discovery order
        types: DIE offset to type node; every VarInfo.typeref is a key here
        typenames: Type name to the offset of the first node carrying it
        demangled_names: Demangled C++ name to the mangled variable name
        unit_names: Display name of each compile unit, by unit index
        sections: Section name to (start, end) address range
    """

    variables: dict[str, list[VarInfo]] = field(default_factory=dict)
    types: dict[int, TypeInfo] = field(default_factory=dict)
    typenames: dict[str, int] = field(default_factory=dict)
    demangled_names: dict[str, str] = field(default_factory=dict)
    unit_names: list[str | None] = field(default_factory=list)
    sections: dict[str, tuple[int, int]] = field(default_factory=dict)

    def get_unit_name(self, unit_idx: int) -> str | None:
        if 0 <= unit_idx < len(self.unit_names):
            return self.unit_names[unit_idx]
        return None

    def find_section(self, address: int) -> str | None:
        """Name of the section whose address range contains ``address``."""
        for name, (start, end) in self.sections.items():
            if start <= address < end:
                return name
        return None
