#!/usr/bin/env python3

"""Turns parsed DWARF info into an immutable DebugData snapshot."""

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from ...infrastructure.config import get_config
from ...infrastructure.logging import get_logger, log_timing
from ..exceptions import TypeBuildError
from ..models.dwarf import DebugData, VarInfo
from .parsing import TypeGraphBuilder, VariableExtractor, demangle_cpp_varnames

logger = get_logger(__name__)


class DebugDataReader:
    """Runs one extraction pass: variables, then types, then name indexes.

    Args:
        dwarf_info: pyelftools DWARFInfo of the loaded file
        symbol_table: Global data symbols used as a location fallback
        sections: Section address ranges, copied into the snapshot
        config: Extraction tunables, defaults to :func:`get_config`
    """

    def __init__(
        self,
        dwarf_info: Any,
        symbol_table: Mapping[str, int] | None = None,
        sections: Mapping[str, tuple[int, int]] | None = None,
        config: Mapping[str, Any] | None = None,
    ):
        self.dwarf_info = dwarf_info
        self.symbol_table = symbol_table or {}
        self.sections = dict(sections or {})
        self.config = config if config is not None else get_config()

    @log_timing
    def read_debug_info_entries(self) -> DebugData:
        symbol_table = self.symbol_table if self.config["SYMBOL_TABLE_FALLBACK"] else None
        extraction = VariableExtractor(self.dwarf_info, symbol_table).extract()

        builder = TypeGraphBuilder(
            self.dwarf_info,
            extraction.class_table,
            extraction.unit_offsets,
            self.config,
        )
        variables = self._load_types(extraction.variables, builder)

        demangled_names = (
            demangle_cpp_varnames(variables) if self.config["DEMANGLE_CPP_NAMES"] else {}
        )

        logger.info(
            f"Loaded {len(variables)} variables, {len(builder.types)} types "
            f"from {len(extraction.unit_names)} compile units"
        )
        return DebugData(
            variables=variables,
            types=builder.types,
            typenames=builder.typenames,
            demangled_names=demangled_names,
            unit_names=extraction.unit_names,
            sections=self.sections,
        )

    @staticmethod
    def _load_types(
        variables: dict[str, list[VarInfo]], builder: TypeGraphBuilder
    ) -> dict[str, list[VarInfo]]:
        """Build the type of every variable; variables whose type fails are dropped.

        A variable typed with a class declaration is re-pointed at the full
        definition so that its members can be resolved.
        """
        loaded: dict[str, list[VarInfo]] = {}
        for name, varinfo_list in variables.items():
            kept = []
            for varinfo in varinfo_list:
                typeref = builder.resolve_declaration(varinfo.typeref)
                try:
                    builder.get_type(typeref)
                except TypeBuildError as e:
                    logger.debug(f"Dropping variable {name} @0x{varinfo.address:x}: {e}")
                    continue
                kept.append(replace(varinfo, typeref=typeref))
            if kept:
                loaded[name] = kept
        return loaded
