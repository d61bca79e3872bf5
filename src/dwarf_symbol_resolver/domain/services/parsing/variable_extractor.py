#!/usr/bin/env python3

"""Walk of the debug info tree that collects global and static variables.

Every compile unit is traversed once in depth-first pre-order. A context
stack of ``(tag, name)`` pairs tracks the enclosing namespaces and
functions so that same-named static variables can be told apart later.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from elftools.common.exceptions import DWARFError, ELFError
from elftools.dwarf.die import DIE

from ....infrastructure.logging import ProgressTracker, get_logger, log_timing
from ...exceptions import DwarfAttributeError
from ...models.dwarf import ClassInfo, VarInfo
from ...models.dwarf.tag_constants import CLASS_LIKE_TAGS, CONTEXT_NAME_TAGS, UNIT_ROOT_TAGS
from .attributes import (
    get_abstract_origin_attribute,
    get_declaration_attribute,
    get_location_attribute,
    get_name_attribute,
    get_specification_attribute,
    get_typeref_attribute,
)

logger = get_logger(__name__)

ContextEntry = tuple[str, str | None]


@dataclass
class ExtractionResult:
    """Raw output of one walk over all compile units."""

    variables: dict[str, list[VarInfo]] = field(default_factory=dict)
    class_table: dict[int, ClassInfo] = field(default_factory=dict)
    unit_names: list[str | None] = field(default_factory=list)
    unit_offsets: dict[int, int] = field(default_factory=dict)


def _optional_name(die: DIE) -> str | None:
    try:
        return get_name_attribute(die)
    except DwarfAttributeError:
        return None


def _context_name(die: DIE) -> str | None:
    """Name of a namespace or subprogram, following an out-of-line definition
    to its in-class declaration when the definition itself is unnamed."""
    name = _optional_name(die)
    if name is not None:
        return name
    try:
        target = get_specification_attribute(die) or get_abstract_origin_attribute(die)
    except DwarfAttributeError:
        return None
    return _optional_name(target) if target is not None else None


def get_varinfo_from_context(context: list[ContextEntry]) -> tuple[str | None, tuple[str, ...]]:
    """Return the innermost enclosing function and the namespace path (outer to inner)."""
    function = next(
        (name for tag, name in reversed(context) if tag == "DW_TAG_subprogram"),
        None,
    )
    namespaces = tuple(
        name for tag, name in context if tag == "DW_TAG_namespace" and name is not None
    )
    return function, namespaces


class VariableExtractor:
    """Collects variables, class scopes and unit names from all CUs.

    One instance performs exactly one walk; its tables are handed over in an
    :class:`ExtractionResult` and not reused.
    """

    def __init__(self, dwarf_info: Any, symbol_table: Mapping[str, int] | None = None):
        self.dwarf_info = dwarf_info
        self.symbol_table = symbol_table
        self.progress = ProgressTracker(logger)
        self._result = ExtractionResult()

    @log_timing
    def extract(self) -> ExtractionResult:
        """Walk every compile unit and return the collected tables."""
        with self.progress.track_operation("variable extraction"):
            for cu in self.dwarf_info.iter_CUs():
                with self.progress.track_cu(cu):
                    self._walk_unit(cu)

        self.progress.report_summary()
        return self._result

    def _walk_unit(self, cu: Any) -> None:
        unit_idx = len(self._result.unit_names)
        self._result.unit_offsets[cu.cu_offset] = unit_idx

        entries = cu.iter_DIEs()
        root = next(entries, None)
        if root is not None and root.tag in UNIT_ROOT_TAGS:
            self._result.unit_names.append(_optional_name(root))
        else:
            self._result.unit_names.append(None)

        if root is None or not root.has_children:
            return

        # iter_DIEs yields a null entry after the last child of every parent,
        # which is the only signal for stepping back up the tree
        depth = 1
        context: list[ContextEntry] = []
        for die in entries:
            if die.is_null():
                depth -= 1
                continue

            self.progress.count_die()
            del context[depth - 1 :]

            tag = die.tag
            if tag in CONTEXT_NAME_TAGS:
                context.append((tag, _context_name(die)))
            else:
                context.append((tag, None))

            if tag == "DW_TAG_variable":
                self._add_variable(die, unit_idx, context)
            elif tag in CLASS_LIKE_TAGS:
                self._add_class(die, context)

            if die.has_children:
                depth += 1

    def _add_variable(self, die: DIE, unit_idx: int, context: list[ContextEntry]) -> None:
        try:
            global_variable = self._read_global_variable(die)
        except (DwarfAttributeError, DWARFError, ELFError) as e:
            self.progress.count_skipped()
            logger.debug(f"Error loading variable @0x{die.offset:x}: {e}")
            return

        if global_variable is None:
            return

        name, typeref, address = global_variable
        function, namespaces = get_varinfo_from_context(context)
        self._result.variables.setdefault(name, []).append(
            VarInfo(
                address=address,
                typeref=typeref,
                unit_idx=unit_idx,
                function=function,
                namespaces=namespaces,
            )
        )
        self.progress.count_variable()

    def _read_global_variable(self, die: DIE) -> tuple[str, int, int] | None:
        """Return (name, typeref, address) of a variable with static storage.

        Returns None for variables without a static location.
        """
        address = get_location_attribute(die, self.symbol_table)
        if address is None:
            return None

        # Attributes of a specification or abstract origin count as part of this DIE
        specification = get_specification_attribute(die)
        if specification is not None:
            return get_name_attribute(specification), get_typeref_attribute(specification), address

        abstract_origin = get_abstract_origin_attribute(die)
        if abstract_origin is not None:
            name = _optional_name(die)
            if name is None:
                name = get_name_attribute(abstract_origin)
            try:
                typeref = get_typeref_attribute(die)
            except DwarfAttributeError:
                typeref = get_typeref_attribute(abstract_origin)
            return name, typeref, address

        return get_name_attribute(die), get_typeref_attribute(die), address

    def _add_class(self, die: DIE, context: list[ContextEntry]) -> None:
        # context[-1] is the class itself
        _, namespaces = get_varinfo_from_context(context[:-1])
        self._result.class_table[die.offset] = ClassInfo(
            name=_optional_name(die) or "unknown_class",
            linkage_name="",
            namespace="::".join(namespaces),
            is_declaration=get_declaration_attribute(die),
        )
