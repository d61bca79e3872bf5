#!/usr/bin/env python3

"""Result of resolving a symbol expression."""

from dataclasses import dataclass, field

from .type_info import TypeInfo


@dataclass(frozen=True)
class SymbolInfo:
    """Address and type of a resolved symbol expression.

    ``is_unique`` is True when the base variable name had exactly one
    candidate, i.e. no disambiguation was needed.
    """

    name: str
    address: int
    typeinfo: TypeInfo
    unit_idx: int
    function_name: str | None = None
    namespaces: tuple[str, ...] = field(default_factory=tuple)
    is_unique: bool = True
