#!/usr/bin/env python3

"""Global variable model produced by the variable walk."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class VarInfo:
    """One static storage location known under a variable name.

    Several VarInfo entries can share a name, e.g. ``static int counter``
    defined in two compile units or in two functions.
    """

    address: int
    typeref: int
    unit_idx: int
    function: str | None = None
    namespaces: tuple[str, ...] = field(default_factory=tuple)
