#!/usr/bin/env python3

"""Parsing of symbol expressions.

A symbol expression names a variable and optionally a path into it::

    motortune.param._0_
    my_struct.array_field[5][1]
    counter{Function:init}{CompileUnit:file2_c}{Namespace:Global}

Array indices are written ``[N]`` or, in the notation older tools use, ``_N_``.
The ``{Key:Value}`` groups select one of several variables sharing a name.
"""

import re
from dataclasses import dataclass

_INDEX_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class AdditionalSpec:
    """Disambiguation filters parsed from the ``{Key:Value}`` suffix."""

    function_name: str | None = None
    simple_unit_name: str | None = None
    namespaces: tuple[str, ...] = ()


def get_additional_spec(expression: str) -> tuple[str, AdditionalSpec | None]:
    """Split an expression into its base path and disambiguation filters.

    Scanning stops at ``{CompileUnit:...}``; groups after it are ignored.

    Returns:
        (base path, filters) where filters is None if there is no ``{...}`` suffix
    """
    base, brace, suffix = expression.partition("{")
    if not brace or not suffix.endswith("}"):
        return base, None

    function_name = None
    simple_unit_name = None
    namespaces: list[str] = []
    for group in suffix[:-1].split("}{"):
        key, _, value = group.partition(":")
        if key == "Function":
            function_name = value
        elif key == "Namespace":
            namespaces.append(value)
        elif key == "CompileUnit":
            simple_unit_name = value
            break

    return base, AdditionalSpec(function_name, simple_unit_name, tuple(namespaces))


def split_symbol_components(path: str) -> list[str]:
    """Split a base path into member names and index components.

    ``"my_struct.array_field[5][6]"`` becomes
    ``["my_struct", "array_field", "[5]", "[6]"]``.
    """
    components = []
    for component in path.split("."):
        name, bracket, index_string = component.partition("[")
        components.append(name)
        if not bracket:
            continue

        *indices, tail = (bracket + index_string).split("]")
        components.extend(f"{index}]" for index in indices)
        if tail:
            components.append(tail)

    return components


def get_index(component: str) -> int | None:
    """Return the numeric value of an ``[N]`` or ``_N_`` component, else None."""
    if len(component) < 3:
        return None
    if not (
        (component[0] == "_" and component[-1] == "_")
        or (component[0] == "[" and component[-1] == "]")
    ):
        return None

    digits = component[1:-1]
    if not _INDEX_DIGITS.fullmatch(digits):
        return None
    return int(digits)


def format_index(indices: tuple[int, ...], use_new_arrays: bool = False) -> str:
    """Render array indices as a name suffix: ``[1][2]`` or ``._1_._2_``."""
    if use_new_arrays:
        return "".join(f"[{index}]" for index in indices)
    return "".join(f"._{index}_" for index in indices)
