#!/usr/bin/env python3

"""Symbol expression parsing and resolution."""

from .symbol_path import AdditionalSpec, get_additional_spec, get_index, split_symbol_components
from .symbol_resolver import SymbolResolver
from .type_iterator import iter_type_components

__all__ = [
    "AdditionalSpec",
    "SymbolResolver",
    "get_additional_spec",
    "get_index",
    "iter_type_components",
    "split_symbol_components",
]
