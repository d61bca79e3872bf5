#!/usr/bin/env python3

"""DWARF parsing services: attribute access, variable walk and type graph."""

from .demangler import demangle_cpp_varnames
from .type_graph_builder import TypeGraphBuilder
from .variable_extractor import ExtractionResult, VariableExtractor

__all__ = [
    "ExtractionResult",
    "TypeGraphBuilder",
    "VariableExtractor",
    "demangle_cpp_varnames",
]
