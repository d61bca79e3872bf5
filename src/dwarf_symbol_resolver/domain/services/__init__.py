#!/usr/bin/env python3

"""Domain services for extracting and resolving debug data."""

from .debug_data_reader import DebugDataReader
from .resolution import SymbolResolver

__all__ = ["DebugDataReader", "SymbolResolver"]
