"""Static memory layout extraction and symbol resolution from DWARF debug info."""

__version__ = "0.1.0"

from .application import load_debug_data
from .domain.exceptions import LoadError, SymbolResolutionError
from .domain.models.dwarf import DebugData, SymbolInfo, TypeInfo
from .domain.services.resolution import SymbolResolver

__all__ = [
    "DebugData",
    "LoadError",
    "SymbolInfo",
    "SymbolResolutionError",
    "SymbolResolver",
    "TypeInfo",
    "load_debug_data",
]
