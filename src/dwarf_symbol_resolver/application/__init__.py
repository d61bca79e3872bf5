"""Application layer: loading debug data from files."""

from .debug_data_loader import load_debug_data

__all__ = ["load_debug_data"]
