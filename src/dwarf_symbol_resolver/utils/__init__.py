"""Utility functions."""

from .name_utils import make_simple_unit_name

__all__ = ["make_simple_unit_name"]
