#!/usr/bin/env python3

"""Exceptions raised while loading debug data and resolving symbols."""


class DwarfSymbolError(Exception):
    """Base exception for all errors of this package"""


class LoadError(DwarfSymbolError):
    """Exception raised when an ELF file cannot be loaded at all"""

    def __init__(self, path: object, message: str):
        super().__init__(message)
        self.path = path


class DwarfAttributeError(DwarfSymbolError):
    """Exception raised when a single DIE lacks a usable attribute"""


class TypeBuildError(DwarfSymbolError):
    """Exception raised when a type DIE cannot be turned into a type node"""


class SymbolResolutionError(DwarfSymbolError):
    """Base exception for failures to resolve a symbol expression.

    Carries the offending ``component`` and the full ``expression`` so that
    callers can report the failure without re-parsing anything.
    """

    def __init__(self, message: str, expression: str, component: str | None = None):
        super().__init__(message)
        self.expression = expression
        self.component = component


class SymbolNotFoundError(SymbolResolutionError):
    """Exception raised when the base variable does not exist"""


class MemberNotFoundError(SymbolResolutionError):
    """Exception raised when a struct/union/class has no such member"""


class IndexOutOfBoundsError(SymbolResolutionError):
    """Exception raised when an array index exceeds its dimension"""


class UnparsableIndexError(SymbolResolutionError):
    """Exception raised when an array component is not [N] or _N_"""


class TrailingComponentsUnmatchedError(SymbolResolutionError):
    """Exception raised when components remain after reaching a leaf type"""


class OffsetOutOfBoundsError(SymbolResolutionError):
    """Exception raised when a byte offset lies outside the symbol's type"""


class OffsetNotFoundError(SymbolResolutionError):
    """Exception raised when no component starts at the requested offset"""
