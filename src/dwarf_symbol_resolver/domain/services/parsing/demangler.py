#!/usr/bin/env python3

"""Index of demangled C++ variable names."""

from collections.abc import Iterable

from itanium_demangler import parse as parse_mangled

from ....infrastructure.logging import get_logger

logger = get_logger(__name__)


def demangle_name(name: str) -> str | None:
    """Demangle an Itanium ABI name, or return None if that is not possible."""
    # Plain C names like "c" must not be fed to the demangler
    if not name.startswith("_Z"):
        return None

    try:
        ast = parse_mangled(name)
    except (NotImplementedError, ValueError, IndexError, KeyError) as e:
        logger.debug(f"Cannot demangle {name}: {e}")
        return None

    return str(ast) if ast is not None else None


def demangle_cpp_varnames(names: Iterable[str]) -> dict[str, str]:
    """Map the demangled form of every mangled variable name to the mangled name.

    Demangled names that contain spaces or start with ``{vtable`` (RTTI
    objects, vtables and similar) are left out: they cannot be written as
    symbol expressions.
    """
    demangled_names = {}
    for name in names:
        demangled = demangle_name(name)
        if demangled is None:
            continue
        if " " in demangled or demangled.startswith("{vtable"):
            continue
        demangled_names[demangled] = name

    logger.debug(f"Demangled {len(demangled_names)} C++ variable names")
    return demangled_names
