#!/usr/bin/env python3

"""Tunables for the DWARF extraction pass."""

import os
from typing import Any

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    # Build the demangled-name index for C++ variables
    "DEMANGLE_CPP_NAMES": True,
    # Look up unresolvable static locations in the ELF symbol table
    "SYMBOL_TABLE_FALLBACK": True,
    # Make members of base classes reachable directly on the derived class
    "MERGE_BASE_MEMBERS": True,
    # Byte size of the integer used for unknown base type encodings
    "DEFAULT_INT_SIZE": 4,
}


def get_config() -> dict[str, Any]:
    """Get configuration with environment variable overrides.

    Every key can be overridden by an environment variable named
    ``DWARF_<KEY>``; values that cannot be converted are ignored.

    Returns:
        Configuration dictionary
    """
    config = DEFAULT_CONFIG.copy()

    for key in config:
        env_value = os.getenv(f"DWARF_{key}")
        if env_value is None:
            continue

        if isinstance(config[key], bool):
            config[key] = env_value.lower() in ("true", "1", "yes", "on")
        elif isinstance(config[key], int):
            try:
                config[key] = int(env_value, 0)
            except ValueError:
                pass
        else:
            config[key] = env_value

    return config
