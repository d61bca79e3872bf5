#!/usr/bin/env python3

"""DWARF location expression parsing.

Two kinds of expressions matter for static layout:

- ``DW_AT_data_member_location`` of members and base classes: either a
  plain integer (DWARF3+) or an expression ``[DW_OP_plus_uconst, uleb128]``
  (DWARF2).
- ``DW_AT_location`` of variables: a static address is
  ``DW_OP_addr <address>`` or ``DW_OP_addrx <index>``, optionally followed by
  ``DW_OP_plus_uconst <offset>``. Anything else (registers, frame base,
  location lists) is not a static address.
"""

from collections.abc import Callable, Sequence
from typing import Any

from elftools.dwarf.dwarf_expr import DWARFExprParser

from ....infrastructure.logging import get_logger

logger = get_logger(__name__)

# DWARF operation codes used in member location expressions
DW_OP_PLUS_UCONST = 0x23

ADDRESS_OPS = frozenset({"DW_OP_addr"})
ADDRESS_INDEX_OPS = frozenset({"DW_OP_addrx", "DW_OP_GNU_addr_index"})


def _decode_uleb128(data: Sequence[int], start: int) -> int | None:
    """Decode an unsigned LEB128 number starting at ``data[start]``."""
    result = 0
    shift = 0
    for byte in data[start:]:
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result
        shift += 7
    return None


def parse_location_offset(attr_value: int | Sequence[int] | None) -> int | None:
    """Extract a member offset from DW_AT_data_member_location.

    Args:
        attr_value: Integer offset, DWARF2 location expression or None

    Returns:
        Offset in bytes, or None if the value is missing or not a constant offset

    Examples:
        >>> parse_location_offset(4)
        4
        >>> parse_location_offset([0x23, 0x84, 0x01])
        132
    """
    if attr_value is None:
        return None

    if isinstance(attr_value, int):
        return attr_value

    if isinstance(attr_value, (list, tuple)):
        if not attr_value:
            return None
        if attr_value[0] == DW_OP_PLUS_UCONST:
            return _decode_uleb128(attr_value, 1)
        if len(attr_value) == 1:
            return attr_value[0]

        # e.g. virtual base offsets computed from the vtable at runtime
        logger.debug(f"Member location is not a constant offset: {list(attr_value)}")
        return None

    logger.warning(f"Unknown attribute value type for location offset: {type(attr_value).__name__}")
    return None


def parse_static_address(
    expression: Any,
    structs: Any,
    resolve_address_index: Callable[[int], int] | None = None,
) -> int | None:
    """Evaluate a variable's DW_AT_location if it denotes a static address.

    Args:
        expression: Attribute value; only expression blocks (lists of bytes) qualify
        structs: DWARFStructs of the owning CU (address size and byte order)
        resolve_address_index: Maps a .debug_addr index to an address

    Returns:
        The static address, or None if the expression does not describe one

    Raises:
        LookupError: If an address index cannot be resolved
    """
    if not isinstance(expression, (list, tuple)) or not expression:
        return None

    ops = DWARFExprParser(structs).parse_expr(expression)
    first, rest = ops[0], ops[1:]

    if first.op_name in ADDRESS_OPS:
        address = first.args[0]
    elif first.op_name in ADDRESS_INDEX_OPS:
        if resolve_address_index is None:
            raise LookupError(f"no .debug_addr available for {first.op_name}")
        address = resolve_address_index(first.args[0])
    else:
        return None

    for op in rest:
        if op.op_name != "DW_OP_plus_uconst":
            # DW_OP_GNU_push_tls_address and friends: not a plain static address
            return None
        address += op.args[0]

    return address
