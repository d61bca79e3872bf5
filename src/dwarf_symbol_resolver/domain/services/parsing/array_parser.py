#!/usr/bin/env python3

"""Array dimension parsing for DWARF.

Reads the extents of a DW_TAG_array_type from its DW_TAG_subrange_type
(or DW_TAG_enumeration_type, for Pascal-style index types) children.
"""

from elftools.dwarf.die import DIE

from ....infrastructure.logging import get_logger

logger = get_logger(__name__)


def _subrange_extent(subrange_die: DIE) -> int:
    count_attr = subrange_die.attributes.get("DW_AT_count")
    upper_bound_attr = subrange_die.attributes.get("DW_AT_upper_bound")
    lower_bound_attr = subrange_die.attributes.get("DW_AT_lower_bound")

    if count_attr is not None and isinstance(count_attr.value, int):
        return count_attr.value

    if upper_bound_attr is not None and isinstance(upper_bound_attr.value, int):
        lower_bound = lower_bound_attr.value if lower_bound_attr is not None else 0
        return (upper_bound_attr.value - lower_bound) + 1

    # Flexible array member or a bound computed at runtime
    logger.debug(f"Subrange at 0x{subrange_die.offset:x} has unknown size")
    return 0


def parse_array_dimensions(array_die: DIE) -> list[int]:
    """Return the extent of every dimension of an array type, outermost first.

    Args:
        array_die: DIE of type DW_TAG_array_type

    Returns:
        One extent per dimension; 0 for dimensions of unknown size
    """
    dimensions = []

    for child in array_die.iter_children():
        if child.tag == "DW_TAG_subrange_type":
            dimensions.append(max(_subrange_extent(child), 0))
        elif child.tag == "DW_TAG_enumeration_type":
            dimensions.append(sum(1 for c in child.iter_children() if c.tag == "DW_TAG_enumerator"))

    logger.debug(f"Array at 0x{array_die.offset:x} has dimensions {dimensions}")
    return dimensions
