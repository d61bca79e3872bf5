#!/usr/bin/env python3

"""Accessors for the attributes of a single DIE.

Each accessor either returns the attribute in a usable form, returns None
for optional attributes, or raises :class:`DwarfAttributeError` when a
required attribute is missing or malformed.
"""

from collections.abc import Mapping

from elftools.common.exceptions import DWARFError, ELFError
from elftools.dwarf.die import DIE

from ...exceptions import DwarfAttributeError
from .location_parser import parse_location_offset, parse_static_address

# Reference forms whose value is relative to the start of the owning CU
CU_RELATIVE_REF_FORMS = frozenset(
    {
        "DW_FORM_ref1",
        "DW_FORM_ref2",
        "DW_FORM_ref4",
        "DW_FORM_ref8",
        "DW_FORM_ref_udata",
    }
)


def decode_name(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def get_name_attribute(die: DIE) -> str:
    """Return DW_AT_name of ``die``."""
    attr = die.attributes.get("DW_AT_name")
    if attr is None:
        raise DwarfAttributeError(f"DIE at 0x{die.offset:x} has no name attribute")
    return decode_name(attr.value)


def get_linkage_name_attribute(die: DIE) -> str | None:
    for attr_name in ("DW_AT_linkage_name", "DW_AT_MIPS_linkage_name"):
        attr = die.attributes.get(attr_name)
        if attr is not None:
            return decode_name(attr.value)
    return None


def get_typeref_attribute(die: DIE) -> int:
    """Return the section offset of the DIE referenced by DW_AT_type.

    The offset is computed from the attribute form, without parsing the
    referenced DIE.
    """
    attr = die.attributes.get("DW_AT_type")
    if attr is None:
        raise DwarfAttributeError(f"DIE at 0x{die.offset:x} has no type attribute")

    if attr.form in CU_RELATIVE_REF_FORMS:
        return die.cu.cu_offset + attr.value
    if attr.form == "DW_FORM_ref_addr":
        return attr.value

    raise DwarfAttributeError(
        f"DIE at 0x{die.offset:x} uses unsupported type reference form {attr.form}"
    )


def get_declaration_attribute(die: DIE) -> bool:
    attr = die.attributes.get("DW_AT_declaration")
    return attr is not None and bool(attr.value)


def get_external_attribute(die: DIE) -> bool:
    attr = die.attributes.get("DW_AT_external")
    return attr is not None and bool(attr.value)


def _get_referenced_die(die: DIE, attr_name: str) -> DIE | None:
    if attr_name not in die.attributes:
        return None
    try:
        return die.get_DIE_from_attribute(attr_name)
    except (DWARFError, KeyError, ValueError) as e:
        raise DwarfAttributeError(
            f"DIE at 0x{die.offset:x}: cannot follow {attr_name}: {e}"
        ) from e


def get_specification_attribute(die: DIE) -> DIE | None:
    """Return the DIE referenced by DW_AT_specification, if any."""
    return _get_referenced_die(die, "DW_AT_specification")


def get_abstract_origin_attribute(die: DIE) -> DIE | None:
    """Return the DIE referenced by DW_AT_abstract_origin, if any."""
    return _get_referenced_die(die, "DW_AT_abstract_origin")


def get_byte_size_attribute(die: DIE) -> int | None:
    attr = die.attributes.get("DW_AT_byte_size")
    if attr is None or not isinstance(attr.value, int):
        return None
    return attr.value


def get_data_member_location_attribute(die: DIE) -> int | None:
    attr = die.attributes.get("DW_AT_data_member_location")
    return parse_location_offset(attr.value if attr is not None else None)


def _symbol_table_candidates(die: DIE) -> list[str]:
    names = []
    for entry in (die, get_specification_attribute(die)):
        if entry is None:
            continue
        linkage_name = get_linkage_name_attribute(entry)
        if linkage_name:
            names.append(linkage_name)
        name_attr = entry.attributes.get("DW_AT_name")
        if name_attr is not None:
            names.append(decode_name(name_attr.value))
    return names


def get_location_attribute(
    die: DIE,
    symbol_table: Mapping[str, int] | None = None,
) -> int | None:
    """Return the static address of a variable DIE.

    Args:
        die: DW_TAG_variable entry
        symbol_table: Global data symbols (name -> address); consulted when the
            location evaluates to address 0 or uses an unresolvable address index

    Returns:
        The address, or None if the variable has no static location (a local)

    Raises:
        DwarfAttributeError: If the location is static but cannot be determined
    """
    attr = die.attributes.get("DW_AT_location")
    if attr is None:
        return None

    def resolve_address_index(index: int) -> int:
        return die.dwarfinfo.get_addr(die.cu, index)

    error: Exception | None = None
    try:
        address = parse_static_address(attr.value, die.cu.structs, resolve_address_index)
    except (DWARFError, ELFError, LookupError) as e:
        address, error = 0, e

    if address is None:
        return None

    if address == 0 and symbol_table:
        for name in _symbol_table_candidates(die):
            if name in symbol_table:
                return symbol_table[name]

    if error is not None:
        raise DwarfAttributeError(
            f"DIE at 0x{die.offset:x}: cannot evaluate location: {error}"
        ) from error

    return address
