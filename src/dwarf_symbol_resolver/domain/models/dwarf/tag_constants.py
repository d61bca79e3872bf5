#!/usr/bin/env python3

"""DWARF tag and encoding constants used during extraction.

Groups the tags the variable walk and the type graph builder dispatch on.
Tags are compared as the string names pyelftools reports (``die.tag``).
"""

# Roots of a compile unit subtree
UNIT_ROOT_TAGS = frozenset(
    {
        "DW_TAG_compile_unit",
        "DW_TAG_partial_unit",
    }
)

# Only these tags get their name captured on the context stack.
# Name lookup dominates the walk, so nothing else is named.
CONTEXT_NAME_TAGS = frozenset(
    {
        "DW_TAG_namespace",
        "DW_TAG_subprogram",
    }
)

# Aggregates recorded in the class table (declaration re-pointing, base names)
CLASS_LIKE_TAGS = frozenset(
    {
        "DW_TAG_class_type",
        "DW_TAG_structure_type",
        "DW_TAG_union_type",
    }
)

# Pointer-like types: built as leaves that only carry the pointee offset
POINTER_TAGS = frozenset(
    {
        "DW_TAG_pointer_type",  # *
        "DW_TAG_reference_type",  # &
        "DW_TAG_rvalue_reference_type",  # &&
        "DW_TAG_ptr_to_member_type",
    }
)

# Wrappers that do not change the layout of the type they modify
TRANSPARENT_TAGS = frozenset(
    {
        "DW_TAG_typedef",
        "DW_TAG_const_type",
        "DW_TAG_volatile_type",
        "DW_TAG_restrict_type",
        "DW_TAG_atomic_type",
        "DW_TAG_immutable_type",
        "DW_TAG_packed_type",
        "DW_TAG_shared_type",
    }
)

# DW_AT_encoding values of DW_TAG_base_type (DWARF 5, table 7.11)
DW_ATE_BOOLEAN = 0x02
DW_ATE_FLOAT = 0x04
DW_ATE_SIGNED = 0x05
DW_ATE_SIGNED_CHAR = 0x06
DW_ATE_UNSIGNED = 0x07
DW_ATE_UNSIGNED_CHAR = 0x08
DW_ATE_UTF = 0x10

SIGNED_ENCODINGS = frozenset({DW_ATE_SIGNED, DW_ATE_SIGNED_CHAR})
UNSIGNED_ENCODINGS = frozenset({DW_ATE_UNSIGNED, DW_ATE_UNSIGNED_CHAR, DW_ATE_UTF})
