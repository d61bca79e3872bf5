#!/usr/bin/env python3

"""Depth-first enumeration of the addressable components of a type."""

from collections.abc import Iterator, Mapping
from math import prod

from ...models.dwarf import ArrayType, ClassType, RecordType, TypeInfo
from .symbol_path import format_index

# (suffix of the component itself, prefix for its children, type, byte offset)
_Child = tuple[str, str, TypeInfo, int]


def _children(
    types: Mapping[int, TypeInfo],
    typeinfo: TypeInfo,
    prefix: str,
    base_offset: int,
    use_new_arrays: bool,
) -> Iterator[_Child]:
    datatype = typeinfo.get_reference(types).datatype

    if isinstance(datatype, ClassType):
        for base_name, (base_type, offset) in datatype.inheritance.items():
            base_prefix = f"{prefix}.{base_name}"
            base = base_type.get_reference(types)
            yield f"{base_prefix}._", base_prefix, base, base_offset + offset

    if isinstance(datatype, RecordType):
        inherited = datatype.inherited_members if isinstance(datatype, ClassType) else frozenset()
        for member_name, (member_type, offset) in datatype.members.items():
            if member_name in inherited:
                continue
            member_prefix = f"{prefix}.{member_name}"
            member = member_type.get_reference(types)
            yield member_prefix, member_prefix, member, base_offset + offset

    elif isinstance(datatype, ArrayType):
        element = datatype.element.get_reference(types)
        for flat_index in range(prod(datatype.dims)):
            indices = []
            remainder = flat_index
            for extent in reversed(datatype.dims):
                remainder, index = divmod(remainder, extent)
                indices.append(index)
            element_prefix = prefix + format_index(tuple(reversed(indices)), use_new_arrays)
            element_offset = base_offset + flat_index * datatype.stride
            yield element_prefix, element_prefix, element, element_offset


def iter_type_components(
    types: Mapping[int, TypeInfo],
    typeinfo: TypeInfo,
    use_new_arrays: bool = False,
) -> Iterator[tuple[str, TypeInfo, int]]:
    """Yield ``(name suffix, type, byte offset)`` for every component of ``typeinfo``.

    Components are produced lazily in depth-first order: a member comes
    before its own members, array elements in row-major order. Base classes
    appear as ``.Base._`` followed by their members under ``.Base``.
    Pointers are leaves, so the sequence is always finite.

    Args:
        types: Type map used to dereference TypeRef nodes
        typeinfo: Type whose components are enumerated
        use_new_arrays: Name array elements ``[N]`` instead of ``._N_``
    """
    stack = [_children(types, typeinfo, "", 0, use_new_arrays)]
    while stack:
        child = next(stack[-1], None)
        if child is None:
            stack.pop()
            continue

        suffix, prefix, child_type, offset = child
        yield suffix, child_type, offset
        stack.append(_children(types, child_type, prefix, offset, use_new_arrays))
