#!/usr/bin/env python3

"""Resolution of symbol expressions to addresses and types."""

from dataclasses import replace
from typing import NoReturn

from ....infrastructure.logging import get_logger
from ....utils.name_utils import make_simple_unit_name
from ...exceptions import (
    IndexOutOfBoundsError,
    MemberNotFoundError,
    OffsetNotFoundError,
    OffsetOutOfBoundsError,
    SymbolNotFoundError,
    SymbolResolutionError,
    TrailingComponentsUnmatchedError,
    UnparsableIndexError,
)
from ...models.dwarf import (
    ArrayType,
    ClassType,
    DebugData,
    RecordType,
    SymbolInfo,
    TypeInfo,
    VarInfo,
)
from .symbol_path import (
    AdditionalSpec,
    get_additional_spec,
    get_index,
    split_symbol_components,
)
from .type_iterator import iter_type_components

logger = get_logger(__name__)

# Follows a base class component: select the base instance itself
BASE_INSTANCE_MARKER = "_"


class SymbolResolver:
    """Resolves symbol expressions against one DebugData snapshot.

    The snapshot is never modified, so a resolver can be shared freely.

    Args:
        debug_data: Loaded debug data
        use_new_arrays: Name array elements ``[N]`` instead of ``._N_`` in
            results of :meth:`resolve_by_offset`
    """

    def __init__(self, debug_data: DebugData, use_new_arrays: bool = False):
        self.debug_data = debug_data
        self.use_new_arrays = use_new_arrays

    def resolve(self, expression: str) -> SymbolInfo:
        """Resolve a symbol expression such as ``my_struct.array_item[0]``.

        Args:
            expression: Symbol expression, optionally with a ``{Key:Value}`` suffix

        Returns:
            Address, type and context of the named component

        Raises:
            SymbolResolutionError: If the expression cannot be resolved
        """
        plain_symbol, additional_spec = get_additional_spec(expression)
        components = split_symbol_components(plain_symbol)

        try:
            symbol = self._find_symbol_from_components(components, additional_spec, expression)
        except SymbolResolutionError as find_error:
            # C++ variables may be known under their mangled name only
            mangled = self.debug_data.demangled_names.get(components[0])
            if mangled is None:
                raise

            logger.debug(f"Retrying {components[0]} as {mangled}")
            try:
                symbol = self._find_symbol_from_components(
                    [mangled, *components[1:]], additional_spec, expression
                )
            except SymbolResolutionError:
                raise find_error from None

            return replace(symbol, name=mangled + plain_symbol[len(components[0]) :])

        return replace(symbol, name=plain_symbol)

    def resolve_by_offset(self, base_symbol: SymbolInfo, offset: int) -> SymbolInfo:
        """Find the component of ``base_symbol`` that starts ``offset`` bytes into it.

        Raises:
            OffsetOutOfBoundsError: If ``offset`` lies outside the symbol
            OffsetNotFoundError: If no component starts at ``offset``
        """
        if offset < 0 or offset > base_symbol.typeinfo.get_size():
            raise OffsetOutOfBoundsError(
                f'Offset {offset} is out of bounds for symbol "{base_symbol.name}"',
                base_symbol.name,
                str(offset),
            )

        components = iter_type_components(
            self.debug_data.types, base_symbol.typeinfo, self.use_new_arrays
        )
        for suffix, typeinfo, item_offset in components:
            if item_offset == offset:
                return replace(
                    base_symbol,
                    name=f"{base_symbol.name}{suffix}",
                    address=base_symbol.address + item_offset,
                    typeinfo=typeinfo,
                )

        raise OffsetNotFoundError(
            f'Could not find a symbol component at offset {offset} from "{base_symbol.name}"',
            base_symbol.name,
            str(offset),
        )

    def _find_symbol_from_components(
        self,
        components: list[str],
        additional_spec: AdditionalSpec | None,
        expression: str,
    ) -> SymbolInfo:
        varinfo_list = self.debug_data.variables.get(components[0])
        if not varinfo_list:
            raise SymbolNotFoundError(
                f'Symbol "{components[0]}" does not exist', expression, components[0]
            )

        varinfo = self._select_varinfo(varinfo_list, additional_spec)
        vartype = self.debug_data.types.get(varinfo.typeref)
        if vartype is None:
            raise SymbolResolutionError(
                f'Type of symbol "{components[0]}" is missing from the debug data',
                expression,
                components[0],
            )

        address, typeinfo = self._find_membertype(
            vartype.get_reference(self.debug_data.types), components, varinfo.address, expression
        )
        return SymbolInfo(
            name="",
            address=address,
            typeinfo=typeinfo,
            unit_idx=varinfo.unit_idx,
            function_name=varinfo.function,
            namespaces=varinfo.namespaces,
            is_unique=len(varinfo_list) == 1,
        )

    def _select_varinfo(
        self, varinfo_list: list[VarInfo], additional_spec: AdditionalSpec | None
    ) -> VarInfo:
        """Pick the first variable matching every given filter, else the first one."""
        if additional_spec is not None:
            unit = make_simple_unit_name(additional_spec.simple_unit_name)
            function = additional_spec.function_name
            namespaces = additional_spec.namespaces

            for varinfo in varinfo_list:
                unit_name = make_simple_unit_name(self.debug_data.get_unit_name(varinfo.unit_idx))
                if (
                    (unit is None or unit == unit_name)
                    and (function is None or function == varinfo.function)
                    and (not namespaces or namespaces == varinfo.namespaces)
                ):
                    return varinfo

            logger.debug(f"No variable matches {additional_spec}, using the first candidate")

        return varinfo_list[0]

    def _find_membertype(
        self,
        typeinfo: TypeInfo,
        components: list[str],
        address: int,
        expression: str,
    ) -> tuple[int, TypeInfo]:
        """Descend from the variable's type through the remaining components."""
        types = self.debug_data.types
        index = 1

        while index < len(components):
            datatype = typeinfo.datatype
            component = components[index]

            if isinstance(datatype, RecordType) and component in datatype.members:
                membertype, offset = datatype.members[component]
                typeinfo = membertype.get_reference(types)
                address += offset
                index += 1

            elif isinstance(datatype, ClassType) and component in datatype.inheritance:
                basetype, offset = datatype.inheritance[component]
                typeinfo = basetype.get_reference(types)
                address += offset
                index += 1
                if index < len(components) and components[index] == BASE_INSTANCE_MARKER:
                    index += 1
                    if index < len(components):
                        self._raise_unmatched(components, index, expression)
                    break

            elif isinstance(datatype, RecordType):
                raise MemberNotFoundError(
                    f'There is no member "{component}" in "{".".join(components[:index])}"',
                    expression,
                    component,
                )

            elif isinstance(datatype, ArrayType):
                multi_index = 0
                for dim_pos, extent in enumerate(datatype.dims):
                    # unspecified trailing indices select the first element
                    position = index + dim_pos
                    array_component = components[position] if position < len(components) else "_0_"
                    index_value = get_index(array_component)
                    if index_value is None:
                        raise UnparsableIndexError(
                            f'could not interpret "{array_component}" as an array index',
                            expression,
                            array_component,
                        )
                    if index_value >= extent:
                        raise IndexOutOfBoundsError(
                            f"requested array index {index_value} in expression "
                            f'"{".".join(components)}", but the array only has {extent} elements',
                            expression,
                            array_component,
                        )
                    multi_index = multi_index * extent + index_value

                address += multi_index * datatype.stride
                typeinfo = datatype.element.get_reference(types)
                index += len(datatype.dims)

            else:
                self._raise_unmatched(components, index, expression)

        return address, typeinfo

    @staticmethod
    def _raise_unmatched(components: list[str], index: int, expression: str) -> NoReturn:
        rest = ".".join(components[index:])
        raise TrailingComponentsUnmatchedError(
            f'Remaining portion "{rest}" of "{".".join(components)}" could not be matched',
            expression,
            components[index],
        )
