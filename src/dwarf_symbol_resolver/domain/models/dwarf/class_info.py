#!/usr/bin/env python3

"""Class table entry recorded while walking the debug tree."""

from dataclasses import dataclass


@dataclass
class ClassInfo:
    """Name and scope of a class/struct/union DIE, keyed by its offset.

    Only lives for the duration of one load; the type graph builder uses it
    to name base classes and to map declarations onto full definitions.
    """

    name: str = "unknown_class"
    linkage_name: str = ""
    namespace: str = ""
    is_declaration: bool = False

    @property
    def qualified_name(self) -> str:
        """Name including the ``::`` joined namespace path."""
        if self.namespace:
            return f"{self.namespace}::{self.name}"
        return self.name
