"""Name normalization helpers."""

import re

_NON_IDENTIFIER = re.compile(r"\W")


def make_simple_unit_name(unit_name: str | None) -> str | None:
    """Reduce a compile unit name to the form used in ``{CompileUnit:...}``.

    Directories are dropped and every character that is not alphanumeric
    becomes ``_``, so ``src/app/file2.c`` and ``file2_c`` compare equal.
    """
    if unit_name is None:
        return None

    base_name = re.split(r"[\\/]", unit_name)[-1]
    return _NON_IDENTIFIER.sub("_", base_name)
