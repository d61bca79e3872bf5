"""Tests for name normalization helpers."""

import pytest

from dwarf_symbol_resolver.utils import make_simple_unit_name


@pytest.mark.unit
@pytest.mark.parametrize(
    ("unit_name", "simple_name"),
    [
        ("file2.c", "file2_c"),
        ("src/app/file2.c", "file2_c"),
        ("C:\\work\\src\\main.cpp", "main_cpp"),
        ("file2_c", "file2_c"),
        ("my-module.c++", "my_module_c__"),
        ("src/überprüfung.c", "überprüfung_c"),
        ("", ""),
    ],
)
def test_make_simple_unit_name(unit_name: str, simple_name: str) -> None:
    assert make_simple_unit_name(unit_name) == simple_name


@pytest.mark.unit
def test_none_stays_none() -> None:
    assert make_simple_unit_name(None) is None
