#!/usr/bin/env python3

"""Tests for the command line interface."""

import logging
from pathlib import Path

import pytest

from dwarf_symbol_resolver import main as cli
from dwarf_symbol_resolver.domain.exceptions import LoadError
from dwarf_symbol_resolver.infrastructure.logging import LoggerSetup
from tests.conftest import build_sample_debug_data


@pytest.fixture
def elf_file(tmp_path: Path) -> Path:
    path = tmp_path / "firmware.elf"
    path.write_bytes(b"\x7fELF")
    return path


@pytest.fixture(autouse=True)
def patched_loader(monkeypatch):
    """Serve the sample debug data instead of parsing a file."""
    monkeypatch.setattr(cli, "load_debug_data", lambda path: build_sample_debug_data())
    root_logger = logging.getLogger()
    handlers, level = list(root_logger.handlers), root_logger.level
    LoggerSetup.reset()
    yield
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    LoggerSetup.reset()


def run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


@pytest.mark.unit
def test_parse_args() -> None:
    args = cli.parse_args(["fw.elf", "a", "b[1]", "--offset", "0x10", "--new-arrays", "-v"])

    assert args.elf_file == Path("fw.elf")
    assert args.symbols == ["a", "b[1]"]
    assert args.offset == 16
    assert args.new_arrays is True
    assert args.verbose is True


@pytest.mark.unit
def test_resolves_symbols(elf_file: Path, capsys) -> None:
    assert run([str(elf_file), "arr[1]", "my_struct.in.y"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "arr[1]: 0x00001238  uint32  size=4  unit=src/file1.c  section=.bss"
    assert lines[1].startswith("my_struct.in.y: 0x00cafe0c  uint32")


@pytest.mark.unit
def test_failure_sets_exit_code(elf_file: Path, capsys) -> None:
    assert run([str(elf_file), "arr[1]", "missing"]) == 1
    assert len(capsys.readouterr().out.splitlines()) == 1


@pytest.mark.unit
def test_ambiguous_name_is_marked(elf_file: Path, capsys) -> None:
    run([str(elf_file), "var{Function:init}"])

    out = capsys.readouterr().out
    assert "function=init" in out
    assert "(ambiguous name)" in out


@pytest.mark.unit
def test_offset_option(elf_file: Path, capsys) -> None:
    assert run([str(elf_file), "my_struct", "--offset", "18", "--new-arrays"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[1].startswith("  +18: my_struct.matrix[0][1]: 0x00cafe12")


@pytest.mark.unit
def test_symbols_file(elf_file: Path, tmp_path: Path, capsys) -> None:
    symbols_file = tmp_path / "symbols.txt"
    symbols_file.write_text("# calibration\narr[0]\n\nobj.Base._\n")

    assert run([str(elf_file), "--symbols-file", str(symbols_file)]) == 0
    assert len(capsys.readouterr().out.splitlines()) == 2


@pytest.mark.unit
def test_read_symbols_file(tmp_path: Path) -> None:
    symbols_file = tmp_path / "symbols.txt"
    symbols_file.write_text("  a.b  \n# skipped\n\nc[1]\n")

    assert cli.read_symbols_file(symbols_file) == ["a.b", "c[1]"]


@pytest.mark.unit
def test_no_symbols(elf_file: Path) -> None:
    assert run([str(elf_file)]) == 1


@pytest.mark.unit
def test_missing_elf_file(tmp_path: Path, capsys) -> None:
    assert run([str(tmp_path / "missing.elf"), "arr"]) == 1
    assert "Configuration error" in capsys.readouterr().err


@pytest.mark.unit
def test_load_error(elf_file: Path, monkeypatch) -> None:
    def fail(path):
        raise LoadError(path, f"Error: Failed to parse file '{path}'")

    monkeypatch.setattr(cli, "load_debug_data", fail)

    assert run([str(elf_file), "arr"]) == 1


@pytest.mark.unit
def test_log_dir_is_created(elf_file: Path, tmp_path: Path) -> None:
    log_dir = tmp_path / "logs" / "nested"

    assert run([str(elf_file), "arr", "--log-dir", str(log_dir)]) == 0

    log_files = list(log_dir.glob("dwarf_symbol_resolver_*.log"))
    assert len(log_files) == 1
    assert LoggerSetup.get_log_file_path() == log_files[0]
