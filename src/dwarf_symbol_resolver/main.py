"""Main entry point for the DWARF symbol resolver."""

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from .application import load_debug_data
from .domain.exceptions import LoadError, SymbolResolutionError
from .domain.models.dwarf import DebugData, SymbolInfo
from .domain.services.resolution import SymbolResolver
from .infrastructure.config import Config
from .infrastructure.logging import LoggerSetup, get_logger, log_timing


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Resolve symbol expressions to addresses and types using the "
        "DWARF debug info of an ELF file",
        epilog="""
Examples:
  # Resolve a struct member and an array element
  python main.py firmware.elf motortune.param._0_ "calib.table[3][1]"

  # Pick one of several static variables named 'counter'
  python main.py firmware.elf "counter{Function:init}{CompileUnit:main_c}"

  # Name the component 12 bytes into a struct
  python main.py firmware.elf calib --offset 12

  # Resolve every symbol listed in a file
  python main.py firmware.elf --symbols-file symbols.txt

  # Using .env file for configuration
  echo 'ELF_FILE_PATH=firmware.elf' > .env
  python main.py --symbols-file symbols.txt
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "elf_file",
        type=Path,
        nargs="?",
        help="Path to the ELF file (optional if ELF_FILE_PATH is set)",
    )
    parser.add_argument(
        "symbols",
        nargs="*",
        metavar="SYMBOL",
        help="Symbol expressions to resolve",
    )
    parser.add_argument(
        "--symbols-file",
        type=Path,
        metavar="FILE",
        help="Read symbol expressions from file (one per line, '#' starts a comment)",
    )
    parser.add_argument(
        "--offset",
        type=lambda value: int(value, 0),
        metavar="N",
        help="Also report the component starting N bytes into each symbol",
    )
    parser.add_argument(
        "--new-arrays",
        action="store_true",
        default=None,
        help="Name array elements as [N] instead of ._N_",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        help="Write a debug log file into this directory",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose output with debug logs",
    )
    return parser.parse_args(argv)


def read_symbols_file(path: Path) -> list[str]:
    symbols = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                symbols.append(line)
    return symbols


def format_symbol(symbol: SymbolInfo, debug_data: DebugData) -> str:
    """Render a resolved symbol as one line of output."""
    parts = [
        f"{symbol.name}: 0x{symbol.address:08x}",
        symbol.typeinfo.describe(),
        f"size={symbol.typeinfo.get_size()}",
    ]
    unit_name = debug_data.get_unit_name(symbol.unit_idx)
    if unit_name:
        parts.append(f"unit={unit_name}")
    if symbol.function_name:
        parts.append(f"function={symbol.function_name}")
    if symbol.namespaces:
        parts.append(f"namespace={'::'.join(symbol.namespaces)}")
    section = debug_data.find_section(symbol.address)
    if section:
        parts.append(f"section={section}")
    if not symbol.is_unique:
        parts.append("(ambiguous name)")
    return "  ".join(parts)


@log_timing
def main(argv: list[str] | None = None) -> NoReturn:
    """Resolve the given symbol expressions and print one line per result."""
    args = parse_args(argv)

    try:
        config = Config.from_args(
            elf_file_path=args.elf_file,
            verbose=args.verbose,
            log_dir=args.log_dir,
            use_new_arrays=args.new_arrays,
        )
        config.validate()
        config.ensure_log_dir()
    except (ValueError, OSError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    LoggerSetup.initialize(config.log_dir, verbose=config.verbose)
    logger = get_logger(__name__)
    log_file = LoggerSetup.get_log_file_path()
    if log_file is not None:
        logger.info(f"Writing debug log to {log_file}")

    symbols = list(args.symbols)
    if args.symbols_file:
        try:
            symbols.extend(read_symbols_file(args.symbols_file))
        except OSError as e:
            logger.error(f"Error reading symbols file: {e}")
            sys.exit(1)
        logger.info(f"Read symbols from {args.symbols_file}")

    if not symbols:
        logger.error("No symbols provided")
        sys.exit(1)

    try:
        debug_data = load_debug_data(config.elf_file_path)
    except LoadError as e:
        logger.error(str(e))
        sys.exit(1)

    resolver = SymbolResolver(debug_data, use_new_arrays=config.use_new_arrays)
    failed_symbols = []

    for expression in symbols:
        try:
            symbol = resolver.resolve(expression)
            print(format_symbol(symbol, debug_data))
            if args.offset is not None:
                component = resolver.resolve_by_offset(symbol, args.offset)
                print(f"  +{args.offset}: {format_symbol(component, debug_data)}")
        except SymbolResolutionError as e:
            logger.error(f"[FAILED] {expression}: {e}")
            failed_symbols.append(expression)

    logger.info(f"Resolved {len(symbols) - len(failed_symbols)} of {len(symbols)} symbols")
    sys.exit(0 if not failed_symbols else 1)


if __name__ == "__main__":
    main()
