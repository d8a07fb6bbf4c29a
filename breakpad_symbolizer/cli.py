#!/usr/bin/env python3
"""
Breakpad Symbolizer - command line entry points

    breakpad-symbolizer lookup <symbol file> <address>...
    breakpad-symbolizer symbolicate <symbol file> <crash log>...
    breakpad-symbolizer fetch <debug file> <debug id>

``addr2line-breakpad`` and ``ips-breakpad`` are shortcuts for the first two.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import SymbolizerConfig, load_config
from .console import raw_stdout, safe_print, status
from .crash_log import CrashLogSymbolicator
from .resolver import describe_symbol, lookup_address, not_found_message, parse_address
from .symbol_file import SymbolFile, SymbolParseError, parse_symbol_file
from .symbol_store import SymbolStore, SymbolStoreError


def _missing_files(paths: List[str]) -> List[str]:
    return [p for p in paths if not Path(p).is_file()]


def _load_symbols(path: str, skip_malformed: bool, verbose: bool) -> Optional[SymbolFile]:
    """Parse a symbol file, reporting failures. Returns None on error."""
    try:
        symbol_file = parse_symbol_file(path, skip_malformed=skip_malformed)
    except SymbolParseError as e:
        status(f"[-] Malformed symbol file {path}: {e}")
        return None
    except OSError as e:
        status(f"[-] Could not read symbol file {path}: {e}")
        return None

    status(f"[+] Loaded {symbol_file.summary()}", verbose)
    if symbol_file.parse_errors:
        status(f"[*] Skipped {len(symbol_file.parse_errors)} malformed records", verbose)
        for error in symbol_file.parse_errors[:10]:
            status(f"    {error}", verbose)
    return symbol_file


def cmd_lookup(args, config: SymbolizerConfig) -> int:
    if _missing_files([args.symbol_file]):
        status(f"[-] input file({args.symbol_file}) does not exist")
        return 1

    symbol_file = _load_symbols(args.symbol_file, config.skip_malformed, args.verbose)
    if symbol_file is None:
        return 1

    for address in args.addresses:
        symbol = lookup_address(symbol_file, address)
        if symbol is None:
            safe_print(not_found_message(address))
        else:
            safe_print(f"{address:#x} {describe_symbol(symbol)}")
    return 0


def cmd_symbolicate(args, config: SymbolizerConfig) -> int:
    missing = _missing_files([args.symbol_file] + args.crash_logs)
    if missing:
        for path in missing:
            status(f"[-] input file({path}) does not exist")
        return 1

    symbol_file = _load_symbols(args.symbol_file, config.skip_malformed, args.verbose)
    if symbol_file is None:
        return 1

    symbolicator = CrashLogSymbolicator(symbol_file, config.target_module)
    status(f"[*] Target module: {config.target_module}", args.verbose)

    out = open(args.output, 'w', encoding='utf-8', newline='') if args.output else raw_stdout()
    try:
        for crash_log in args.crash_logs:
            try:
                symbolicator.write_file(crash_log, out)
            except OSError as e:
                status(f"[-] Could not read crash log {crash_log}: {e}")
                return 1
    finally:
        if args.output:
            out.close()

    stats = symbolicator.stats
    status(f"[+] {stats['frames_matched']} frames: {stats['frames_resolved']} resolved, "
           f"{stats['frames_unresolved']} not found", args.verbose)
    if args.output:
        status(f"[+] Results saved to: {args.output}", args.verbose)
    return 0


def cmd_fetch(args, config: SymbolizerConfig) -> int:
    store = SymbolStore(
        server_url=args.server or config.symbol_server,
        cache_dir=args.cache_dir or config.cache_dir,
        verbose=args.verbose,
    )
    try:
        path = store.fetch(args.debug_file, args.debug_id)
    except SymbolStoreError as e:
        status(f"[-] {e}")
        return 1

    if path is None:
        status(f"[-] No symbols for {args.debug_file} {args.debug_id} on {store.server_url}")
        return 1
    safe_print(str(path))
    return 0


def _hex_address(text: str) -> int:
    address = parse_address(text)
    if address is None:
        raise argparse.ArgumentTypeError(f"invalid address: {text!r}")
    return address


def _add_common_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Print progress and statistics to stderr'
    )


def _add_parse_arguments(parser: argparse.ArgumentParser):
    parser.add_argument('symbol_file', help='Breakpad symbol file (.sym)')
    parser.add_argument(
        '--skip-malformed',
        action='store_true',
        default=None,
        help='Skip malformed records instead of aborting (env: BREAKPAD_SKIP_MALFORMED)'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='breakpad-symbolizer',
        description='Resolve addresses with Breakpad symbol files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Look up addresses
  %(prog)s lookup UnityFramework.sym 0x1a2b3c 4d5e6f

  # Symbolicate a crash report
  %(prog)s symbolicate UnityFramework.sym crash.ips --module UnityFramework

  # Download a symbol file from the symbol server
  %(prog)s fetch xul.pdb 44E4EC8C2F41492B9369D6B9A059577C2
        """
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    lookup = subparsers.add_parser('lookup', help='Resolve hex addresses')
    _add_parse_arguments(lookup)
    lookup.add_argument('addresses', nargs='+', type=_hex_address,
                        help='Addresses to look up (hex, 0x prefix optional)')
    _add_common_arguments(lookup)
    lookup.set_defaults(handler=cmd_lookup)

    symbolicate = subparsers.add_parser('symbolicate', help='Rewrite crash report frames')
    _add_parse_arguments(symbolicate)
    symbolicate.add_argument('crash_logs', nargs='+', help='Crash report files')
    symbolicate.add_argument(
        '--module', '-m',
        help='Module whose frames are symbolicated (env: BREAKPAD_TARGET_MODULE)'
    )
    symbolicate.add_argument('--output', '-o', help='Output file (default: stdout)')
    _add_common_arguments(symbolicate)
    symbolicate.set_defaults(handler=cmd_symbolicate)

    fetch = subparsers.add_parser('fetch', help='Download a symbol file into the cache')
    fetch.add_argument('debug_file', help='Debug file name, e.g. xul.pdb')
    fetch.add_argument('debug_id', help='Debug identifier from the MODULE record')
    fetch.add_argument('--server', help='Symbol server URL (env: BREAKPAD_SYMBOL_SERVER)')
    fetch.add_argument('--cache-dir', help='Cache directory (env: BREAKPAD_SYMBOL_CACHE)')
    _add_common_arguments(fetch)
    fetch.set_defaults(handler=cmd_fetch)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config()
    if getattr(args, 'skip_malformed', None):
        config.skip_malformed = True
    if getattr(args, 'module', None):
        config.target_module = args.module

    return args.handler(args, config)


def addr2line_main(argv: Optional[List[str]] = None) -> int:
    """``addr2line-breakpad <symbol file> <address>...``"""
    argv = sys.argv[1:] if argv is None else argv
    return main(['lookup'] + list(argv))


def ips_main(argv: Optional[List[str]] = None) -> int:
    """``ips-breakpad <symbol file> <crash log>...``"""
    argv = sys.argv[1:] if argv is None else argv
    return main(['symbolicate'] + list(argv))


if __name__ == '__main__':
    sys.exit(main())
