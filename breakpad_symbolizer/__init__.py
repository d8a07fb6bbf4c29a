"""Breakpad Symbolizer package.

This package resolves module-relative addresses with Breakpad text symbol
files, including:
- Parsing FILE / FUNC / PUBLIC / line records into range indexes
- Address lookup with function+line priority and public symbol fallback
- Crash report symbolication for one target module
- Downloading symbol files from Breakpad symbol servers
"""
from .range_map import AddressMap, RangeMap
from .tokenizer import tokenize, tokenize_with_optional_field
from .symbol_file import (
    SymbolFile,
    SymbolFileParser,
    SymbolParseError,
    ModuleInfo,
    FunctionRecord,
    LineRecord,
    PublicSymbol,
    parse_symbol_file,
)
from .resolver import (
    ResolvedSymbol,
    lookup_address,
    parse_address,
    describe_symbol,
    not_found_message,
    symbolize,
)
from .crash_log import CrashFrame, CrashLogSymbolicator, parse_frame_line
from .config import SymbolizerConfig, load_config
from .symbol_store import SymbolStore, SymbolStoreError

__all__ = [
    # Indexes
    "AddressMap",
    "RangeMap",
    "tokenize",
    "tokenize_with_optional_field",
    # Symbol file
    "SymbolFile",
    "SymbolFileParser",
    "SymbolParseError",
    "ModuleInfo",
    "FunctionRecord",
    "LineRecord",
    "PublicSymbol",
    "parse_symbol_file",
    # Resolver
    "ResolvedSymbol",
    "lookup_address",
    "parse_address",
    "describe_symbol",
    "not_found_message",
    "symbolize",
    # Crash logs
    "CrashFrame",
    "CrashLogSymbolicator",
    "parse_frame_line",
    # Config and symbol server
    "SymbolizerConfig",
    "load_config",
    "SymbolStore",
    "SymbolStoreError",
]

__version__ = "1.0.0"
