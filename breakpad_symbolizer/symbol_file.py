"""Breakpad symbol file parsing.

This module turns a textual Breakpad symbol file into a ``SymbolFile``:
a file-id map, range indexes for FUNC and line records, and a point index
for PUBLIC symbols.

Record layouts (https://chromium.googlesource.com/breakpad/breakpad/+/master/docs/symbol_files.md):

    MODULE <os> <arch> <id> <name>
    FILE <id> <name>
    FUNC [m] <address> <size> <stack_param_size> <name>
    PUBLIC [m] <address> <stack_param_size> <name>
    <address> <size> <line> <file_id>

Addresses, sizes and stack parameter sizes are hex; line numbers and file
ids are decimal.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .range_map import AddressMap, RangeMap
from .tokenizer import tokenize, tokenize_with_optional_field

_HEX_RE = re.compile(r'[0-9a-fA-F]+')
_DEC_RE = re.compile(r'[+-]?[0-9]+')

MULTIPLE_FLAG = "m"

# Records that carry no lookup data for us
IGNORED_PREFIXES = ("STACK ", "INFO ", "INLINE ", "INLINE_ORIGIN ")


class SymbolParseError(ValueError):
    """A malformed record in a symbol file."""

    def __init__(self, reason: str, line_number: int = 0, line: str = ""):
        self.reason = reason
        self.line_number = line_number
        self.line = line
        if line_number:
            message = f"line {line_number}: {reason}: {line!r}"
        else:
            message = f"{reason}: {line!r}"
        super().__init__(message)


@dataclass
class ModuleInfo:
    """Identity of the module a symbol file describes (MODULE record)."""
    os: str
    arch: str
    debug_id: str
    debug_file: str


@dataclass
class FunctionRecord:
    """A FUNC record: a contiguous code range attributed to one function."""
    address: int
    size: int
    stack_param_size: int
    name: str
    is_multiple: bool = False


@dataclass
class LineRecord:
    """A line record: a sub-range of a function attributed to one source line."""
    address: int
    size: int
    line_number: int
    file_id: int


@dataclass
class PublicSymbol:
    """A PUBLIC record. Only the start address is known, not the extent."""
    address: int
    stack_param_size: int
    name: str
    is_multiple: bool = False


@dataclass
class SymbolFile:
    """Parsed contents of one Breakpad symbol file."""
    files: Dict[int, str] = field(default_factory=dict)
    functions: RangeMap[FunctionRecord] = field(default_factory=RangeMap)
    lines: RangeMap[LineRecord] = field(default_factory=RangeMap)
    public_symbols: AddressMap[PublicSymbol] = field(default_factory=AddressMap)
    module: Optional[ModuleInfo] = None

    # Malformed records skipped while parsing with skip_malformed=True
    parse_errors: List[SymbolParseError] = field(default_factory=list)

    def summary(self) -> str:
        """One-line description of what was loaded."""
        name = self.module.debug_file if self.module else "<unknown module>"
        return (f"{name}: {len(self.functions)} functions, {len(self.lines)} lines, "
                f"{len(self.public_symbols)} public symbols, {len(self.files)} files")


def _parse_hex(text: str, what: str) -> int:
    if not _HEX_RE.fullmatch(text):
        raise SymbolParseError(f"invalid hex {what} {text!r}")
    return int(text, 16)


def _parse_dec(text: str, what: str) -> int:
    if not _DEC_RE.fullmatch(text):
        raise SymbolParseError(f"invalid decimal {what} {text!r}")
    return int(text, 10)


def _require(tokens: List[str], count: int, record: str) -> None:
    if len(tokens) < count:
        raise SymbolParseError(f"{record} record needs {count} fields, got {len(tokens)}")


class SymbolFileParser:
    """
    Line-oriented parser that populates a ``SymbolFile``.

    By default the first malformed record aborts the parse with
    ``SymbolParseError``. With ``skip_malformed=True`` the error is kept in
    ``SymbolFile.parse_errors`` and parsing continues with the next line.
    """

    def __init__(self, skip_malformed: bool = False):
        self.skip_malformed = skip_malformed

    def parse_lines(self, lines: Iterable[str]) -> SymbolFile:
        """Parse an iterable of text lines into a new ``SymbolFile``."""
        symbol_file = SymbolFile()

        for line_number, raw in enumerate(lines, start=1):
            line = raw.rstrip()
            if not line:
                continue

            try:
                self.parse_record(symbol_file, line)
            except SymbolParseError as e:
                error = SymbolParseError(e.reason, line_number, line)
                if not self.skip_malformed:
                    raise error from None
                symbol_file.parse_errors.append(error)

        return symbol_file

    def parse_file(self, path: Union[str, Path]) -> SymbolFile:
        """Parse the symbol file at ``path``. I/O errors propagate."""
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            return self.parse_lines(f)

    def parse_record(self, symbol_file: SymbolFile, line: str) -> None:
        """Dispatch a single non-empty record by its prefix."""
        if line.startswith("FILE "):
            self._parse_file_record(symbol_file, line[5:].strip())
        elif line.startswith("FUNC "):
            self._parse_func_record(symbol_file, line[5:].strip())
        elif line.startswith("PUBLIC "):
            self._parse_public_record(symbol_file, line[7:].strip())
        elif line.startswith("MODULE "):
            self._parse_module_record(symbol_file, line[7:].strip())
        elif line.startswith(IGNORED_PREFIXES):
            pass
        else:
            self._parse_line_record(symbol_file, line.strip())

    def _parse_module_record(self, symbol_file: SymbolFile, text: str) -> None:
        # MODULE <os> <arch> <id> <name>
        # Metadata only: a short header is left unrecorded, never an error
        tokens = tokenize(text, " ", 4)
        if len(tokens) < 4:
            return
        symbol_file.module = ModuleInfo(
            os=tokens[0], arch=tokens[1], debug_id=tokens[2], debug_file=tokens[3],
        )

    def _parse_file_record(self, symbol_file: SymbolFile, text: str) -> None:
        # FILE <id> <filename>
        tokens = tokenize(text, " ", 2)
        _require(tokens, 2, "FILE")
        file_id = _parse_dec(tokens[0], "file id")
        symbol_file.files[file_id] = tokens[1]

    def _parse_func_record(self, symbol_file: SymbolFile, text: str) -> None:
        # FUNC [m] <address> <size> <stack_param_size> <name>
        tokens = tokenize_with_optional_field(text, MULTIPLE_FLAG, " ", 5)
        is_multiple = bool(tokens) and tokens[0] == MULTIPLE_FLAG
        if is_multiple:
            tokens = tokens[1:]
        _require(tokens, 4, "FUNC")

        function = FunctionRecord(
            address=_parse_hex(tokens[0], "address"),
            size=_parse_hex(tokens[1], "size"),
            stack_param_size=_parse_hex(tokens[2], "stack param size"),
            name=tokens[3],
            is_multiple=is_multiple,
        )
        symbol_file.functions.insert(function.address, function.size, function)

    def _parse_public_record(self, symbol_file: SymbolFile, text: str) -> None:
        # PUBLIC [m] <address> <stack_param_size> <name>
        tokens = tokenize_with_optional_field(text, MULTIPLE_FLAG, " ", 4)
        is_multiple = bool(tokens) and tokens[0] == MULTIPLE_FLAG
        if is_multiple:
            tokens = tokens[1:]
        _require(tokens, 3, "PUBLIC")

        public_symbol = PublicSymbol(
            address=_parse_hex(tokens[0], "address"),
            stack_param_size=_parse_hex(tokens[1], "stack param size"),
            name=tokens[2],
            is_multiple=is_multiple,
        )
        symbol_file.public_symbols.insert(public_symbol.address, public_symbol)

    def _parse_line_record(self, symbol_file: SymbolFile, text: str) -> None:
        # <address> <size> <line number> <source file id>
        tokens = tokenize(text, " ", 4)
        _require(tokens, 4, "line")

        record = LineRecord(
            address=_parse_hex(tokens[0], "address"),
            size=_parse_hex(tokens[1], "size"),
            line_number=_parse_dec(tokens[2], "line number"),
            file_id=_parse_dec(tokens[3], "file id"),
        )
        symbol_file.lines.insert(record.address, record.size, record)


def parse_symbol_file(path: Union[str, Path], skip_malformed: bool = False) -> SymbolFile:
    """Convenience wrapper around ``SymbolFileParser.parse_file``."""
    return SymbolFileParser(skip_malformed=skip_malformed).parse_file(path)
