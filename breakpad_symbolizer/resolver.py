"""Address to symbol resolution against a parsed Breakpad symbol file."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .symbol_file import SymbolFile

UNKNOWN_FILE = "??"
UNKNOWN_LINE = "?"


@dataclass
class ResolvedSymbol:
    """Result of a single address lookup."""
    function_name: str
    source_file_name: str = ""
    source_line: int = -1  # -1 when no line record covers the address

    @property
    def has_line_info(self) -> bool:
        return self.source_line != -1


def lookup_address(symbol_file: SymbolFile, address: int) -> Optional[ResolvedSymbol]:
    """
    Resolve ``address`` to a symbol.

    A FUNC range containing the address always wins; its line record (if
    any) supplies the source file and line. Only when no function contains
    the address is the nearest PUBLIC symbol at or below it used. Public
    symbols have no known size, so every address past one is attributed to
    it until the next public symbol starts.

    Args:
        symbol_file: Parsed symbol file
        address: Module-relative address

    Returns:
        ResolvedSymbol, or None when nothing covers the address
    """
    function = symbol_file.functions.retrieve(address)
    if function is not None:
        symbol = ResolvedSymbol(function_name=function.name)

        line = symbol_file.lines.retrieve(address)
        if line is not None:
            symbol.source_line = line.line_number
            symbol.source_file_name = symbol_file.files.get(line.file_id, "")
        return symbol

    public_symbol = symbol_file.public_symbols.retrieve(address)
    if public_symbol is not None:
        return ResolvedSymbol(function_name=public_symbol.name)

    return None


def parse_address(text: str) -> Optional[int]:
    """Parse a hex address with or without a ``0x`` prefix. None if invalid."""
    text = text.strip()
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if not text or not all(c in "0123456789abcdefABCDEF" for c in text):
        return None
    return int(text, 16)


def describe_symbol(symbol: ResolvedSymbol) -> str:
    """Render ``<function> <file>:<line>``, with ?? / ? for unknown parts."""
    source_file = symbol.source_file_name or UNKNOWN_FILE
    source_line = str(symbol.source_line) if symbol.has_line_info else UNKNOWN_LINE
    return f"{symbol.function_name} {source_file}:{source_line}"


def not_found_message(address: int) -> str:
    return f"Not found symbol for address({address:#x})"


def symbolize(symbol_file: SymbolFile, address: int) -> str:
    """Look up ``address`` and return its description or the not-found message."""
    symbol = lookup_address(symbol_file, address)
    if symbol is None:
        return not_found_message(address)
    return describe_symbol(symbol)
