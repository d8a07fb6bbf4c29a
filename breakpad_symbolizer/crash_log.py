"""Crash log symbolication.

Rewrites the binary-image frames of an Apple-style crash report, e.g.::

    3   UnityFramework   0x0000000104e6a0b4 0x103d58000 + 17899700

The trailing decimal offset is relative to the module's load base, which is
the same address space the symbol file uses, so it is looked up directly
and replaced with ``<function> <file>:<line>``. Every other line is passed
through untouched.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, TextIO, Tuple, Union

from .config import DEFAULT_TARGET_MODULE
from .resolver import describe_symbol, lookup_address, not_found_message
from .symbol_file import SymbolFile

_DEC_DIGITS = frozenset("0123456789")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


@dataclass
class CrashFrame:
    """One parsed frame line: ``<index> <module> 0x<mem> 0x<base> + <offset>``."""
    index: int
    module: str
    mem_address: int
    base_address: int
    offset: int
    # Position of the offset text within the line
    offset_span: Tuple[int, int] = (0, 0)


def _is_decimal(token: str) -> bool:
    # ASCII only; str.isdigit() also accepts superscripts and other scripts
    return bool(token) and set(token) <= _DEC_DIGITS


def _parse_prefixed_hex(token: str) -> Optional[int]:
    if not token.startswith("0x"):
        return None
    digits = token[2:]
    if not digits or not set(digits) <= _HEX_DIGITS:
        return None
    return int(digits, 16)


def split_line_ending(line: str) -> Tuple[str, str]:
    """Split ``line`` into its body and its original line terminator."""
    body = line.rstrip("\r\n")
    return body, line[len(body):]


def parse_frame_line(line: str) -> Optional[CrashFrame]:
    """
    Parse a single frame line, or return None if it does not have the shape
    ``<index> <module> 0x<mem_address> 0x<base> + <offset>``.

    Fields are whitespace separated. The index and offset are decimal, the
    two addresses are hex with a mandatory ``0x`` prefix. The line must start
    with the index and end with the offset (trailing whitespace allowed).
    """
    if not line or line[0] not in _DEC_DIGITS:
        return None

    tokens = line.split()
    if len(tokens) != 6:
        return None

    index, module, mem_text, base_text, plus, offset_text = tokens
    if plus != "+" or not _is_decimal(index) or not _is_decimal(offset_text):
        return None

    mem_address = _parse_prefixed_hex(mem_text)
    base_address = _parse_prefixed_hex(base_text)
    if mem_address is None or base_address is None:
        return None

    end = len(line.rstrip())
    start = end - len(offset_text)

    return CrashFrame(
        index=int(index),
        module=module,
        mem_address=mem_address,
        base_address=base_address,
        offset=int(offset_text),
        offset_span=(start, end),
    )


class CrashLogSymbolicator:
    """
    Symbolicates the frames of one module in crash reports.

    Lines are processed strictly in order and emitted as soon as they are
    rewritten, so large reports stream through without being buffered.
    """

    def __init__(self, symbol_file: SymbolFile, target_module: str = DEFAULT_TARGET_MODULE):
        self.symbol_file = symbol_file
        self.target_module = target_module

        self.stats = {
            'lines_read': 0,
            'frames_matched': 0,
            'frames_resolved': 0,
            'frames_unresolved': 0,
        }

    def _target_frame(self, body: str) -> Optional[CrashFrame]:
        frame = parse_frame_line(body)
        if frame is None or frame.module != self.target_module:
            return None
        return frame

    def symbolicate_line(self, line: str) -> str:
        """Return ``line`` with the target module's offset replaced by its symbol."""
        self.stats['lines_read'] += 1

        body, ending = split_line_ending(line)
        frame = self._target_frame(body)
        if frame is None:
            return line

        self.stats['frames_matched'] += 1
        symbol = lookup_address(self.symbol_file, frame.offset)
        if symbol is None:
            self.stats['frames_unresolved'] += 1
            description = not_found_message(frame.offset)
        else:
            self.stats['frames_resolved'] += 1
            description = describe_symbol(symbol)

        start, end = frame.offset_span
        return body[:start] + description + body[end:] + ending

    def symbolicate_lines(self, lines: Iterable[str]) -> Iterator[str]:
        for line in lines:
            yield self.symbolicate_line(line)

    def symbolicate_file(self, path: Union[str, Path]) -> Iterator[str]:
        """
        Yield the symbolicated lines of the crash log at ``path``.

        Line endings are preserved exactly (the file is opened with
        ``newline=''``), so untouched lines are reproduced as they were.
        """
        with open(path, 'r', encoding='utf-8', errors='replace', newline='') as f:
            yield from self.symbolicate_lines(f)

    def write_file(self, path: Union[str, Path], out: TextIO) -> Dict[str, int]:
        """Symbolicate ``path`` into ``out`` and return the running stats."""
        for line in self.symbolicate_file(path):
            out.write(line)
        out.flush()
        return self.stats

    def extract_offsets(self, lines: Iterable[str]) -> List[int]:
        """Offsets of the target module's frames, in order of appearance."""
        offsets = []
        for line in lines:
            frame = self._target_frame(split_line_ending(line)[0])
            if frame is not None:
                offsets.append(frame.offset)
        return offsets
