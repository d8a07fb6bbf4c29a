"""Tests for crash report symbolication."""
import io

from breakpad_symbolizer.crash_log import (
    CrashLogSymbolicator,
    parse_frame_line,
    split_line_ending,
)
from breakpad_symbolizer.symbol_file import SymbolFileParser

SYM = """FILE 0 Runtime/Misc/Player.cpp
FUNC 1000 100 0 PlayerLoop()
1000 100 112 0
PUBLIC 5000 0 _unity_public
"""

CRASH_LOG = """Incident Identifier: 0F3A4B6C-1D2E-4F50-8A9B-0C1D2E3F4A5B
Exception Type:  EXC_BAD_ACCESS (SIGSEGV)

Thread 0 Crashed:
0   libsystem_kernel.dylib        0x00000001b1f2e6f0 0x1b1f24000 + 42736
1   UnityFramework                0x0000000104e6a0b4 0x104e69000 + 4128
2   UnityFramework                0x0000000104e6f000 0x104e69000 + 24576
3   UnityFramework                0x0000000104e69010 0x104e69000 + 16
4   Foundation                    0x00000001a2b3c4d5 0x1a2b00000 + 4128
"""


def _symbolicator(module="UnityFramework"):
    sym = SymbolFileParser().parse_lines(SYM.splitlines())
    return CrashLogSymbolicator(sym, module)


def test_parse_frame_line():
    frame = parse_frame_line("1   UnityFramework   0x0000000104e6a0b4 0x104e69000 + 4128")
    assert frame.index == 1
    assert frame.module == "UnityFramework"
    assert frame.mem_address == 0x104e6a0b4
    assert frame.base_address == 0x104e69000
    assert frame.offset == 4128


def test_parse_frame_line_offset_span():
    line = "12 UnityFramework 0xabc 0xa00 + 700  "
    frame = parse_frame_line(line)
    start, end = frame.offset_span
    assert line[start:end] == "700"


def test_parse_frame_line_rejects_other_shapes():
    assert parse_frame_line("") is None
    assert parse_frame_line("Thread 0 Crashed:") is None
    assert parse_frame_line("  1 UnityFramework 0x10 0x0 + 16") is None
    assert parse_frame_line("1 UnityFramework 0x10 0x0 + 0x10") is None
    assert parse_frame_line("1 UnityFramework 10 0x0 + 16") is None
    assert parse_frame_line("1 UnityFramework 0x10 0x0 - 16") is None
    assert parse_frame_line("1 UnityFramework 0x10 0x0 + 16 (Player.cpp:3)") is None
    assert parse_frame_line("1 UnityFramework 0xzz 0x0 + 16") is None


def test_symbolicate_target_frame():
    symbolicator = _symbolicator()
    line = "1   UnityFramework                0x0000000104e6a0b4 0x104e69000 + 4128\n"
    result = symbolicator.symbolicate_line(line)
    assert result == ("1   UnityFramework                0x0000000104e6a0b4 0x104e69000 + "
                      "PlayerLoop() Runtime/Misc/Player.cpp:112\n")


def test_only_offset_field_is_replaced():
    """Digits matching the offset elsewhere in the line are left alone."""
    symbolicator = _symbolicator()
    result = symbolicator.symbolicate_line("4096 UnityFramework 0x4096 0x0 + 4096")
    assert result == "4096 UnityFramework 0x4096 0x0 + PlayerLoop() Runtime/Misc/Player.cpp:112"


def test_public_symbol_frame():
    symbolicator = _symbolicator()
    result = symbolicator.symbolicate_line("2 UnityFramework 0x104e6f000 0x104e69000 + 24576")
    assert result.endswith("+ _unity_public ??:?")


def test_not_found_frame():
    symbolicator = _symbolicator()
    result = symbolicator.symbolicate_line("3 UnityFramework 0x104e69010 0x104e69000 + 16")
    assert result == "3 UnityFramework 0x104e69010 0x104e69000 + Not found symbol for address(0x10)"
    assert symbolicator.stats['frames_unresolved'] == 1


def test_non_matching_lines_unchanged():
    """Other modules and non-frame lines come back byte-for-byte."""
    symbolicator = _symbolicator()
    lines = [
        "Exception Type:  EXC_BAD_ACCESS (SIGSEGV)\r\n",
        "0   libsystem_kernel.dylib        0x00000001b1f2e6f0 0x1b1f24000 + 42736\n",
        "4   Foundation   0x00000001a2b3c4d5 0x1a2b00000 + 4128",
        "\n",
        "   \t  \n",
    ]
    for line in lines:
        assert symbolicator.symbolicate_line(line) == line
    assert symbolicator.stats['frames_matched'] == 0
    assert symbolicator.stats['lines_read'] == len(lines)


def test_symbolicate_file(tmp_path):
    log_path = tmp_path / "crash.ips"
    log_path.write_bytes(CRASH_LOG.replace("\n", "\r\n").encode("utf-8"))

    symbolicator = _symbolicator()
    out = list(symbolicator.symbolicate_file(log_path))

    original = CRASH_LOG.replace("\n", "\r\n").splitlines(True)
    assert len(out) == len(original)
    assert all(line.endswith("\r\n") for line in out)
    assert out[:5] == original[:5]
    assert out[5] == (original[5].replace("+ 4128", "+ PlayerLoop() Runtime/Misc/Player.cpp:112"))
    assert out[8] == original[8]

    assert symbolicator.stats == {
        'lines_read': 9,
        'frames_matched': 3,
        'frames_resolved': 2,
        'frames_unresolved': 1,
    }


def test_write_file(tmp_path):
    log_path = tmp_path / "crash.txt"
    log_path.write_text(CRASH_LOG, encoding="utf-8")

    out = io.StringIO()
    stats = _symbolicator().write_file(log_path, out)
    text = out.getvalue()
    assert "PlayerLoop() Runtime/Misc/Player.cpp:112" in text
    assert "Foundation                    0x00000001a2b3c4d5 0x1a2b00000 + 4128" in text
    assert stats['frames_resolved'] == 2


def test_other_target_module():
    symbolicator = _symbolicator(module="Foundation")
    result = symbolicator.symbolicate_line("4 Foundation 0x1a2b3c4d5 0x1a2b00000 + 4128")
    assert result == "4 Foundation 0x1a2b3c4d5 0x1a2b00000 + PlayerLoop() Runtime/Misc/Player.cpp:112"


def test_extract_offsets():
    offsets = _symbolicator().extract_offsets(CRASH_LOG.splitlines(True))
    assert offsets == [4128, 24576, 16]


def test_split_line_ending():
    assert split_line_ending("abc\r\n") == ("abc", "\r\n")
    assert split_line_ending("abc") == ("abc", "")
    assert split_line_ending("\n") == ("", "\n")


def test_non_ascii_digits_pass_through():
    """Superscript and other-script digits are not frame fields."""
    symbolicator = _symbolicator()
    lines = [
        "1 UnityFramework 0x10 0x0 + ²\n",
        "¹ UnityFramework 0x10 0x0 + 4128\n",
        "1 UnityFramework 0x10 0x0 + ١٦\n",
    ]
    for line in lines:
        assert parse_frame_line(line.rstrip("\n")) is None
        assert symbolicator.symbolicate_line(line) == line
    assert symbolicator.stats['frames_matched'] == 0


def test_default_target_module_matches_config():
    from breakpad_symbolizer.config import DEFAULT_TARGET_MODULE

    sym = SymbolFileParser().parse_lines([])
    assert CrashLogSymbolicator(sym).target_module == DEFAULT_TARGET_MODULE
