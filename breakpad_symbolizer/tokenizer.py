"""Field tokenizer for Breakpad symbol records.

Symbol names may contain the delimiter (demangled C++ signatures with
argument lists), so the last token always absorbs the rest of the line.
"""
from __future__ import annotations

from typing import List


def tokenize(line: str, delimiter: str, max_tokens: int) -> List[str]:
    """
    Split ``line`` into at most ``max_tokens`` tokens, left to right.

    The final token keeps any remaining delimiters un-split. Tokenizing stops
    at the first empty field, so a doubled delimiter or trailing delimiter
    yields fewer tokens; callers treat a short result as a malformed record.

    Args:
        line: Text to split
        delimiter: Field separator
        max_tokens: Maximum number of tokens to produce

    Returns:
        List of tokens (possibly empty)
    """
    if not line or max_tokens <= 0:
        return []

    tokens: List[str] = []
    for part in line.split(delimiter, max_tokens - 1):
        if not part:
            break
        tokens.append(part)
    return tokens


def tokenize_with_optional_field(line: str, optional_field: str,
                                 delimiter: str, max_tokens: int) -> List[str]:
    """
    Tokenize a record that may start with an optional flag token.

    ``max_tokens`` counts the flag. The line is first split as if the flag
    were absent; if the first token turns out to be the flag, the last token
    is split once more so the record keeps all of its fields.
    """
    tokens = tokenize(line, delimiter, max_tokens - 1)

    if tokens and tokens[0] == optional_field:
        last = tokens.pop()
        tokens.extend(tokenize(last, delimiter, 2))

    return tokens
