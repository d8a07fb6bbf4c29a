"""Console output helpers."""
import sys


def safe_print(msg: str, file=None):
    """Print message safely, handling unicode encoding issues on Windows."""
    stream = file or sys.stdout
    try:
        print(msg, file=stream)
    except UnicodeEncodeError:
        # Fallback: re-encode with errors='replace'
        encoding = getattr(stream, 'encoding', None) or 'utf-8'
        print(msg.encode(encoding, errors='replace').decode(encoding, errors='replace'), file=stream)


def status(msg: str, verbose: bool = True):
    """Status line on stderr, so stdout only carries symbolicated output."""
    if verbose:
        safe_print(msg, file=sys.stderr)


def raw_stdout():
    """
    Return stdout set up for passing text through unchanged.

    Characters the console cannot encode are replaced instead of raising,
    and no newline translation happens, so ``\\r\\n`` stays ``\\r\\n``.
    """
    stream = sys.stdout
    reconfigure = getattr(stream, 'reconfigure', None)
    if reconfigure is not None:
        reconfigure(errors='replace', newline='')
    return stream
