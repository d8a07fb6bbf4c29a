"""Breakpad symbol server client.

Symbol servers lay out text symbol files as::

    <debug_file>/<debug_id>/<debug_file without .pdb>.sym

e.g. ``xul.pdb/44E4EC8C2F41492B9369D6B9A059577C2/xul.sym``. Downloaded files
are cached under the same layout so repeated runs work offline.
"""
from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import DEFAULT_SYMBOL_SERVER
from .console import status


class SymbolStoreError(ValueError):
    """Invalid request to the symbol store."""


def symbol_file_name(debug_file: str) -> str:
    """``xul.pdb`` -> ``xul.sym``, ``libfoo.so`` -> ``libfoo.so.sym``."""
    if debug_file.lower().endswith(".pdb"):
        return debug_file[:-4] + ".sym"
    return debug_file + ".sym"


class SymbolStore:
    """
    Downloads Breakpad text symbol files and keeps a local cache.

    Network problems are not raised: ``fetch`` returns None and counts the
    failure in ``stats``.
    """

    USER_AGENT = "BreakpadSymbolizer/1.0 (Symbol Download)"

    def __init__(self, server_url: str = DEFAULT_SYMBOL_SERVER,
                 cache_dir: Optional[Union[str, Path]] = None,
                 timeout: int = 30, verbose: bool = False):
        """
        Initialize the symbol store.

        Args:
            server_url: Base URL of the Breakpad symbol server
            cache_dir: Directory to cache downloaded symbols. Defaults to temp directory.
            timeout: Per-request timeout in seconds
            verbose: Print download progress to stderr
        """
        self.server_url = server_url.rstrip('/') + '/'
        if cache_dir:
            self.cache_dir = Path(cache_dir)
        else:
            self.cache_dir = Path(tempfile.gettempdir()) / "breakpad_symbols"
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        self.timeout = timeout
        self.verbose = verbose
        self._session: Optional[requests.Session] = None

        self.stats = {
            'symbols_downloaded': 0,
            'symbols_cached': 0,
            'symbols_failed': 0,
        }

    def _get_session(self) -> requests.Session:
        """Get or create HTTP session with retry configuration."""
        if self._session is None:
            self._session = requests.Session()
            retry_strategy = Retry(
                total=3,
                backoff_factor=0.5,
                status_forcelist=[429, 500, 502, 503, 504],
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
            self._session.headers.update({'User-Agent': self.USER_AGENT})
        return self._session

    def _log(self, message: str):
        status(message, self.verbose)

    @staticmethod
    def symbol_path(debug_file: str, debug_id: str) -> str:
        """Relative server/cache path for a module's symbol file."""
        if not debug_file or not debug_id:
            raise SymbolStoreError("debug_file and debug_id are required")
        for part in (debug_file, debug_id):
            if '/' in part or '\\' in part or part in ('.', '..'):
                raise SymbolStoreError(f"invalid module identity {debug_file!r} {debug_id!r}")
        return f"{debug_file}/{debug_id.upper()}/{symbol_file_name(debug_file)}"

    def cached_path(self, debug_file: str, debug_id: str) -> Path:
        return self.cache_dir / self.symbol_path(debug_file, debug_id)

    def fetch(self, debug_file: str, debug_id: str) -> Optional[Path]:
        """
        Return a local path to the symbol file, downloading it if needed.

        Args:
            debug_file: Debug file name from the MODULE record (e.g. ``xul.pdb``)
            debug_id: Debug identifier from the MODULE record

        Returns:
            Path to the cached .sym file, or None if it could not be downloaded
        """
        relative = self.symbol_path(debug_file, debug_id)
        cached = self.cache_dir / relative
        if cached.exists():
            self.stats['symbols_cached'] += 1
            self._log(f"[+] {debug_file} (cached)")
            return cached

        url = self.server_url + relative
        self._log(f"[*] Downloading {url}")

        try:
            response = self._get_session().get(url, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            self.stats['symbols_failed'] += 1
            self._log(f"[-] Download failed: {type(e).__name__}: {e}")
            return None

        with response:
            if response.status_code != 200:
                self.stats['symbols_failed'] += 1
                self._log(f"[-] HTTP {response.status_code} for {url}")
                return None

            cached.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(suffix='.sym', dir=str(cached.parent))
            try:
                with os.fdopen(fd, 'wb') as f:
                    for chunk in response.iter_content(8192):
                        f.write(chunk)
                os.replace(tmp, cached)
            except (OSError, requests.RequestException) as e:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                self.stats['symbols_failed'] += 1
                self._log(f"[-] Download failed: {type(e).__name__}: {e}")
                return None

        self.stats['symbols_downloaded'] += 1
        self._log(f"[+] Cached to: {cached}")
        return cached

    def get_statistics(self) -> Dict[str, Any]:
        return dict(self.stats)

    def clear_cache(self):
        """Clear the symbol cache directory."""
        shutil.rmtree(self.cache_dir, ignore_errors=True)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
