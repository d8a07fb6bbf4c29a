"""Runtime configuration for the symbolizer tools.

Settings come from the environment. ``load_config()`` first pulls in a
local ``.env`` file via python-dotenv, so a project can pin its target
module or symbol server without exporting variables.
"""
from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_TARGET_MODULE = "UnityFramework"
DEFAULT_SYMBOL_SERVER = "https://symbols.mozilla.org/"

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUE_VALUES


@dataclass
class SymbolizerConfig:
    """Settings shared by the lookup, symbolicate and fetch commands."""
    target_module: str = DEFAULT_TARGET_MODULE
    skip_malformed: bool = False
    symbol_server: str = DEFAULT_SYMBOL_SERVER
    cache_dir: Path = Path(tempfile.gettempdir()) / "breakpad_symbols"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'SymbolizerConfig':
        """Build a config from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ
        config = cls()

        if env.get("BREAKPAD_TARGET_MODULE"):
            config.target_module = env["BREAKPAD_TARGET_MODULE"]
        if env.get("BREAKPAD_SKIP_MALFORMED"):
            config.skip_malformed = _env_flag(env["BREAKPAD_SKIP_MALFORMED"])
        if env.get("BREAKPAD_SYMBOL_SERVER"):
            config.symbol_server = env["BREAKPAD_SYMBOL_SERVER"]
        if env.get("BREAKPAD_SYMBOL_CACHE"):
            config.cache_dir = Path(env["BREAKPAD_SYMBOL_CACHE"]).expanduser()

        return config


def load_config(dotenv_path: Optional[str] = None) -> SymbolizerConfig:
    """Load ``.env`` (without overriding real environment variables) and read the config."""
    load_dotenv(dotenv_path)
    return SymbolizerConfig.from_env()
