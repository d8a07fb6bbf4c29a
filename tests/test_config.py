"""Tests for environment configuration."""
from pathlib import Path

from breakpad_symbolizer.config import (
    DEFAULT_SYMBOL_SERVER,
    DEFAULT_TARGET_MODULE,
    SymbolizerConfig,
    load_config,
)


def test_defaults():
    config = SymbolizerConfig.from_env({})
    assert config.target_module == DEFAULT_TARGET_MODULE == "UnityFramework"
    assert config.skip_malformed is False
    assert config.symbol_server == DEFAULT_SYMBOL_SERVER


def test_from_env():
    config = SymbolizerConfig.from_env({
        "BREAKPAD_TARGET_MODULE": "MyGame",
        "BREAKPAD_SKIP_MALFORMED": "Yes",
        "BREAKPAD_SYMBOL_SERVER": "https://symbols.example.com/",
        "BREAKPAD_SYMBOL_CACHE": "/var/cache/symbols",
    })
    assert config.target_module == "MyGame"
    assert config.skip_malformed is True
    assert config.symbol_server == "https://symbols.example.com/"
    assert config.cache_dir == Path("/var/cache/symbols")


def test_skip_malformed_false_values():
    for value in ("0", "false", "off", "no"):
        assert SymbolizerConfig.from_env({"BREAKPAD_SKIP_MALFORMED": value}).skip_malformed is False


def test_load_config_reads_dotenv(tmp_path, monkeypatch):
    monkeypatch.delenv("BREAKPAD_TARGET_MODULE", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("BREAKPAD_TARGET_MODULE=FromDotenv\n")

    config = load_config(str(env_file))
    assert config.target_module == "FromDotenv"
    monkeypatch.delenv("BREAKPAD_TARGET_MODULE", raising=False)


def test_environment_wins_over_dotenv(tmp_path, monkeypatch):
    monkeypatch.setenv("BREAKPAD_TARGET_MODULE", "FromEnv")
    env_file = tmp_path / ".env"
    env_file.write_text("BREAKPAD_TARGET_MODULE=FromDotenv\n")

    assert load_config(str(env_file)).target_module == "FromEnv"
