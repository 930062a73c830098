"""Unit tests for configuration loading and validation."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import comment_translate.config as config
from comment_translate.config import (
    DEFAULT_CACHE_ENTRIES,
    DEFAULT_MAX_LENGTH,
    AppConfig,
    HoverConfig,
    clamp_capacity,
    generate_config,
    load_config,
    parse_config,
    system_language,
)


class TestParseConfig:
    """Test building AppConfig from raw TOML data."""

    def test_empty_document_gives_defaults(self, monkeypatch) -> None:
        """Test missing sections fall back to defaults."""
        monkeypatch.setenv("LC_ALL", "")
        monkeypatch.setenv("LC_MESSAGES", "")
        monkeypatch.setenv("LANG", "")

        cfg = parse_config({})

        assert cfg == AppConfig()
        assert cfg.translate.service == "google"
        assert cfg.translate.target_language == "en"
        assert cfg.translate.source_language is None
        assert cfg.translate.max_length == DEFAULT_MAX_LENGTH
        assert cfg.translate.timeout is None
        assert cfg.hover.enabled and cfg.hover.auto and cfg.hover.loading
        assert cfg.hover.delay == 500
        assert cfg.immersive.enabled is False
        assert cfg.cache.enabled is True
        assert cfg.cache.max_entries == DEFAULT_CACHE_ENTRIES
        assert cfg.targets.comment and cfg.targets.string

    def test_explicit_values(self) -> None:
        """Test explicit values are carried through."""
        cfg = parse_config(
            {
                "translate": {
                    "service": "codebuddy",
                    "target_language": "ja",
                    "source_language": "en",
                    "max_length": 200,
                    "timeout": 15,
                },
                "hover": {"enabled": False, "auto": False, "delay": 250, "loading": False},
                "immersive": {"enabled": True},
                "cache": {"enabled": False, "max_entries": 10},
                "targets": {"comment": True, "string": False},
            }
        )

        assert cfg.translate.service == "codebuddy"
        assert cfg.translate.target_language == "ja"
        assert cfg.translate.source_language == "en"
        assert cfg.translate.max_length == 200
        assert cfg.translate.timeout == 15.0
        assert cfg.hover == HoverConfig(enabled=False, auto=False, delay=250, loading=False)
        assert cfg.immersive.enabled is True
        assert cfg.cache.enabled is False
        assert cfg.cache.max_entries == 10
        assert cfg.targets.string is False

    @pytest.mark.parametrize("max_entries", [0, -5])
    def test_cache_capacity_clamped(self, max_entries: int) -> None:
        """Test non-positive cache capacities become 1."""
        cfg = parse_config({"cache": {"max_entries": max_entries}})

        assert cfg.cache.max_entries == 1

    def test_non_numeric_capacity_uses_default(self) -> None:
        """Test a non-integer capacity falls back to the default."""
        cfg = parse_config({"cache": {"max_entries": "lots"}})

        assert cfg.cache.max_entries == DEFAULT_CACHE_ENTRIES

    @pytest.mark.parametrize("max_length", [0, -1, True])
    def test_invalid_max_length_uses_default(self, max_length) -> None:
        """Test invalid max_length values fall back to the default."""
        cfg = parse_config({"translate": {"max_length": max_length}})

        assert cfg.translate.max_length == DEFAULT_MAX_LENGTH

    @pytest.mark.parametrize("timeout", [0, -3, "soon", False])
    def test_invalid_timeout_ignored(self, timeout) -> None:
        """Test invalid timeouts mean no timeout."""
        cfg = parse_config({"translate": {"timeout": timeout}})

        assert cfg.translate.timeout is None

    def test_negative_delay_becomes_zero(self) -> None:
        """Test a negative hover delay is clamped to 0."""
        cfg = parse_config({"hover": {"delay": -100}})

        assert cfg.hover.delay == 0
        assert cfg.hover.delay_seconds == 0

    def test_delay_seconds(self) -> None:
        """Test the delay is exposed in seconds for the scheduler."""
        assert HoverConfig(delay=250).delay_seconds == 0.25

    def test_empty_source_language_means_auto(self) -> None:
        """Test an empty source language is treated as auto-detect."""
        cfg = parse_config({"translate": {"source_language": ""}})

        assert cfg.translate.source_language is None


class TestHelpers:
    """Test small config helpers."""

    def test_clamp_capacity(self) -> None:
        assert clamp_capacity(0) == 1
        assert clamp_capacity(-1) == 1
        assert clamp_capacity(1) == 1
        assert clamp_capacity(42) == 42

    def test_system_language_from_locale(self, monkeypatch) -> None:
        """Test the language code is taken from the first set locale variable."""
        monkeypatch.setenv("LC_ALL", "")
        monkeypatch.setenv("LC_MESSAGES", "")
        monkeypatch.setenv("LANG", "ja_JP.UTF-8")

        assert system_language() == "ja"

    def test_system_language_ignores_c_locale(self, monkeypatch) -> None:
        """Test the C and POSIX locales fall back to English."""
        monkeypatch.setenv("LC_ALL", "C.UTF-8")
        monkeypatch.setenv("LC_MESSAGES", "POSIX")
        monkeypatch.setenv("LANG", "")

        assert system_language() == "en"


class TestLoadConfig:
    """Test reading the config file."""

    def test_missing_config_is_generated_then_exits(self, capsys) -> None:
        """Test the first run writes the default file and exits."""
        with pytest.raises(SystemExit) as exc_info:
            load_config()

        assert exc_info.value.code == 1
        assert config.CONFIG_PATH.exists()
        assert config.CONFIG_PATH.read_text() == config.DEFAULT_CONFIG
        assert "No config found" in capsys.readouterr().err

    def test_generated_config_loads(self) -> None:
        """Test the generated default file parses to the default values."""
        generate_config()

        cfg = load_config()

        assert cfg.translate.service == "google"
        assert cfg.cache.max_entries == DEFAULT_CACHE_ENTRIES
        assert cfg.hover.delay == 500

    def test_invalid_toml_exits(self, capsys) -> None:
        """Test a malformed file aborts with a helpful message."""
        config.CONFIG_DIR.mkdir(parents=True)
        config.CONFIG_PATH.write_text("[translate\nservice = ")

        with pytest.raises(SystemExit):
            load_config()

        assert "Invalid config file" in capsys.readouterr().err

    def test_env_overrides_file(self, monkeypatch) -> None:
        """Test environment variables win over file values."""
        config.CONFIG_DIR.mkdir(parents=True)
        config.CONFIG_PATH.write_text(
            '[translate]\nservice = "google"\ntarget_language = "de"\n'
        )
        monkeypatch.setenv("COMMENT_TRANSLATE_SERVICE", "codebuddy")
        monkeypatch.setenv("COMMENT_TRANSLATE_TARGET", "fr")
        monkeypatch.setenv("COMMENT_TRANSLATE_SOURCE", "en")

        cfg = load_config()

        assert cfg.translate.service == "codebuddy"
        assert cfg.translate.target_language == "fr"
        assert cfg.translate.source_language == "en"

    def test_result_is_cached_until_reset(self) -> None:
        """Test load_config reads the file once until reset_config()."""
        config.CONFIG_DIR.mkdir(parents=True)
        config.CONFIG_PATH.write_text('[translate]\ntarget_language = "de"\n')
        first = load_config()

        config.CONFIG_PATH.write_text('[translate]\ntarget_language = "it"\n')
        assert load_config() is first

        config.reset_config()
        assert load_config().translate.target_language == "it"
