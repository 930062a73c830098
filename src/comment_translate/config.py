"""Configuration management for comment-translate.

Loads configuration from ~/.config/comment-translate/config.toml.
Priority chain: CLI flags > env vars > config file > defaults.

Invalid values never abort loading: they are corrected to the nearest safe
value and a warning is logged.
"""

import logging
import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "comment-translate"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_SERVICE = "google"
DEFAULT_MAX_LENGTH = 5000
DEFAULT_HOVER_DELAY_MS = 500
DEFAULT_CACHE_ENTRIES = 1000

DEFAULT_CONFIG = """\
# comment-translate configuration

[translate]
# Service: "google" (web API) or "codebuddy" (local CLI, context-aware prompt)
service = "google"

# Target language code (defaults to the system locale, then "en")
# target_language = "ja"

# Source language code (omit for auto-detection)
# source_language = "en"

# Texts longer than this many bytes (UTF-8) are never sent for translation
max_length = 5000

# Seconds to wait for the backend before giving up (omit to wait forever)
# timeout = 30

[hover]
enabled = true

# Translate automatically when the cursor rests on a comment
auto = true

# Debounce delay in milliseconds
delay = 500

# Show a "Translating..." indicator while waiting for the backend
loading = true

[immersive]
# Annotate every comment line inline when a buffer is entered or saved
enabled = false

[cache]
enabled = true
max_entries = 1000

[targets]
comment = true
string = true
"""


@dataclass(frozen=True)
class TranslateConfig:
    """Translation service configuration."""

    service: str = DEFAULT_SERVICE
    target_language: str = "en"
    source_language: str | None = None
    max_length: int = DEFAULT_MAX_LENGTH
    timeout: float | None = None


@dataclass(frozen=True)
class HoverConfig:
    """Hover translation configuration."""

    enabled: bool = True
    auto: bool = True
    delay: int = DEFAULT_HOVER_DELAY_MS
    loading: bool = True

    @property
    def delay_seconds(self) -> float:
        return self.delay / 1000


@dataclass(frozen=True)
class ImmersiveConfig:
    """Immersive (inline) translation configuration."""

    enabled: bool = False


@dataclass(frozen=True)
class CacheConfig:
    """Translation cache configuration."""

    enabled: bool = True
    max_entries: int = DEFAULT_CACHE_ENTRIES


@dataclass(frozen=True)
class TargetsConfig:
    """Which span kinds are eligible for translation."""

    comment: bool = True
    string: bool = True


@dataclass(frozen=True)
class AppConfig:
    """Top-level comment-translate configuration."""

    translate: TranslateConfig = field(default_factory=TranslateConfig)
    hover: HoverConfig = field(default_factory=HoverConfig)
    immersive: ImmersiveConfig = field(default_factory=ImmersiveConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    targets: TargetsConfig = field(default_factory=TargetsConfig)


_cached_config: AppConfig | None = None


def system_language() -> str:
    """Guess the user's language from the locale environment, e.g. "ja_JP.UTF-8" -> "ja"."""
    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = os.getenv(var, "")
        lang = value.split(".")[0].split("_")[0].lower()
        if lang and lang not in ("c", "posix"):
            return lang
    return "en"


def clamp_capacity(max_entries: int) -> int:
    """Clamp a cache capacity to at least 1."""
    if max_entries < 1:
        logger.warning(f"cache.max_entries must be >= 1, got {max_entries}; using 1")
        return 1
    return max_entries


def _int_setting(section: dict[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int | float):
        logger.warning(f"Invalid value for {key!r}: {value!r}; using {default}")
        return default
    return int(value)


def parse_config(data: dict[str, Any]) -> AppConfig:
    """Build a validated AppConfig from raw TOML data.

    Missing keys take their defaults. Out-of-range values are corrected and
    logged rather than rejected.

    Args:
        data: Parsed TOML document (or any dict with the same shape)

    Returns:
        Validated AppConfig.
    """
    translate = data.get("translate", {})
    hover = data.get("hover", {})
    immersive = data.get("immersive", {})
    cache = data.get("cache", {})
    targets = data.get("targets", {})

    max_length = _int_setting(translate, "max_length", DEFAULT_MAX_LENGTH)
    if max_length < 1:
        logger.warning(
            f"translate.max_length must be positive, got {max_length}; "
            f"using {DEFAULT_MAX_LENGTH}"
        )
        max_length = DEFAULT_MAX_LENGTH

    timeout = translate.get("timeout")
    if timeout is not None and (
        isinstance(timeout, bool) or not isinstance(timeout, int | float) or timeout <= 0
    ):
        logger.warning(f"translate.timeout must be a positive number, got {timeout!r}; ignoring")
        timeout = None

    delay = _int_setting(hover, "delay", DEFAULT_HOVER_DELAY_MS)
    if delay < 0:
        logger.warning(f"hover.delay must be >= 0, got {delay}; using 0")
        delay = 0

    return AppConfig(
        translate=TranslateConfig(
            service=translate.get("service", DEFAULT_SERVICE),
            target_language=translate.get("target_language") or system_language(),
            source_language=translate.get("source_language") or None,
            max_length=max_length,
            timeout=float(timeout) if timeout is not None else None,
        ),
        hover=HoverConfig(
            enabled=bool(hover.get("enabled", True)),
            auto=bool(hover.get("auto", True)),
            delay=delay,
            loading=bool(hover.get("loading", True)),
        ),
        immersive=ImmersiveConfig(enabled=bool(immersive.get("enabled", False))),
        cache=CacheConfig(
            enabled=bool(cache.get("enabled", True)),
            max_entries=clamp_capacity(
                _int_setting(cache, "max_entries", DEFAULT_CACHE_ENTRIES)
            ),
        ),
        targets=TargetsConfig(
            comment=bool(targets.get("comment", True)),
            string=bool(targets.get("string", True)),
        ),
    )


def generate_config() -> Path:
    """Generate default config file at ~/.config/comment-translate/config.toml."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(DEFAULT_CONFIG)
    return CONFIG_PATH


def load_config() -> AppConfig:
    """Load configuration from config file with env var overrides.

    On first run, generates the config file and exits so the user
    can review it before proceeding.

    Returns:
        Loaded and validated AppConfig.

    Raises:
        SystemExit: If config is missing (after generating) or not valid TOML.
    """
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    if not CONFIG_PATH.exists():
        path = generate_config()
        print(
            f"No config found. Generated {path} - review and run again.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    try:
        with open(CONFIG_PATH, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Invalid config file {CONFIG_PATH}: {e}", file=sys.stderr)
        print(f"Edit {CONFIG_PATH} or delete it to regenerate.", file=sys.stderr)
        raise SystemExit(1) from e

    # Env vars override config file values
    translate = dict(data.get("translate", {}))
    for env_var, key in (
        ("COMMENT_TRANSLATE_SERVICE", "service"),
        ("COMMENT_TRANSLATE_TARGET", "target_language"),
        ("COMMENT_TRANSLATE_SOURCE", "source_language"),
    ):
        value = os.getenv(env_var)
        if value:
            translate[key] = value
    data = {**data, "translate": translate}

    _cached_config = parse_config(data)
    return _cached_config


def reset_config() -> None:
    """Forget the cached configuration so the next load_config() re-reads it."""
    global _cached_config
    _cached_config = None
