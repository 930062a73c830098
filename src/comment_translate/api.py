"""High-level API for comment_translate library usage."""

from .backends import BackendRegistry
from .cache.manager import TranslationCacheManager
from .config import TranslateConfig, system_language
from .translate.pipeline import TranslationPipeline

_shared_cache: TranslationCacheManager | None = None


def get_shared_cache() -> TranslationCacheManager:
    """Process-wide cache used by translate() when no cache is passed."""
    global _shared_cache
    if _shared_cache is None:
        _shared_cache = TranslationCacheManager()
    return _shared_cache


async def translate(
    text: str,
    target: str | None = None,
    source: str | None = None,
    service: str = "google",
    cache: bool = True,
    max_length: int = 5000,
    timeout: float | None = None,
) -> str | None:
    """Translate a piece of text.

    Args:
        text: Text to translate
        target: Target language code (system locale when omitted)
        source: Source language code (auto-detect when omitted)
        service: Backend name ("google" or "codebuddy")
        cache: Whether to use the process-wide translation cache
        max_length: Texts longer than this many UTF-8 bytes are not translated
        timeout: Seconds to wait for the backend (no limit when None)

    Returns:
        Translated text, "" for empty input, None if text exceeds max_length

    Raises:
        BackendUnavailableError: If the service is unknown or its backend cannot be used
        BackendFailureError: If translation fails
    """
    config = TranslateConfig(
        service=service,
        target_language=target or system_language(),
        source_language=source,
        max_length=max_length,
        timeout=timeout,
    )
    cache_manager = (
        get_shared_cache() if cache else TranslationCacheManager(enabled=False)
    )
    pipeline = TranslationPipeline(
        cache_manager, BackendRegistry.resolve(service), config
    )
    return await pipeline.translate(text)
