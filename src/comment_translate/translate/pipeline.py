"""Translation pipeline: input checks, cache lookup, backend call, cache write.

Shared by the hover cycle and by immersive mode so both take exactly the
same path to a translation.
"""

import asyncio
import logging

from ..backends.base import TranslationBackend
from ..cache.manager import TranslationCacheManager
from ..config import TranslateConfig
from ..host import NotifyLevel, TranslateContext, UISink
from .errors import BackendFailureError, BackendUnavailableError

logger = logging.getLogger(__name__)


class TranslationPipeline:
    """Turns text into a translation, consulting the cache first.

    Example:
        pipeline = TranslationPipeline(cache, GoogleBackend(), TranslateConfig(target_language="ja"))
        await pipeline.translate("hello")        # backend call, result cached
        await pipeline.translate("hello")        # served from cache
        await pipeline.translate("")             # "" without any lookup
        await pipeline.translate("x" * 10_000)   # None: over max_length
    """

    def __init__(
        self,
        cache: TranslationCacheManager,
        backend: TranslationBackend,
        config: TranslateConfig | None = None,
        sink: UISink | None = None,
    ) -> None:
        """Initialize pipeline.

        Args:
            cache: Cache consulted before and written after backend calls
            backend: Backend used on cache misses
            config: Language defaults, max_length and timeout
            sink: Where to report an unavailable backend (once per backend)
        """
        self.cache = cache
        self.backend = backend
        self.config = config or TranslateConfig()
        self.sink = sink
        self._reported_unavailable: set[str] = set()

    async def translate(
        self,
        text: str,
        target_lang: str | None = None,
        source_lang: str | None = None,
        context: TranslateContext | None = None,
    ) -> str | None:
        """Translate text.

        Args:
            text: Text to translate
            target_lang: Target language (config default when None)
            source_lang: Source language (config default when None)
            context: Optional code context passed to the backend

        Returns:
            The translation; "" for empty input; None when the text is longer
            than max_length bytes of UTF-8. Neither short-circuit touches
            cache or backend.

        Raises:
            BackendUnavailableError: If the backend cannot be used
            BackendFailureError: If the backend call fails or times out
        """
        if not text or not text.strip():
            return ""

        size = len(text.encode("utf-8"))
        if size > self.config.max_length:
            logger.debug(
                f"Skipping translation: text is {size} bytes > {self.config.max_length}"
            )
            return None

        target_lang = target_lang or self.config.target_language
        if source_lang is None:
            source_lang = self.config.source_language

        cached = self.cache.get(text, target_lang, source_lang)
        if cached is not None:
            return cached

        result = await self._call_backend(text, target_lang, source_lang, context)

        # Cached regardless of whether the requester still wants it
        self.cache.set(text, result, target_lang, source_lang)
        return result

    async def _call_backend(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None,
        context: TranslateContext | None,
    ) -> str:
        backend_name = getattr(self.backend, "name", type(self.backend).__name__)
        logger.debug(f"Calling {backend_name} for '{text[:50]}' -> {target_lang}")

        call = self.backend.translate(text, target_lang, source_lang, context)
        try:
            if self.config.timeout is not None:
                result = await asyncio.wait_for(call, self.config.timeout)
            else:
                result = await call
        except BackendUnavailableError as e:
            if backend_name not in self._reported_unavailable:
                self._reported_unavailable.add(backend_name)
                if self.sink is not None:
                    self.sink.notify(f"comment-translate: {e}", NotifyLevel.ERROR)
            raise
        except TimeoutError as e:
            raise BackendFailureError(
                f"{backend_name} did not answer within {self.config.timeout}s",
                original_error=e,
            ) from e

        if not result:
            raise BackendFailureError(f"{backend_name} returned an empty translation")
        return result
