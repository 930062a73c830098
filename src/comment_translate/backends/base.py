"""Abstract base class for translation backends.

This module defines the interface that all translation backends must
implement, ensuring consistent behavior across different services.
"""

from abc import ABC, abstractmethod

from ..host import TranslateContext


class TranslationBackend(ABC):
    """Abstract base class for translation backends.

    A call to translate() completes exactly once: it either returns the
    translated text or raises a TranslateError subclass
    (BackendUnavailableError when the backend cannot be used at all,
    BackendFailureError for a failed request).
    """

    name: str = "base"

    @abstractmethod
    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        context: TranslateContext | None = None,
    ) -> str:
        """Translate text.

        Args:
            text: The text to translate
            target_lang: Target language code
            source_lang: Source language code, None for auto-detection
            context: Optional code context for prompt-based backends

        Returns:
            Translated text

        Raises:
            BackendUnavailableError: If the backend is not installed/usable
            BackendFailureError: If the request fails or returns nothing
        """
        pass
