"""Placeholder backend for a service name that is not registered."""

from ..host import TranslateContext
from ..translate.errors import BackendUnavailableError
from .base import TranslationBackend


class UnknownBackend(TranslationBackend):
    """Stands in for a misconfigured service.

    Every call raises BackendUnavailableError, so the request fails and the
    user is told which services exist. Text is never sent anywhere else.
    """

    def __init__(self, service: str, available: list[str]) -> None:
        self.name = service
        self.available = available

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        context: TranslateContext | None = None,
    ) -> str:
        choices = ", ".join(self.available) if self.available else "none"
        raise BackendUnavailableError(
            f"Unknown translation service '{self.name}'. Available services: {choices}"
        )
