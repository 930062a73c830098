"""Google web-translate backend."""

import logging
from typing import Any

import httpx

from ..host import TranslateContext
from ..translate.errors import BackendFailureError
from .base import TranslationBackend

logger = logging.getLogger(__name__)

GOOGLE_TRANSLATE_URL = "https://translate.googleapis.com/translate_a/single"


class GoogleBackend(TranslationBackend):
    """Translation through the public Google web-translate endpoint.

    Needs no API key. Context is ignored: the endpoint only takes plain text.
    """

    name = "google"

    def __init__(
        self,
        timeout: float = 10.0,
        url: str = GOOGLE_TRANSLATE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        context: TranslateContext | None = None,
    ) -> str:
        params = {
            "client": "gtx",
            "sl": source_lang or "auto",
            "tl": target_lang,
            "dt": "t",
            "q": text,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(self.url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise BackendFailureError(
                f"Google translate returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise BackendFailureError(
                f"Google translate request failed: {e}", original_error=e
            ) from e
        except ValueError as e:
            raise BackendFailureError(
                f"Google translate returned invalid JSON: {e}", original_error=e
            ) from e

        result = self._extract_text(data)
        if not result:
            raise BackendFailureError("Google translate returned an empty result")

        logger.debug(f"Google translated {len(text)} chars to {target_lang}")
        return result

    @staticmethod
    def _extract_text(data: Any) -> str:
        """Join the translated segments of a web-translate response.

        The response is a nested array whose first element lists segments
        as [translated, original, ...].
        """
        if not isinstance(data, list) or not data or not isinstance(data[0], list):
            return ""
        parts = [
            segment[0]
            for segment in data[0]
            if isinstance(segment, list) and segment and isinstance(segment[0], str)
        ]
        return "".join(parts).strip()
