"""Data models for cache storage."""

import hashlib
import time
from dataclasses import dataclass, field


def _length_prefixed(value: str | None) -> bytes:
    # An absent value gets its own marker so None and "" never collide.
    if value is None:
        return b"-"
    encoded = value.encode("utf-8")
    return f"{len(encoded)}:".encode() + encoded


@dataclass(frozen=True)
class CacheKey:
    """Composite cache key for one translation request.

    Attributes:
        text: Original text to translate
        target_lang: Target language code
        source_lang: Source language code, None for auto-detection
    """

    text: str
    target_lang: str
    source_lang: str | None = None

    @property
    def digest(self) -> str:
        """SHA-256 over the length-prefixed fields.

        Every field carries its own length, so no choice of delimiter
        characters inside the text or language codes can make two
        different keys encode to the same bytes.
        """
        payload = b"".join(
            _length_prefixed(part)
            for part in (self.text, self.target_lang, self.source_lang)
        )
        return hashlib.sha256(payload).hexdigest()


@dataclass
class CacheEntry:
    """Cached translation plus recency metadata.

    Attributes:
        value: Translated text
        last_access: Monotonic time of the last get/set touching the entry
        hits: Number of cache hits served by this entry
    """

    value: str
    last_access: float = field(default_factory=time.monotonic)
    hits: int = 0

    def touch(self) -> None:
        self.last_access = time.monotonic()
