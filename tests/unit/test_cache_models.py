"""Unit tests for cache key construction and cache entries."""

import sys
import time
from dataclasses import fields
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from comment_translate.cache.models import CacheEntry, CacheKey


class TestCacheKeyDigest:
    """Test that composite keys never collide."""

    def test_digest_is_deterministic(self) -> None:
        """Test same fields always produce the same digest."""
        key1 = CacheKey("hello", "ja", "en")
        key2 = CacheKey("hello", "ja", "en")

        assert key1.digest == key2.digest
        assert len(key1.digest) == 64

    def test_pipe_in_text_vs_pipe_in_source(self) -> None:
        """Test "a|b|c" without source differs from "a" with source "b|c"."""
        assert CacheKey("a|b|c", "ja").digest != CacheKey("a", "ja", "b|c").digest

    def test_shifting_characters_between_fields(self) -> None:
        """Test moving characters across field boundaries changes the digest."""
        keys = [
            CacheKey("ab", "c"),
            CacheKey("a", "bc"),
            CacheKey("a", "b", "c"),
            CacheKey("", "abc"),
            CacheKey("abc", ""),
        ]

        digests = {key.digest for key in keys}
        assert len(digests) == len(keys)

    def test_absent_source_differs_from_empty_source(self) -> None:
        """Test None source language is not the same key as ""."""
        assert CacheKey("hello", "ja", None).digest != CacheKey("hello", "ja", "").digest

    def test_length_prefix_like_text(self) -> None:
        """Test text that looks like a length prefix cannot forge another key."""
        forged = CacheKey("2:ja", "x")
        assert forged.digest != CacheKey("", "ja").digest
        assert CacheKey("1:a1:b", "c").digest != CacheKey("a", "b", "c").digest

    def test_multibyte_text(self) -> None:
        """Test lengths are counted in encoded bytes so multibyte text is safe."""
        assert CacheKey("é", "ja").digest != CacheKey("e", "ja").digest
        assert CacheKey("こんにちは", "en").digest == CacheKey("こんにちは", "en").digest


class TestCacheEntry:
    """Test CacheEntry recency metadata."""

    def test_entry_defaults(self) -> None:
        """Test new entries start with no hits and only recency metadata."""
        before = time.monotonic()
        entry = CacheEntry(value="こんにちは")

        assert entry.value == "こんにちは"
        assert entry.hits == 0
        assert before <= entry.last_access <= time.monotonic()
        assert [f.name for f in fields(CacheEntry)] == ["value", "last_access", "hits"]

    def test_touch_advances_last_access(self) -> None:
        """Test touch() never moves last_access backwards."""
        entry = CacheEntry(value="x")
        before = entry.last_access

        entry.touch()

        assert entry.last_access >= before
