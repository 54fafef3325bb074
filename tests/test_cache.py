"""
Tests for the plaintext cache.
"""
import pytest

from playvault.vault.cache import PlaintextCache, fingerprint


class TestFingerprint:
    """Tests for fingerprint."""

    def test_stable_and_content_derived(self):
        """The digest depends only on content, not on str vs bytes."""
        assert fingerprint("abc") == fingerprint(b"abc")
        assert fingerprint("abc") != fingerprint("abd")
        assert len(fingerprint("abc")) == 64

    def test_ignores_surrounding_whitespace(self):
        """Indentation around a blob does not change its fingerprint."""
        assert fingerprint("\n abc \n") == fingerprint("abc")


class TestPlaintextCache:
    """Tests for PlaintextCache."""

    def test_hit_and_miss(self, clock):
        """A stored entry is returned and both outcomes are counted."""
        cache = PlaintextCache(ttl=10, clock=clock)
        assert cache.get("k") is None
        cache.put("k", b"v")
        assert cache.get("k") == b"v"
        assert cache.stats() == {
            "hits": 1, "misses": 1, "expired": 0, "evicted": 0, "size": 1,
        }

    def test_expiry_is_lazy(self, clock):
        """An expired entry stays until it is looked up."""
        cache = PlaintextCache(ttl=10, clock=clock)
        cache.put("k", b"v")
        clock.advance(10)
        assert "k" in cache
        assert cache.get("k") is None
        assert "k" not in cache

    def test_lru_eviction(self, clock):
        """The least recently used entry is evicted when full."""
        cache = PlaintextCache(ttl=10, max_entries=2, clock=clock)
        cache.put("a", b"1")
        cache.put("b", b"2")
        cache.get("a")
        cache.put("c", b"3")
        assert "a" in cache and "c" in cache
        assert "b" not in cache

    def test_disabled(self, clock):
        """A zero TTL stores nothing."""
        cache = PlaintextCache(ttl=0, clock=clock)
        cache.put("k", b"v")
        assert len(cache) == 0

    def test_invalid_settings(self):
        """Negative TTL and empty capacity are rejected."""
        with pytest.raises(ValueError):
            PlaintextCache(ttl=-1)
        with pytest.raises(ValueError):
            PlaintextCache(max_entries=0)

    def test_plaintext_not_in_entry_repr(self, clock):
        """Cached plaintext never shows up in a repr."""
        cache = PlaintextCache(ttl=10, clock=clock)
        cache.put("k", b"top-secret")
        assert "top-secret" not in repr(cache._entries["k"])
