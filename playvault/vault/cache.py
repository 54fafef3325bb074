"""
Decrypted-content cache — plaintext keyed by ciphertext fingerprint.

Entries expire ``ttl`` seconds after insertion; expiry is checked lazily on
lookup, or swept out-of-band with :meth:`PlaintextCache.purge_expired`. The
cache is bounded and evicts the least recently used entry when full.

Security Note:
    Plaintext lives in process memory until expiry or eviction. Only
    fingerprint prefixes are logged.
"""
import time
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from cryptography.hazmat.primitives import hashes

logger = logging.getLogger("playvault.vault")


def fingerprint(data: Union[str, bytes]) -> str:
    """SHA-256 hex digest of an encrypted blob, ignoring surrounding whitespace."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    digest = hashes.Hash(hashes.SHA256())
    digest.update(data.strip())
    return digest.finalize().hex()


@dataclass(frozen=True)
class CacheEntry:
    ciphertext_fingerprint: str
    plaintext: bytes = field(repr=False)
    expires_at: float


class PlaintextCache:
    """Bounded TTL cache of decrypted plaintext."""

    def __init__(
        self,
        ttl: float = 300,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl < 0:
            raise ValueError("Cache TTL cannot be negative")
        if max_entries < 1:
            raise ValueError("Cache must hold at least one entry")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "expired": 0, "evicted": 0}

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    def get(self, key: str) -> Optional[bytes]:
        """Return cached plaintext for ``key``; expired entries count as misses."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None
            if now >= entry.expires_at:
                del self._entries[key]
                self._stats["expired"] += 1
                self._stats["misses"] += 1
                logger.debug("Vault cache expired: %s", key[:12])
                return None
            self._entries.move_to_end(key)
            self._stats["hits"] += 1
        logger.debug("Vault cache hit: %s", key[:12])
        return entry.plaintext

    def put(self, key: str, plaintext: bytes) -> None:
        if not self.enabled:
            return
        entry = CacheEntry(
            ciphertext_fingerprint=key,
            plaintext=plaintext,
            expires_at=self._clock() + self.ttl,
        )
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                self._stats["evicted"] += 1

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            stale = [k for k, e in self._entries.items() if now >= e.expires_at]
            for key in stale:
                del self._entries[key]
            self._stats["expired"] += len(stale)
        if stale:
            logger.debug("Vault cache purged %d expired entr(ies)", len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict:
        with self._lock:
            return dict(self._stats, size=len(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
