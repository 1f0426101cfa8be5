"""Short-lived cache for the latest generation result of each session.

Each session token owns exactly one slot.  A new generation overwrites the
slot and an entry older than the TTL is treated as absent.  An entry larger
than ``max_entry_bytes`` (the per-session storage quota) is kept but reported.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from snaptweet.core.models import GenerationRequest, TweetVariation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedResult:
    """The request that was submitted and the variations it produced."""

    request: GenerationRequest
    variations: list[TweetVariation]
    stored_at: float

    @property
    def size(self) -> int:
        """Approximate stored size in bytes."""
        return _entry_size(self.request, self.variations)


def _entry_size(request: GenerationRequest, variations: list[TweetVariation]) -> int:
    size = sum(len(image) for image in request.images)
    size += sum(len(menu.encode("utf-8")) for menu in request.menus)
    size += len((request.restaurant_name or "").encode("utf-8"))
    size += sum(len(v.content.encode("utf-8")) for v in variations)
    return size


class ResultCache:
    """Thread-safe single-slot-per-token result cache.

    Args:
        ttl_seconds: Lifetime of an entry.
        max_entry_bytes: Largest entry :meth:`put` accepts.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = 1800.0,
        max_entry_bytes: int = 5 * 1024 * 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entry_bytes < 1:
            raise ValueError("max_entry_bytes must be positive")
        self._ttl = ttl_seconds
        self._max_entry_bytes = max_entry_bytes
        self._clock = clock
        self._entries: dict[str, CachedResult] = {}
        self._lock = threading.Lock()

    @staticmethod
    def new_token() -> str:
        """Create a fresh session token."""
        return secrets.token_urlsafe(16)

    def put(self, token: str, request: GenerationRequest, variations: list[TweetVariation]) -> bool:
        """Store a result, replacing whatever the token held before.

        An entry over the size budget is still kept so the session can
        regenerate and share it, but the caller is told the quota was
        exceeded.  Expired entries of other tokens are purged first.

        Returns:
            ``False`` if the entry exceeds the size budget.
        """
        self.purge_expired()
        size = _entry_size(request, variations)
        within_budget = size <= self._max_entry_bytes
        if not within_budget:
            logger.warning("Result of %d bytes exceeds cache budget of %d", size, self._max_entry_bytes)
        with self._lock:
            self._entries[token] = CachedResult(
                request=request,
                variations=list(variations),
                stored_at=self._clock(),
            )
        return within_budget

    def get(self, token: str) -> CachedResult | None:
        """Return the live entry for *token*, evicting it if expired."""
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return None
            if self._expired(entry):
                del self._entries[token]
                return None
            return entry

    def discard(self, token: str) -> None:
        with self._lock:
            self._entries.pop(token, None)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            expired = [token for token, entry in self._entries.items() if self._expired(entry)]
            for token in expired:
                del self._entries[token]
        if expired:
            logger.debug("Purged %d expired result(s)", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, entry: CachedResult) -> bool:
        return self._clock() - entry.stored_at >= self._ttl
