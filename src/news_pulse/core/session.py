"""Session-scoped state: rotation history, enrichment cache and pool cache."""

import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from news_pulse.core.entities import ExtractionMethod, FeedDiagnostic, RawItem


@dataclass(frozen=True)
class CachedExcerpt:
    """Enrichment result stored per canonical link."""

    editorial_excerpt: str
    method: ExtractionMethod
    paragraph_count: int


class EnrichmentCache:
    """Write-once mapping of canonical link to extracted excerpt.

    Unbounded for the life of the session.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CachedExcerpt] = {}

    def get(self, link: str) -> Optional[CachedExcerpt]:
        return self._entries.get(link)

    def put(self, link: str, entry: CachedExcerpt) -> None:
        # Concurrent enrichments of the same link derive the same value
        self._entries.setdefault(link, entry)

    def __contains__(self, link: object) -> bool:
        return link in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class SeenLinks:
    """Track links already used in an episode to avoid repeats.

    Only grows within a session.
    """

    def __init__(self) -> None:
        self._links: set[str] = set()

    def is_seen(self, link: str) -> bool:
        """Check if link was already used."""
        return link in self._links

    def mark_batch_seen(self, links: Iterable[str]) -> None:
        """Mark the links of a finalized episode as used."""
        self._links.update(links)

    def filter_unseen(self, items: list[RawItem]) -> tuple[list[RawItem], int]:
        """Filter out already used items.

        Returns:
            Tuple of (unseen_items, filtered_count)
        """
        unseen = [item for item in items if item.link not in self._links]
        return unseen, len(items) - len(unseen)

    def snapshot(self) -> frozenset[str]:
        return frozenset(self._links)

    def __contains__(self, link: object) -> bool:
        return link in self._links

    def __len__(self) -> int:
        return len(self._links)


class PoolCache:
    """Last fetched pool, reused until it is older than ttl seconds."""

    def __init__(self, ttl: float = 1800.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._items: Optional[list[RawItem]] = None
        self._diagnostics: list[FeedDiagnostic] = []
        self._fetched_at = 0.0

    def get(self) -> Optional[tuple[list[RawItem], list[FeedDiagnostic]]]:
        """Return the cached pool, or None when missing or stale."""
        if self._items is None:
            return None
        if self._clock() - self._fetched_at > self.ttl:
            return None
        return list(self._items), list(self._diagnostics)

    def store(self, items: list[RawItem], diagnostics: list[FeedDiagnostic]) -> None:
        self._items = list(items)
        self._diagnostics = list(diagnostics)
        self._fetched_at = self._clock()


class SessionState:
    """State shared by pipeline runs of one session. Created at session start."""

    def __init__(self, pool_cache_ttl: float = 1800.0) -> None:
        self.seen_links = SeenLinks()
        self.enrichment_cache = EnrichmentCache()
        self.pool_cache = PoolCache(ttl=pool_cache_ttl)

    def get_stats(self) -> dict:
        """Get statistics about the session."""
        return {
            "seen_links": len(self.seen_links),
            "cached_excerpts": len(self.enrichment_cache),
        }
