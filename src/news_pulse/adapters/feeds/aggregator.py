"""Concurrent feed aggregation."""

import asyncio
import logging
from typing import Iterable, Sequence

import httpx

from news_pulse.core import FeedDiagnostic, FeedReader, FeedSource, FeedStatus, RawItem

logger = logging.getLogger(__name__)


def deduplicate_by_link(items: Iterable[RawItem]) -> list[RawItem]:
    """
    Remove duplicate links, keeping the last-seen entry.

    Position follows the first occurrence of each link.
    """
    by_link: dict[str, RawItem] = {}
    for item in items:
        by_link[item.link] = item
    return list(by_link.values())


class FeedAggregator:
    """Fetch every configured feed concurrently into one recency-sorted pool."""

    def __init__(
        self,
        reader: FeedReader,
        timeout: float = 20.0,
        user_agent: str = "Mozilla/5.0 (compatible; NewsPulse/1.0)",
    ) -> None:
        self.reader = reader
        self.timeout = timeout
        self.user_agent = user_agent

    async def fetch_all(
        self, sources: Sequence[FeedSource]
    ) -> tuple[list[RawItem], list[FeedDiagnostic]]:
        """
        Fetch all sources, tolerating individual failures.

        Returns:
            Tuple of (items, diagnostics). Diagnostics hold one entry per source,
            in source order.
        """
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
        ) as client:
            results = await asyncio.gather(
                *(self.reader.read(client, source) for source in sources),
                return_exceptions=True,
            )

        all_items: list[RawItem] = []
        diagnostics: list[FeedDiagnostic] = []

        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                logger.error("Failed to fetch feed %s (%s): %s", source.name, source.url, result)
                diagnostics.append(FeedDiagnostic(
                    name=source.name,
                    status=FeedStatus.FAILED,
                    item_count=0,
                    error=str(result),
                ))
                continue

            logger.info("Feed %s: %d items", source.name, len(result))
            all_items.extend(result)
            diagnostics.append(FeedDiagnostic(
                name=source.name,
                status=FeedStatus(self.reader.mode),
                item_count=len(result),
            ))

        items = deduplicate_by_link(all_items)
        items.sort(key=lambda item: item.published_at, reverse=True)
        return items, diagnostics
