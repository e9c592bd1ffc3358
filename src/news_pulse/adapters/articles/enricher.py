"""Editorial enrichment of candidate stories."""

import asyncio
import logging
from typing import Sequence

from news_pulse.core import (
    ArticleFetcher,
    CachedExcerpt,
    EnrichedItem,
    EnrichmentCache,
    ExtractionMethod,
    RawItem,
    extract_editorial_content,
)

logger = logging.getLogger(__name__)

MIN_ARTICLE_LENGTH = 200
MIN_EMBEDDED_LENGTH = 100


class Enricher:
    """Fill in editorial excerpts, remote article first, feed text as fallback."""

    def __init__(
        self,
        fetcher: ArticleFetcher,
        cache: EnrichmentCache,
        min_article_length: int = MIN_ARTICLE_LENGTH,
        min_embedded_length: int = MIN_EMBEDDED_LENGTH,
    ) -> None:
        self.fetcher = fetcher
        self.cache = cache
        self.min_article_length = min_article_length
        self.min_embedded_length = min_embedded_length

    async def enrich(self, item: RawItem) -> EnrichedItem:
        """Enrich one item. Never raises for fetch or extraction failures."""
        cached = self.cache.get(item.link)
        if cached is not None:
            return EnrichedItem(
                item=item,
                editorial_excerpt=cached.editorial_excerpt,
                extraction_method=cached.method,
                paragraph_count=cached.paragraph_count,
                from_cache=True,
            )

        try:
            html = await self.fetcher.fetch(item.link)
            text, count = extract_editorial_content(html)
            if len(text) >= self.min_article_length:
                self.cache.put(item.link, CachedExcerpt(text, ExtractionMethod.GATEWAY_HTML, count))
                return EnrichedItem(
                    item=item,
                    editorial_excerpt=text,
                    extraction_method=ExtractionMethod.GATEWAY_HTML,
                    paragraph_count=count,
                )
        except Exception as e:
            logger.warning("Article fetch failed for %s: %s", item.link, e)

        text, count = extract_editorial_content(item.excerpt)
        if len(text) >= self.min_embedded_length:
            return EnrichedItem(
                item=item,
                editorial_excerpt=text,
                extraction_method=ExtractionMethod.RSS_EMBEDDED,
                paragraph_count=count,
            )

        logger.debug("No editorial content extracted for %r (%s)", item.title, item.link)
        return EnrichedItem(item=item, editorial_excerpt="", extraction_method=ExtractionMethod.FAILED)

    async def enrich_many(self, items: Sequence[RawItem]) -> list[EnrichedItem]:
        """Enrich items concurrently. Results keep input order."""
        results = await asyncio.gather(
            *(self.enrich(item) for item in items),
            return_exceptions=True,
        )

        enriched: list[EnrichedItem] = []
        for item, result in zip(items, results):
            if isinstance(result, BaseException):
                logger.error("Enrichment failed for %s: %s", item.link, result)
                enriched.append(
                    EnrichedItem(item=item, editorial_excerpt="", extraction_method=ExtractionMethod.FAILED)
                )
            else:
                enriched.append(result)
        return enriched

    async def aclose(self) -> None:
        await self.fetcher.aclose()
