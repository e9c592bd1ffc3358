"""Shared fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from news_pulse.core import EnrichedItem, Episode, ExtractionMethod, RawItem

NOW = datetime(2024, 5, 20, 12, 0, tzinfo=timezone.utc)

# 97, 99, 103 and 101 characters
PARAGRAPHS = [
    "The city council voted on Tuesday to expand the protected bike lane network across the South End.",
    "Supporters said the change would make daily commutes safer for thousands of residents and students.",
    "Opponents argued that the plan removes parking spaces that small businesses along the corridor rely on.",
    "A final design is expected to be presented at a public meeting at City Hall later this spring season.",
]


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def paragraphs() -> list[str]:
    return list(PARAGRAPHS)


@pytest.fixture
def make_item() -> Callable[..., RawItem]:
    """Factory for raw feed items."""

    def _make(
        n: int,
        hours_ago: float = 1,
        excerpt: str = "",
        source: str = "WBUR",
        title: str = "",
    ) -> RawItem:
        link = f"https://news.example.com/story-{n}"
        return RawItem(
            id=link,
            source=source,
            source_key=source.lower(),
            title=title or f"Story number {n}",
            excerpt=excerpt,
            link=link,
            published_at=NOW - timedelta(hours=hours_ago),
        )

    return _make


@pytest.fixture
def make_episode(make_item: Callable[..., RawItem]) -> Callable[..., Episode]:
    """Factory for episodes whose stories carry the given excerpts."""

    def _make(excerpts: list[str], outro: str = "What will you notice on your walk tomorrow?") -> Episode:
        items = tuple(
            EnrichedItem(
                item=make_item(i, title=f"Headline {i}"),
                editorial_excerpt=excerpt,
                extraction_method=ExtractionMethod.GATEWAY_HTML,
                paragraph_count=len(excerpt.split("\n\n")),
            )
            for i, excerpt in enumerate(excerpts, 1)
        )
        return Episode(items=items, outro=outro)

    return _make
