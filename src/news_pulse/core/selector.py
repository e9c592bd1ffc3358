"""Tiered story rotation."""

import random
from datetime import datetime, timedelta, timezone
from typing import AbstractSet, Optional, Sequence

from news_pulse.core.entities import RawItem

FRESH_WINDOW = timedelta(hours=48)


def select_stories(
    pool: Sequence[RawItem],
    seen_links: AbstractSet[str],
    count: int = 3,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    fresh_window: timedelta = FRESH_WINDOW,
) -> list[RawItem]:
    """
    Pick candidate stories from a recency-sorted pool.

    Tiers, first satisfied wins:
        1. published within fresh_window and not in seen_links
        2. not in seen_links, any age
        3. random sample of the whole pool (repeats accepted)

    Returns:
        Up to count items. Empty when the pool is empty.
    """
    if not pool or count <= 0:
        return []

    now = now or datetime.now(timezone.utc)

    fresh = [
        item for item in pool
        if now - item.published_at < fresh_window and item.link not in seen_links
    ]
    if len(fresh) >= count:
        return fresh[:count]

    unseen = [item for item in pool if item.link not in seen_links]
    if len(unseen) >= count:
        return unseen[:count]

    shuffled = list(pool)
    (rng or random).shuffle(shuffled)
    return shuffled[:count]
