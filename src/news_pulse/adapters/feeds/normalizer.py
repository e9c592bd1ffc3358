"""Normalize feed entries into RawItem."""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from news_pulse.core.entities import FeedSource, RawItem


def parse_published(value: Optional[str], now: Optional[datetime] = None) -> datetime:
    """
    Parse a feed publication date.

    Accepts RFC 822 (RSS pubDate), ISO 8601 (Atom) and "YYYY-MM-DD HH:MM:SS"
    (rss2json). Naive values are taken as UTC. Missing or unparseable values
    fall back to now.
    """
    now = now or datetime.now(timezone.utc)
    if not value or not value.strip():
        return now

    value = value.strip()
    parsed: Optional[datetime] = None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        parsed = None

    if parsed is None:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return now

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_raw_item(
    source: FeedSource,
    *,
    link: Optional[str],
    title: Optional[str],
    guid: Optional[str] = None,
    content: Optional[str] = None,
    description: Optional[str] = None,
    published: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[RawItem]:
    """
    Convert one feed entry into a RawItem.

    Returns None for entries without a link, which cannot be deduplicated.
    """
    link = (link or "").strip()
    if not link:
        return None

    guid = (guid or "").strip()
    return RawItem(
        id=guid or link,
        source=source.name,
        source_key=source.key,
        title=(title or "").strip(),
        excerpt=content or description or "",
        link=link,
        published_at=parse_published(published, now),
    )
