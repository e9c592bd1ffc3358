"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional


class ExtractionMethod(str, Enum):
    """How the editorial excerpt of a story was obtained."""

    GATEWAY_HTML = "gateway-html"
    RSS_EMBEDDED = "rss-embedded"
    FAILED = "failed"


class FeedStatus(str, Enum):
    """Outcome of fetching one feed."""

    GATEWAY = "gateway"
    DIRECT = "direct"
    FAILED = "failed"


class PlaybackState(str, Enum):
    """States of the playback sequencer."""

    IDLE = "IDLE"
    PLAYING = "PLAYING"
    FINISHED = "FINISHED"


@dataclass(frozen=True)
class FeedSource:
    """Configured feed."""

    key: str
    name: str
    url: str
    priority: int = 3

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("Feed key cannot be empty")
        if not self.url:
            raise ValueError("Feed URL cannot be empty")


@dataclass(frozen=True)
class RawItem:
    """One entry read from a feed."""

    id: str
    source: str
    source_key: str
    title: str
    excerpt: str
    link: str
    published_at: datetime


@dataclass(frozen=True)
class EnrichedItem:
    """Feed entry with its validated editorial excerpt."""

    item: RawItem
    editorial_excerpt: str
    extraction_method: ExtractionMethod
    paragraph_count: int = 0
    from_cache: bool = False

    @property
    def link(self) -> str:
        return self.item.link

    @property
    def title(self) -> str:
        return self.item.title

    @property
    def source(self) -> str:
        return self.item.source

    @property
    def is_viable(self) -> bool:
        return bool(self.editorial_excerpt)


@dataclass(frozen=True)
class FeedDiagnostic:
    """Per-source fetch report, used for observability only."""

    name: str
    status: FeedStatus
    item_count: int
    error: Optional[str] = None


@dataclass(frozen=True)
class Episode:
    """Finalized set of stories plus the closing line."""

    items: tuple[EnrichedItem, ...]
    outro: str
    diagnostics: tuple[FeedDiagnostic, ...] = ()

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("Episode must contain at least one story")
        if any(not item.is_viable for item in self.items):
            raise ValueError("Episode stories must have an editorial excerpt")

    @property
    def links(self) -> list[str]:
        return [item.link for item in self.items]


@dataclass(frozen=True)
class Voice:
    """Voice offered by a speech engine."""

    name: str
    lang: str


@dataclass
class SpeechSegment:
    """Unit of narration with optional lifecycle callbacks."""

    text: str
    on_start: Optional[Callable[[], None]] = field(default=None, repr=False)
    on_end: Optional[Callable[[], None]] = field(default=None, repr=False)
    story_index: Optional[int] = None
