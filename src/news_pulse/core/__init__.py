"""Core domain layer."""

from news_pulse.core.editorial import extract_editorial_content, is_editorial
from news_pulse.core.entities import (
    EnrichedItem,
    Episode,
    ExtractionMethod,
    FeedDiagnostic,
    FeedSource,
    FeedStatus,
    PlaybackState,
    RawItem,
    SpeechSegment,
    Voice,
)
from news_pulse.core.exceptions import (
    ArticleFetchError,
    EmptyPoolError,
    FeedFetchError,
    NewsPulseError,
    NoViableStoriesError,
    OutroGenerationError,
    PipelineError,
    SpeechError,
)
from news_pulse.core.interfaces import (
    ArticleFetcher,
    FeedReader,
    OutroGenerator,
    PlaybackObserver,
    SpeechEngine,
)
from news_pulse.core.selector import select_stories
from news_pulse.core.sequencer import Sequencer, build_segments, find_resume_index, select_voice
from news_pulse.core.session import CachedExcerpt, EnrichmentCache, SeenLinks, SessionState

__all__ = [
    "RawItem",
    "EnrichedItem",
    "Episode",
    "ExtractionMethod",
    "FeedDiagnostic",
    "FeedSource",
    "FeedStatus",
    "PlaybackState",
    "SpeechSegment",
    "Voice",
    "NewsPulseError",
    "FeedFetchError",
    "ArticleFetchError",
    "OutroGenerationError",
    "SpeechError",
    "PipelineError",
    "EmptyPoolError",
    "NoViableStoriesError",
    "FeedReader",
    "ArticleFetcher",
    "OutroGenerator",
    "SpeechEngine",
    "PlaybackObserver",
    "is_editorial",
    "extract_editorial_content",
    "select_stories",
    "Sequencer",
    "build_segments",
    "find_resume_index",
    "select_voice",
    "CachedExcerpt",
    "EnrichmentCache",
    "SeenLinks",
    "SessionState",
]
