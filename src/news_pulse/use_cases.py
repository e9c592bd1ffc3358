"""Business logic use cases."""

import logging
from datetime import timedelta
from typing import Optional, Sequence

from news_pulse.adapters.articles import Enricher
from news_pulse.adapters.feeds import FeedAggregator
from news_pulse.config import FALLBACK_OUTRO
from news_pulse.core import (
    EmptyPoolError,
    EnrichedItem,
    Episode,
    FeedDiagnostic,
    FeedSource,
    NoViableStoriesError,
    OutroGenerator,
    PlaybackObserver,
    PlaybackState,
    RawItem,
    Sequencer,
    SessionState,
    SpeechSegment,
    build_segments,
    find_resume_index,
    select_stories,
)

logger = logging.getLogger(__name__)


class OutroService:
    """Produce the closing line, falling back to a fixed sentence on any failure."""

    def __init__(
        self,
        generator: Optional[OutroGenerator] = None,
        fallback: str = FALLBACK_OUTRO,
        max_words: int = 30,
    ) -> None:
        self.generator = generator
        self.fallback = fallback
        self.max_words = max_words

    async def generate(self, items: Sequence[EnrichedItem]) -> str:
        if self.generator is None or not items:
            return self.fallback

        try:
            text = await self.generator.generate_outro(items)
        except Exception as e:
            logger.error("Outro generation failed (using fallback): %s", e)
            return self.fallback

        lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
        if not lines:
            logger.warning("Outro generator returned empty text")
            return self.fallback

        outro = lines[0]
        if len(outro.split()) > self.max_words:
            logger.warning("Outro longer than %d words, using fallback", self.max_words)
            return self.fallback
        return outro


class EpisodeService:
    """Run the pipeline: fetch, select, enrich, assemble."""

    def __init__(
        self,
        aggregator: FeedAggregator,
        enricher: Enricher,
        outro_service: OutroService,
        session: SessionState,
        sources: Sequence[FeedSource],
        episode_size: int = 3,
        candidate_count: int = 15,
        min_excerpt_length: int = 100,
        fresh_hours: float = 48.0,
    ) -> None:
        self.aggregator = aggregator
        self.enricher = enricher
        self.outro_service = outro_service
        self.session = session
        self.sources = list(sources)
        self.episode_size = episode_size
        self.candidate_count = candidate_count
        self.min_excerpt_length = min_excerpt_length
        self.fresh_window = timedelta(hours=fresh_hours)
        self.current_episode: Optional[Episode] = None
        self.last_diagnostics: list[FeedDiagnostic] = []

    async def run(self, force_refetch: bool = False) -> Episode:
        """
        Assemble a new episode.

        Raises:
            EmptyPoolError: no feed produced any item
            NoViableStoriesError: no candidate yielded enough editorial text
        """
        pool, diagnostics = await self.load_pool(force_refetch)
        self.last_diagnostics = diagnostics
        logger.info("Raw pool: %d items", len(pool))

        if not pool:
            raise EmptyPoolError()

        unseen, seen_count = self.session.seen_links.filter_unseen(pool)
        logger.info("Unseen stories: %d (already used: %d)", len(unseen), seen_count)

        candidates = select_stories(
            pool,
            self.session.seen_links.snapshot(),
            self.candidate_count,
            fresh_window=self.fresh_window,
        )
        logger.info("Candidates selected: %d", len(candidates))

        enriched = await self.enricher.enrich_many(candidates)
        viable = [e for e in enriched if len(e.editorial_excerpt) >= self.min_excerpt_length]
        logger.info(
            "Enrichment results: %d successful, %d failed",
            len(viable), len(enriched) - len(viable),
        )

        if not viable:
            raise NoViableStoriesError()

        # Prefer longer editorial content
        selection = sorted(viable, key=lambda e: len(e.editorial_excerpt), reverse=True)
        selection = selection[: self.episode_size]

        self.session.seen_links.mark_batch_seen(e.link for e in selection)
        outro = await self.outro_service.generate(selection)

        episode = Episode(items=tuple(selection), outro=outro, diagnostics=tuple(diagnostics))
        self.current_episode = episode
        return episode

    async def load_pool(self, force_refetch: bool = False) -> tuple[list[RawItem], list[FeedDiagnostic]]:
        """Return the cached pool, or fetch all feeds when stale or forced."""
        if not force_refetch:
            cached = self.session.pool_cache.get()
            if cached is not None:
                logger.info("Loading pool from cache")
                return cached

        logger.info("Fetching %d live feeds", len(self.sources))
        items, diagnostics = await self.aggregator.fetch_all(self.sources)
        if items:
            self.session.pool_cache.store(items, diagnostics)
        return items, diagnostics

    async def aclose(self) -> None:
        await self.enricher.aclose()


class PlaybackService(PlaybackObserver):
    """Play the current episode and remember where narration stopped."""

    def __init__(
        self,
        sequencer: Sequencer,
        title: str = "Boston Pulse",
        voice_name: str = "",
        rate: float = 1.0,
    ) -> None:
        self.sequencer = sequencer
        self.title = title
        self.voice_name = voice_name
        self.rate = rate
        self.episode: Optional[Episode] = None
        self.segments: list[SpeechSegment] = []
        self.active_index = -1

    @property
    def state(self) -> PlaybackState:
        return self.sequencer.state

    def load(self, episode: Episode) -> None:
        """Replace the episode, stopping any playback of the previous one."""
        self.sequencer.stop()
        self.episode = episode
        self.segments = []
        self.active_index = -1

    async def play(self, story_index: Optional[int] = None) -> None:
        """Start narration, from the given story when provided."""
        if self.episode is None:
            raise ValueError("No episode loaded")

        self.segments = build_segments(self.episode, self.episode.outro, observer=self, title=self.title)
        start_at = 0
        if story_index is not None and story_index >= 0:
            start_at = find_resume_index(self.segments, self.episode, story_index)

        await self.sequencer.play(self.segments, self.voice_name or None, self.rate, start_at)

    async def resume(self) -> None:
        """Continue from the story that was active when playback stopped."""
        if self.episode is not None and 0 <= self.active_index < len(self.episode.items):
            await self.play(self.active_index)
        else:
            await self.play()

    def stop(self) -> None:
        """Stop narration, keeping the active story for resume()."""
        self.sequencer.stop()

    async def wait(self) -> None:
        await self.sequencer.wait()

    def story_activated(self, index: int) -> None:
        self.active_index = index

    def playback_finished(self) -> None:
        self.active_index = -1
