"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Sequence

import httpx

from news_pulse.core.entities import EnrichedItem, FeedSource, RawItem, Voice


class FeedReader(ABC):
    """Interface for reading the items of one feed."""

    @property
    @abstractmethod
    def mode(self) -> str:
        """Diagnostic status reported on success."""
        pass

    @abstractmethod
    async def read(self, client: httpx.AsyncClient, source: FeedSource) -> list[RawItem]:
        """Fetch and parse one feed. Raises FeedFetchError on failure."""
        pass


class ArticleFetcher(ABC):
    """Interface for retrieving the full markup of an article."""

    @abstractmethod
    async def fetch(self, link: str) -> str:
        """Return the article body. Raises ArticleFetchError on failure."""
        pass

    async def aclose(self) -> None:
        """Release connections held by the fetcher."""
        pass


class OutroGenerator(ABC):
    """Interface for generating the closing reflection."""

    @abstractmethod
    async def generate_outro(self, items: Sequence[EnrichedItem]) -> str:
        """Return one short sentence about the given stories."""
        pass


class SpeechEngine(ABC):
    """Interface for the narration boundary."""

    @abstractmethod
    def voices(self) -> list[Voice]:
        """Voices available on this engine."""
        pass

    @abstractmethod
    async def speak(self, text: str, voice: Voice | None, rate: float) -> None:
        """Narrate text and return once speech has completed.

        Raises SpeechError if the segment could not be narrated.
        """
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Abort any in-flight narration."""
        pass


class PlaybackObserver:
    """Receives playback lifecycle events. All hooks are optional."""

    def story_activated(self, index: int) -> None:
        """Called when narration of a story (or intro/outro) starts."""

    def playback_finished(self) -> None:
        """Called after the closing segment has been narrated."""
