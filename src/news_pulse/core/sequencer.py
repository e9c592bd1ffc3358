"""Narration segments and the playback state machine."""

import asyncio
import logging
from collections import deque
from typing import Optional, Sequence

from news_pulse.core.entities import Episode, PlaybackState, SpeechSegment, Voice
from news_pulse.core.interfaces import PlaybackObserver, SpeechEngine

logger = logging.getLogger(__name__)

MIN_RATE = 0.1
MAX_RATE = 10.0

QUALITY_KEYWORDS = (
    "natural", "google", "premium", "enhanced", "neural",
    "samantha", "alex", "daniel", "serena", "aria", "jenny", "guy",
)
LOW_QUALITY_KEYWORDS = ("compact", "classic", "legacy")
PREFERRED_VENDORS = ("Google", "Microsoft")


def build_segments(
    episode: Episode,
    outro_text: Optional[str] = None,
    observer: Optional[PlaybackObserver] = None,
    title: str = "Boston Pulse",
) -> list[SpeechSegment]:
    """
    Turn an episode into ordered narration segments.

    Layout: intro, one segment per excerpt paragraph of every story, outro.
    The first paragraph of a story is prefixed with its source and title.
    """
    observer = observer or PlaybackObserver()
    story_count = len(episode.items)
    count_text = "One story" if story_count == 1 else f"{story_count} stories"

    segments = [
        SpeechSegment(
            text=f"{title}. {count_text} for today.",
            on_start=lambda: observer.story_activated(-1),
        )
    ]

    for index, item in enumerate(episode.items):
        paragraphs = [p for p in item.editorial_excerpt.split("\n\n") if p.strip()]
        for p_index, paragraph in enumerate(paragraphs):
            text = f"From {item.source}. {item.title}. {paragraph}" if p_index == 0 else paragraph
            segments.append(SpeechSegment(
                text=text,
                on_start=lambda i=index: observer.story_activated(i),
                story_index=index,
            ))

    segments.append(SpeechSegment(
        text=outro_text if outro_text is not None else episode.outro,
        on_start=lambda: observer.story_activated(story_count),
        on_end=observer.playback_finished,
        story_index=story_count,
    ))
    return segments


def find_resume_index(segments: Sequence[SpeechSegment], episode: Episode, story_index: int) -> int:
    """Index of the first segment mentioning the story's title, 0 if none."""
    if not 0 <= story_index < len(episode.items):
        return 0
    target_title = episode.items[story_index].title
    if not target_title:
        return 0
    for index, segment in enumerate(segments):
        if target_title in segment.text:
            return index
    return 0


def natural_voices(voices: Sequence[Voice]) -> list[Voice]:
    """English voices that sound human-like, or all English voices if none do."""
    english = [v for v in voices if v.lang.startswith("en")]
    natural = []
    for voice in english:
        name = voice.name.lower()
        if any(kw in name for kw in LOW_QUALITY_KEYWORDS):
            continue
        if any(kw in name for kw in QUALITY_KEYWORDS):
            natural.append(voice)
    return natural or english


def select_voice(voices: Sequence[Voice], preferred: Optional[str] = None) -> Optional[Voice]:
    """
    Pick the narration voice.

    Order: exact preferred name among natural voices, US English from a
    preferred vendor, any US English, any English, any voice at all.
    """
    candidates = natural_voices(voices)

    if preferred:
        for voice in candidates:
            if voice.name == preferred:
                return voice

    us_voices = [v for v in candidates if v.lang == "en-US"]
    for voice in us_voices:
        if any(vendor in voice.name for vendor in PREFERRED_VENDORS):
            return voice
    if us_voices:
        return us_voices[0]

    for voice in candidates:
        if voice.lang.startswith("en"):
            return voice

    if candidates:
        return candidates[0]
    return voices[0] if voices else None


def clamp_rate(rate: float) -> float:
    return max(MIN_RATE, min(MAX_RATE, rate))


class Sequencer:
    """Narrates segments strictly in order, one at a time."""

    def __init__(self, engine: SpeechEngine) -> None:
        self.engine = engine
        self.state = PlaybackState.IDLE
        self.current_index = -1
        self._segments: list[SpeechSegment] = []
        self._queue: deque[int] = deque()
        self._task: Optional[asyncio.Task] = None
        self._cancelled: list[asyncio.Task] = []

    async def play(
        self,
        segments: Sequence[SpeechSegment],
        voice_preference: Optional[str] = None,
        rate: float = 1.0,
        start_index: int = 0,
    ) -> None:
        """Stop current playback and start narrating segments[start_index:].

        Returns once playback has started; use wait() to block until it ends.
        """
        self.stop()
        await self._settle_cancelled()

        voice = select_voice(self.engine.voices(), voice_preference)
        self._segments = list(segments)
        self._queue = deque(range(max(0, start_index), len(self._segments)))
        self.state = PlaybackState.PLAYING
        self._task = asyncio.create_task(self._run(voice, clamp_rate(rate)))

    def stop(self) -> None:
        """Cancel narration and drop the remaining queue. Safe to call repeatedly."""
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            self.engine.cancel()
            self._cancelled.append(task)
        self._task = None
        self._queue.clear()
        self.current_index = -1
        self.state = PlaybackState.IDLE

    async def wait(self) -> None:
        """Wait until the current playback finishes or is stopped."""
        await self._settle_cancelled()
        if self._task is not None:
            await asyncio.wait([self._task])

    @property
    def remaining(self) -> int:
        return len(self._queue)

    async def _settle_cancelled(self) -> None:
        # At most one narration task may be alive at a time
        pending, self._cancelled = self._cancelled, []
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run(self, voice: Optional[Voice], rate: float) -> None:
        while self._queue:
            index = self._queue.popleft()
            self.current_index = index
            await self._narrate(self._segments[index], voice, rate)
        self.current_index = -1
        self.state = PlaybackState.FINISHED

    async def _narrate(self, segment: SpeechSegment, voice: Optional[Voice], rate: float) -> None:
        try:
            if segment.on_start:
                segment.on_start()
            await self.engine.speak(segment.text, voice, rate)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Narration failed for segment %d (%r): %s", self.current_index, segment.text[:40], e)
            return

        if segment.on_end:
            try:
                segment.on_end()
            except Exception as e:
                logger.error("Segment completion callback failed: %s", e)
