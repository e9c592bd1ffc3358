"""Tests for segment building and the playback state machine."""

import asyncio
from typing import Callable, Optional

import pytest

from news_pulse.core import (
    Episode,
    PlaybackObserver,
    PlaybackState,
    Sequencer,
    SpeechEngine,
    SpeechError,
    Voice,
    build_segments,
    find_resume_index,
    select_voice,
)
from news_pulse.use_cases import PlaybackService


class RecordingEngine(SpeechEngine):
    """Speech engine that records what it was asked to say."""

    def __init__(
        self,
        voices: tuple[Voice, ...] = (),
        fail_on: tuple[str, ...] = (),
        block_on: Optional[str] = None,
    ) -> None:
        self._voices = list(voices)
        self.fail_on = fail_on
        self.block_on = block_on
        self.blocked = asyncio.Event()
        self.spoken: list[str] = []
        self.calls: list[tuple[Optional[Voice], float]] = []
        self.cancelled = 0

    def voices(self) -> list[Voice]:
        return list(self._voices)

    async def speak(self, text: str, voice: Optional[Voice], rate: float) -> None:
        self.spoken.append(text)
        self.calls.append((voice, rate))
        if self.block_on and self.block_on in text:
            self.blocked.set()
            await asyncio.Event().wait()
        if any(marker in text for marker in self.fail_on):
            raise SpeechError("synthesis failed")
        await asyncio.sleep(0)

    def cancel(self) -> None:
        self.cancelled += 1


class EventLog(PlaybackObserver):
    def __init__(self) -> None:
        self.events: list[str] = []

    def story_activated(self, index: int) -> None:
        self.events.append(f"story:{index}")

    def playback_finished(self) -> None:
        self.events.append("finished")


def test_build_segments_layout(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """Intro, one segment per paragraph, outro."""
    episode = make_episode([
        f"{paragraphs[0]}\n\n{paragraphs[1]}",
        paragraphs[2],
    ])

    segments = build_segments(episode, "Closing thought?", title="Boston Pulse")

    assert [s.text for s in segments] == [
        "Boston Pulse. 2 stories for today.",
        f"From WBUR. Headline 1. {paragraphs[0]}",
        paragraphs[1],
        f"From WBUR. Headline 2. {paragraphs[2]}",
        "Closing thought?",
    ]
    assert [s.story_index for s in segments] == [None, 0, 0, 1, 2]


def test_build_segments_single_story(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """One story is announced in the singular, outro defaults to the episode's."""
    episode = make_episode([paragraphs[0]], outro="Episode outro.")

    segments = build_segments(episode)

    assert segments[0].text == "Boston Pulse. One story for today."
    assert segments[-1].text == "Episode outro."


def test_build_segments_notifications(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """Segments notify the observer of the active story."""
    episode = make_episode([paragraphs[0], paragraphs[1]])
    log = EventLog()

    segments = build_segments(episode, observer=log)
    for segment in segments:
        if segment.on_start:
            segment.on_start()
        if segment.on_end:
            segment.on_end()

    assert log.events == ["story:-1", "story:0", "story:1", "story:2", "finished"]


def test_find_resume_index(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """Resume points at the first segment mentioning the story title."""
    episode = make_episode([f"{paragraphs[0]}\n\n{paragraphs[1]}", paragraphs[2]])
    segments = build_segments(episode)

    assert find_resume_index(segments, episode, 0) == 1
    assert find_resume_index(segments, episode, 1) == 3
    assert find_resume_index(segments, episode, 5) == 0


@pytest.mark.asyncio
async def test_play_in_order(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """A two-story episode is narrated as intro, story 1, story 2, outro."""
    episode = make_episode([paragraphs[0], paragraphs[1]])
    log = EventLog()
    segments = build_segments(episode, observer=log)
    engine = RecordingEngine()
    sequencer = Sequencer(engine)

    await sequencer.play(segments)
    assert sequencer.state == PlaybackState.PLAYING
    await sequencer.wait()

    assert len(segments) == 4
    assert engine.spoken == [s.text for s in segments]
    assert sequencer.state == PlaybackState.FINISHED
    assert log.events[-1] == "finished"


@pytest.mark.asyncio
async def test_play_from_start_index(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """Only segments from start_index onwards are narrated."""
    episode = make_episode([paragraphs[0], paragraphs[1]])
    segments = build_segments(episode)
    engine = RecordingEngine()
    sequencer = Sequencer(engine)

    await sequencer.play(segments, start_index=2)
    await sequencer.wait()

    assert engine.spoken == [segments[2].text, segments[3].text]


@pytest.mark.asyncio
async def test_failed_segment_is_skipped(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """A narration error advances to the next segment."""
    episode = make_episode([paragraphs[0], paragraphs[1]])
    log = EventLog()
    segments = build_segments(episode, observer=log)
    engine = RecordingEngine(fail_on=("Headline 1",))
    sequencer = Sequencer(engine)

    await sequencer.play(segments)
    await sequencer.wait()

    assert engine.spoken == [s.text for s in segments]
    assert sequencer.state == PlaybackState.FINISHED
    assert log.events == ["story:-1", "story:0", "story:1", "story:2", "finished"]


@pytest.mark.asyncio
async def test_stop_is_idempotent(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """stop() always leaves the engine idle with an empty queue."""
    sequencer = Sequencer(RecordingEngine())
    sequencer.stop()
    sequencer.stop()
    assert sequencer.state == PlaybackState.IDLE

    episode = make_episode([paragraphs[0]])
    engine = RecordingEngine(block_on="Headline 1")
    sequencer = Sequencer(engine)
    await sequencer.play(build_segments(episode))
    await engine.blocked.wait()

    sequencer.stop()
    sequencer.stop()

    assert sequencer.state == PlaybackState.IDLE
    assert sequencer.remaining == 0
    assert engine.cancelled == 1
    await sequencer.wait()


@pytest.mark.asyncio
async def test_rate_is_clamped(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """Speaking rates outside the engine range are clamped."""
    engine = RecordingEngine()
    sequencer = Sequencer(engine)

    await sequencer.play(build_segments(make_episode([paragraphs[0]])), rate=42.0)
    await sequencer.wait()

    assert {rate for _, rate in engine.calls} == {10.0}


@pytest.mark.asyncio
async def test_stop_and_resume_from_story(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """Stopping during story 1 and resuming story index 1 starts at story 2."""
    episode = make_episode([paragraphs[0], paragraphs[1]])
    engine = RecordingEngine(block_on="Headline 1")
    playback = PlaybackService(Sequencer(engine))
    playback.load(episode)

    await playback.play()
    await engine.blocked.wait()
    assert playback.active_index == 0

    playback.stop()
    assert playback.state == PlaybackState.IDLE
    assert playback.active_index == 0

    engine.block_on = None
    engine.spoken.clear()
    await playback.play(1)
    await playback.wait()

    assert engine.spoken == [
        f"From WBUR. Headline 2. {paragraphs[1]}",
        episode.outro,
    ]
    assert playback.state == PlaybackState.FINISHED
    assert playback.active_index == -1


@pytest.mark.asyncio
async def test_resume_restarts_active_story(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """Stopping inside story 2 and resuming replays story 2 from its first paragraph."""
    episode = make_episode([paragraphs[0], f"{paragraphs[1]}\n\n{paragraphs[2]}"])
    engine = RecordingEngine(block_on=paragraphs[2])
    playback = PlaybackService(Sequencer(engine))
    playback.load(episode)

    await playback.play()
    await engine.blocked.wait()
    assert playback.active_index == 1

    playback.stop()
    assert playback.active_index == 1

    engine.block_on = None
    engine.spoken.clear()
    await playback.resume()
    await playback.wait()

    assert engine.spoken == [
        f"From WBUR. Headline 2. {paragraphs[1]}",
        paragraphs[2],
        episode.outro,
    ]
    assert playback.state == PlaybackState.FINISHED


@pytest.mark.asyncio
@pytest.mark.parametrize("stop_during", ["intro", "outro"])
async def test_resume_outside_stories_starts_over(
    make_episode: Callable[..., Episode], paragraphs: list[str], stop_during: str
) -> None:
    """Stopping during the intro or the outro resumes from the first segment."""
    episode = make_episode([paragraphs[0], paragraphs[1]])
    marker = "stories for today" if stop_during == "intro" else episode.outro
    engine = RecordingEngine(block_on=marker)
    playback = PlaybackService(Sequencer(engine))
    playback.load(episode)

    await playback.play()
    await engine.blocked.wait()
    playback.stop()

    engine.block_on = None
    engine.spoken.clear()
    await playback.resume()
    await playback.wait()

    assert engine.spoken == [s.text for s in playback.segments]
    assert engine.spoken[0] == "Boston Pulse. 2 stories for today."
    assert playback.state == PlaybackState.FINISHED
@pytest.mark.asyncio
async def test_new_play_replaces_current(make_episode: Callable[..., Episode], paragraphs: list[str]) -> None:
    """Starting playback while playing cancels the previous run first."""
    episode = make_episode([paragraphs[0], paragraphs[1]])
    segments = build_segments(episode)
    engine = RecordingEngine(block_on="Headline 1")
    sequencer = Sequencer(engine)

    await sequencer.play(segments)
    await engine.blocked.wait()

    engine.block_on = None
    engine.spoken.clear()
    await sequencer.play(segments, start_index=3)
    await sequencer.wait()

    assert engine.cancelled == 1
    assert engine.spoken == [segments[3].text]


def test_select_voice_preferences() -> None:
    """Exact match first, then vendor US English, then any English, then anything."""
    voices = [
        Voice("Google UK English Female", "en-GB"),
        Voice("Microsoft Aria Online (Natural)", "en-US"),
        Voice("Samantha", "en-US"),
        Voice("Alex (Compact)", "en-US"),
        Voice("Thomas", "fr-FR"),
    ]

    assert select_voice(voices, "Samantha").name == "Samantha"
    assert select_voice(voices, "Missing").name == "Microsoft Aria Online (Natural)"
    assert select_voice(voices).name == "Microsoft Aria Online (Natural)"
    # Compact voices are filtered as low quality
    assert select_voice(voices, "Alex (Compact)").name == "Microsoft Aria Online (Natural)"

    assert select_voice([Voice("Karen", "en-AU")]).name == "Karen"
    assert select_voice([Voice("Thomas", "fr-FR")]).name == "Thomas"
    assert select_voice([]) is None


def test_select_voice_without_quality_names() -> None:
    """Plain English voices are used when no voice looks natural."""
    voices = [Voice("Fred", "en-GB"), Voice("Victoria", "en-US")]
    assert select_voice(voices).name == "Victoria"
