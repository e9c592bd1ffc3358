"""CLI entry point for news pulse."""

import asyncio
import textwrap
from pathlib import Path
from typing import Optional

import typer

from news_pulse.adapters.articles import Enricher, HttpArticleFetcher
from news_pulse.adapters.feeds import DirectFeedReader, FeedAggregator, GatewayFeedReader
from news_pulse.adapters.llm import ClaudeClient
from news_pulse.adapters.speech import CommandSpeechEngine, ConsoleSpeechEngine
from news_pulse.config import Settings, get_settings
from news_pulse.core import Episode, FeedStatus, PipelineError, Sequencer, SessionState, SpeechEngine
from news_pulse.logging_config import setup_logging
from news_pulse.use_cases import EpisodeService, OutroService, PlaybackService


def build_episode_service(settings: Settings, session: SessionState) -> EpisodeService:
    """Wire adapters into the pipeline service."""
    feeds = settings.feeds
    if feeds.mode == "direct":
        reader = DirectFeedReader(relay_url=feeds.relay_url)
    else:
        reader = GatewayFeedReader(gateway_url=feeds.gateway_url)

    aggregator = FeedAggregator(reader, timeout=feeds.timeout, user_agent=feeds.user_agent)
    fetcher = HttpArticleFetcher(
        mode=feeds.mode,
        gateway_url=feeds.gateway_url,
        relay_url=feeds.relay_url,
        timeout=feeds.timeout,
        user_agent=feeds.user_agent,
    )
    enricher = Enricher(fetcher, session.enrichment_cache)

    generator = ClaudeClient(settings) if settings.anthropic_api_key else None
    outro_service = OutroService(generator, fallback=settings.episode.fallback_outro)

    return EpisodeService(
        aggregator=aggregator,
        enricher=enricher,
        outro_service=outro_service,
        session=session,
        sources=settings.feed_sources,
        episode_size=settings.episode.episode_size,
        candidate_count=settings.episode.candidate_count,
        min_excerpt_length=settings.episode.min_excerpt_length,
        fresh_hours=settings.episode.fresh_hours,
    )


def build_speech_engine(settings: Settings) -> SpeechEngine:
    if settings.playback.speech_command:
        return CommandSpeechEngine(settings.playback.speech_command, settings.playback_voices)
    return ConsoleSpeechEngine(settings.playback_voices)


def print_episode(episode: Episode, title: str) -> None:
    print("\n" + "=" * 70)
    print(f"🎙️  {title.upper()} - {len(episode.items)}-story episode")
    print("=" * 70)

    print("\n📡 Feeds:")
    for diagnostic in episode.diagnostics:
        mark = "✗" if diagnostic.status == FeedStatus.FAILED else "✓"
        print(f"  {mark} {diagnostic.name}: {diagnostic.status.value} ({diagnostic.item_count} items)")

    for index, item in enumerate(episode.items, 1):
        cache_note = ", cached" if item.from_cache else ""
        print(f"\n[{index}] {item.title}")
        print(f"    {item.source} · {item.extraction_method.value}, {item.paragraph_count} paragraphs{cache_note}")
        print(f"    {item.link}")
        for paragraph in item.editorial_excerpt.split("\n\n"):
            print(textwrap.indent(textwrap.fill(paragraph, width=74), "    "))
            print()

    print(f"💭 {episode.outro}")


def main(
    config: Path = typer.Option(Path("config.yaml"), "--config", help="Path to YAML config"),
    refresh: bool = typer.Option(False, "--refresh", help="Ignore the cached feed pool"),
    play: bool = typer.Option(False, "--play/--no-play", help="Narrate the episode"),
    voice: Optional[str] = typer.Option(None, "--voice", help="Preferred voice name"),
    rate: Optional[float] = typer.Option(None, "--rate", help="Speaking rate"),
    story: Optional[int] = typer.Option(None, "--story", help="Start narration at this story (1-based)"),
    rerolls: int = typer.Option(0, "--rerolls", help="Assemble this many additional episodes"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
) -> None:
    """Assemble a short narrated news episode from local feeds."""
    settings = get_settings(config)
    setup_logging(log_level or settings.logging.level)
    if voice is not None:
        settings.playback.voice_name = voice
    if rate is not None:
        settings.playback.rate = rate

    exit_code = asyncio.run(async_run(settings, refresh, play, story, rerolls))
    if exit_code:
        raise typer.Exit(code=exit_code)


def app() -> None:
    """CLI entry point."""
    typer.run(main)


async def async_run(
    settings: Settings,
    refresh: bool,
    play: bool,
    story: Optional[int],
    rerolls: int,
) -> int:
    """Async implementation of run command."""
    session = SessionState(pool_cache_ttl=settings.episode.pool_cache_ttl)
    service = build_episode_service(settings, session)
    title = settings.episode.title

    if not settings.anthropic_api_key:
        print("⚠️  ANTHROPIC_API_KEY not found, using the fallback outro")

    episode = None
    try:
        for run_index in range(rerolls + 1):
            try:
                episode = await service.run(force_refetch=refresh and run_index == 0)
            except PipelineError as e:
                print(f"\n❌ Briefing unavailable: {e}")
                print("   Try again or run with --refresh.")
                return 1
            print_episode(episode, title)
    finally:
        await service.aclose()

    if play and episode is not None:
        playback = PlaybackService(
            Sequencer(build_speech_engine(settings)),
            title=title,
            voice_name=settings.playback.voice_name,
            rate=settings.playback.rate,
        )
        playback.load(episode)
        print("\n▶️  Playing...\n")
        await playback.play(story - 1 if story else None)
        try:
            await playback.wait()
        finally:
            playback.stop()

    return 0


if __name__ == "__main__":
    app()
