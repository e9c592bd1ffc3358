"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from news_pulse.core.entities import FeedSource, Voice

FALLBACK_OUTRO = (
    "How might the stories you heard today change your path through the city tomorrow?"
)


def _default_sources() -> list[dict]:
    # Priority 1: editorial depth, 2: city-wide frequency, 3: hyper-local/official
    return [
        {"key": "dfp", "name": "Daily Free Press", "url": "https://dailyfreepress.com/feed/", "priority": 1},
        {"key": "wbur", "name": "WBUR", "url": "https://www.wbur.org/rss", "priority": 1},
        {"key": "bcom", "name": "Boston.com", "url": "https://www.boston.com/tag/local-news/feed/", "priority": 2},
        {"key": "uhub", "name": "Universal Hub", "url": "https://www.universalhub.com/feed", "priority": 3},
        {"key": "bgov", "name": "Boston.gov", "url": "https://www.boston.gov/news/rss", "priority": 3},
    ]


@dataclass
class ClaudeConfig:
    """Claude API settings."""
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 120
    temperature: float = 0.7
    max_retries: int = 3
    initial_retry_delay: float = 2.0
    request_delay: float = 0.0


@dataclass
class FeedsConfig:
    """Feed fetching settings."""
    mode: str = "gateway"
    gateway_url: str = "https://api.rss2json.com/v1/api.json"
    relay_url: Optional[str] = "http://localhost:3001/rss"
    timeout: float = 20.0
    user_agent: str = "Mozilla/5.0 (compatible; NewsPulse/1.0)"
    sources: list[dict] = field(default_factory=_default_sources)


@dataclass
class EpisodeConfig:
    """Episode assembly settings."""
    title: str = "Boston Pulse"
    episode_size: int = 3
    candidate_count: int = 15
    min_excerpt_length: int = 100
    pool_cache_ttl: float = 1800.0
    fresh_hours: float = 48.0
    fallback_outro: str = FALLBACK_OUTRO


@dataclass
class PlaybackConfig:
    """Narration settings."""
    voice_name: str = ""
    rate: float = 1.0
    speech_command: Optional[list[str]] = None
    voices: list[dict] = field(default_factory=list)


@dataclass
class PromptsConfig:
    """Prompts for LLM."""
    outro: dict = field(default_factory=lambda: {
        "system": (
            'You are an editorial assistant for "{title}", a daily short-form news podcast.'
        ),
        "user": (
            "I will provide news excerpts from local sources.\n\n"
            "Create a single, gentle, open-ended reflection question related to these "
            "stories to leave the listener thinking. It must be ONE sentence.\n\n"
            "Stories:\n{stories}\n\n"
            "Constraint: Max 30 words. Calm, non-sensational, professional tone."
        ),
    })


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"


@dataclass
class Settings:
    """Application settings."""

    # API Keys (from environment only)
    anthropic_api_key: str = ""

    # Config sections
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    feeds: FeedsConfig = field(default_factory=FeedsConfig)
    episode: EpisodeConfig = field(default_factory=EpisodeConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    prompts: PromptsConfig = field(default_factory=PromptsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def feed_sources(self) -> list[FeedSource]:
        return [
            FeedSource(
                key=s["key"],
                name=s.get("name", s["key"]),
                url=s["url"],
                priority=int(s.get("priority", 3)),
            )
            for s in self.feeds.sources
        ]

    @property
    def playback_voices(self) -> list[Voice]:
        return [Voice(name=v["name"], lang=v.get("lang", "en-US")) for v in self.playback.voices]


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
    )

    sections = {
        "claude": settings.claude,
        "feeds": settings.feeds,
        "episode": settings.episode,
        "playback": settings.playback,
        "logging": settings.logging,
    }
    for name, section in sections.items():
        for key, value in (config.get(name) or {}).items():
            if not hasattr(section, key):
                raise ValueError(f"Unknown config option: {name}.{key}")
            setattr(section, key, value)

    if "prompts" in config:
        settings.prompts = PromptsConfig(**config["prompts"])

    if settings.feeds.mode not in ("gateway", "direct"):
        raise ValueError(f"Unsupported feeds.mode: {settings.feeds.mode}")

    log_level = os.getenv("NEWS_PULSE_LOG_LEVEL")
    if log_level:
        settings.logging.level = log_level

    return settings
