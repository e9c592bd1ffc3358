"""Tests for configuration loading."""

from pathlib import Path

import pytest

from news_pulse.config import FALLBACK_OUTRO, get_settings


def test_defaults_without_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Missing config file gives the built-in defaults."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("NEWS_PULSE_LOG_LEVEL", raising=False)

    settings = get_settings(tmp_path / "missing.yaml")

    assert settings.anthropic_api_key == ""
    assert settings.feeds.mode == "gateway"
    assert settings.episode.episode_size == 3
    assert settings.episode.candidate_count == 15
    assert settings.episode.fallback_outro == FALLBACK_OUTRO
    assert [s.key for s in settings.feed_sources] == ["dfp", "wbur", "bcom", "uhub", "bgov"]
    assert settings.feed_sources[0].priority == 1


def test_yaml_and_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """YAML sections override defaults, keys come from the environment."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "secret")
    monkeypatch.setenv("NEWS_PULSE_LOG_LEVEL", "DEBUG")
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
feeds:
  mode: direct
  relay_url: http://relay.test/rss
  sources:
    - key: wbur
      name: WBUR
      url: https://www.wbur.org/rss
episode:
  title: Morning Pulse
  episode_size: 2
playback:
  voice_name: Samantha
  rate: 1.25
  voices:
    - name: Samantha
      lang: en-US
claude:
  model: claude-test
""",
        encoding="utf-8",
    )

    settings = get_settings(config_path)

    assert settings.anthropic_api_key == "secret"
    assert settings.logging.level == "DEBUG"
    assert settings.feeds.mode == "direct"
    assert settings.feeds.relay_url == "http://relay.test/rss"
    assert [s.name for s in settings.feed_sources] == ["WBUR"]
    assert settings.feed_sources[0].priority == 3
    assert settings.episode.title == "Morning Pulse"
    assert settings.episode.episode_size == 2
    assert settings.playback.rate == 1.25
    assert settings.playback_voices[0].name == "Samantha"
    assert settings.claude.model == "claude-test"


def test_unknown_option_rejected(tmp_path: Path) -> None:
    """Typos in config keys are reported."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text("episode:\n  epsiode_size: 2\n", encoding="utf-8")

    with pytest.raises(ValueError, match="episode.epsiode_size"):
        get_settings(config_path)


def test_invalid_feed_mode(tmp_path: Path) -> None:
    """Only gateway and direct modes exist."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text("feeds:\n  mode: carrier-pigeon\n", encoding="utf-8")

    with pytest.raises(ValueError, match="feeds.mode"):
        get_settings(config_path)
