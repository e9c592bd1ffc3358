"""Speech engine adapters."""

from news_pulse.adapters.speech.engines import CommandSpeechEngine, ConsoleSpeechEngine

__all__ = ["CommandSpeechEngine", "ConsoleSpeechEngine"]
