"""LLM adapters."""

from news_pulse.adapters.llm.claude_client import ClaudeClient

__all__ = ["ClaudeClient"]
