"""Claude API client for the episode closing line."""

import asyncio
import logging
from typing import Any, Sequence

import httpx

from news_pulse.config import Settings
from news_pulse.core import EnrichedItem, OutroGenerationError, OutroGenerator

logger = logging.getLogger(__name__)

API_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"
EXCERPT_CHARS = 200


class ClaudeClient(OutroGenerator):
    """Ask Claude for one reflective sentence about the episode's stories."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.api_key = settings.anthropic_api_key
        self.model = settings.claude.model
        self.max_tokens = settings.claude.max_tokens
        self.temperature = settings.claude.temperature
        self.max_retries = settings.claude.max_retries
        self.initial_retry_delay = settings.claude.initial_retry_delay
        self.request_delay = settings.claude.request_delay
        self._last_request_time = 0.0

    async def generate_outro(self, items: Sequence[EnrichedItem]) -> str:
        """Generate a one-sentence reflection on the given stories."""
        if not self.api_key:
            raise OutroGenerationError("ANTHROPIC_API_KEY is not set")

        prompts = self.settings.prompts.outro
        stories = "\n".join(
            f"{i}. [{item.source}] {item.title}: {item.editorial_excerpt[:EXCERPT_CHARS]}"
            for i, item in enumerate(items, 1)
        )
        payload = self._build_payload(
            system=prompts.get("system", "").format(title=self.settings.episode.title),
            prompt=prompts.get("user", "").format(stories=stories, count=len(items)),
        )

        try:
            data = await self._post_with_retries(payload)
            text = data["content"][0]["text"]
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
            raise OutroGenerationError(f"Claude request failed: {e}") from e

        return text.strip()

    def _build_payload(self, system: str, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def _throttle(self) -> None:
        """Keep at least request_delay seconds between requests."""
        elapsed = asyncio.get_running_loop().time() - self._last_request_time
        if elapsed < self.request_delay:
            await asyncio.sleep(self.request_delay - elapsed)

    async def _post_with_retries(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST to the messages endpoint, retrying rate limits, 5xx and network errors."""
        await self._throttle()
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": API_VERSION,
            "content-type": "application/json",
        }

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=60.0) as client:
                    response = await client.post(API_URL, headers=headers, json=payload)
            except httpx.RequestError as e:
                if attempt == self.max_retries - 1:
                    raise
                delay = self._backoff(attempt)
                logger.warning("Network error, retrying after %.1fs: %s", delay, e)
                await asyncio.sleep(delay)
                continue

            self._last_request_time = asyncio.get_running_loop().time()

            if response.status_code == 200:
                return response.json()

            if response.status_code == 429:
                delay = self._get_retry_delay(response, attempt)
                logger.warning(
                    "Rate limited, retrying after %.1fs (attempt %d/%d)",
                    delay, attempt + 1, self.max_retries,
                )
            elif response.status_code >= 500:
                delay = self._backoff(attempt)
                logger.warning("Claude returned %d, retrying after %.1fs", response.status_code, delay)
            else:
                response.raise_for_status()
                raise OutroGenerationError(f"Unexpected status {response.status_code}")

            await asyncio.sleep(delay)

        raise OutroGenerationError("Failed to call API after all retries")

    def _backoff(self, attempt: int) -> float:
        return self.initial_retry_delay * (2 ** attempt)

    def _get_retry_delay(self, response: httpx.Response, attempt: int) -> float:
        """Prefer the retry-after header, else exponential backoff."""
        retry_after = response.headers.get("retry-after")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass
        return self._backoff(attempt)
