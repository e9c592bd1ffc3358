"""HTTP article fetcher."""

from typing import Optional

import httpx

from news_pulse.core import ArticleFetchError, ArticleFetcher


class HttpArticleFetcher(ArticleFetcher):
    """Fetch full article markup through the gateway or the relay.

    One client is shared by all fetches until aclose().
    """

    def __init__(
        self,
        mode: str = "gateway",
        gateway_url: str = "https://api.rss2json.com/v1/api.json",
        relay_url: Optional[str] = None,
        timeout: float = 20.0,
        user_agent: str = "Mozilla/5.0 (compatible; NewsPulse/1.0)",
    ) -> None:
        self.mode = mode
        self.gateway_url = gateway_url
        self.relay_url = relay_url
        self.timeout = timeout
        self.user_agent = user_agent
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def fetch(self, link: str) -> str:
        """Return the article markup for link."""
        client = self._get_client()
        try:
            if self.mode == "gateway":
                response = await client.get(self.gateway_url, params={"rss_url": link})
            elif self.relay_url:
                response = await client.get(self.relay_url, params={"url": link})
            else:
                response = await client.get(link)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ArticleFetchError(f"{link}: {e}") from e

        if response.status_code != 200:
            raise ArticleFetchError(f"{link}: Status {response.status_code}")

        if self.mode != "gateway":
            return response.text

        try:
            data = response.json()
        except ValueError as e:
            raise ArticleFetchError(f"{link}: invalid gateway response ({e})") from e
        if not isinstance(data, dict):
            raise ArticleFetchError(f"{link}: unexpected gateway payload")

        for key in ("content", "description"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
        return ""

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
