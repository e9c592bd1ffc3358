"""Feed reader backed by the rss2json gateway."""

import httpx

from news_pulse.adapters.feeds.normalizer import to_raw_item
from news_pulse.core import FeedFetchError, FeedReader, FeedSource, FeedStatus, RawItem


class GatewayFeedReader(FeedReader):
    """Read feeds as JSON through an RSS-to-JSON gateway."""

    def __init__(self, gateway_url: str = "https://api.rss2json.com/v1/api.json") -> None:
        self.gateway_url = gateway_url

    @property
    def mode(self) -> str:
        return FeedStatus.GATEWAY.value

    async def read(self, client: httpx.AsyncClient, source: FeedSource) -> list[RawItem]:
        """Fetch one feed through the gateway."""
        try:
            response = await client.get(self.gateway_url, params={"rss_url": source.url})
        except httpx.HTTPError as e:
            raise FeedFetchError(f"{source.name}: {e}") from e

        if response.status_code != 200:
            raise FeedFetchError(f"{source.name}: Status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise FeedFetchError(f"{source.name}: invalid gateway response ({e})") from e

        return self.parse_payload(data, source)

    def parse_payload(self, data: object, source: FeedSource) -> list[RawItem]:
        """Convert a gateway JSON payload into items."""
        if not isinstance(data, dict):
            raise FeedFetchError(f"{source.name}: unexpected gateway payload")

        status = data.get("status", "ok")
        if status != "ok":
            message = data.get("message") or status
            raise FeedFetchError(f"{source.name}: gateway error ({message})")

        entries = data.get("items")
        if not isinstance(entries, list):
            raise FeedFetchError(f"{source.name}: feed has no items")

        items: list[RawItem] = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            item = to_raw_item(
                source,
                link=entry.get("link"),
                title=entry.get("title"),
                guid=entry.get("guid"),
                content=entry.get("content"),
                description=entry.get("description"),
                published=entry.get("pubDate"),
            )
            if item is not None:
                items.append(item)
        return items
