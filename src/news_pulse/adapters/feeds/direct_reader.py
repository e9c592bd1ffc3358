"""Feed reader that fetches raw RSS/Atom XML, optionally through a CORS relay."""

from typing import Optional
from xml.etree import ElementTree as ET

import httpx

from news_pulse.adapters.feeds.normalizer import to_raw_item
from news_pulse.core import FeedFetchError, FeedReader, FeedSource, FeedStatus, RawItem

ATOM_NS = "{http://www.w3.org/2005/Atom}"
CONTENT_ENCODED = "{http://purl.org/rss/1.0/modules/content/}encoded"


def _text(element: Optional[ET.Element]) -> str:
    if element is None or element.text is None:
        return ""
    return element.text.strip()


class DirectFeedReader(FeedReader):
    """Read RSS 2.0 and Atom feeds as XML."""

    def __init__(self, relay_url: Optional[str] = None) -> None:
        self.relay_url = relay_url

    @property
    def mode(self) -> str:
        return FeedStatus.DIRECT.value

    async def read(self, client: httpx.AsyncClient, source: FeedSource) -> list[RawItem]:
        """Fetch one feed, via the relay when configured."""
        try:
            if self.relay_url:
                response = await client.get(self.relay_url, params={"url": source.url})
            else:
                response = await client.get(source.url)
        except httpx.HTTPError as e:
            raise FeedFetchError(f"{source.name}: {e}") from e

        if response.status_code != 200:
            raise FeedFetchError(f"{source.name}: Status {response.status_code}")

        return self.parse_feed(response.text, source)

    def parse_feed(self, xml_content: str, source: FeedSource) -> list[RawItem]:
        """Parse RSS 2.0 <item> or Atom <entry> elements."""
        try:
            root = ET.fromstring(xml_content)
        except ET.ParseError as e:
            raise FeedFetchError(f"{source.name}: invalid feed XML ({e})") from e

        items: list[RawItem] = []

        for entry in root.iter("item"):
            item = to_raw_item(
                source,
                link=_text(entry.find("link")),
                title=_text(entry.find("title")),
                guid=_text(entry.find("guid")),
                content=_text(entry.find(CONTENT_ENCODED)),
                description=_text(entry.find("description")),
                published=_text(entry.find("pubDate")),
            )
            if item is not None:
                items.append(item)

        for entry in root.iter(f"{ATOM_NS}entry"):
            item = to_raw_item(
                source,
                link=self._atom_link(entry),
                title=_text(entry.find(f"{ATOM_NS}title")),
                guid=_text(entry.find(f"{ATOM_NS}id")),
                content=_text(entry.find(f"{ATOM_NS}content")),
                description=_text(entry.find(f"{ATOM_NS}summary")),
                published=_text(entry.find(f"{ATOM_NS}published")) or _text(entry.find(f"{ATOM_NS}updated")),
            )
            if item is not None:
                items.append(item)

        return items

    def _atom_link(self, entry: ET.Element) -> str:
        links = entry.findall(f"{ATOM_NS}link")
        for link in links:
            if link.get("rel", "alternate") == "alternate" and link.get("href"):
                return link.get("href", "")
        return links[0].get("href", "") if links else ""
