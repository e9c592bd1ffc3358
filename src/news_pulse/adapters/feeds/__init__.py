"""Feed adapters for building the story pool."""

from news_pulse.adapters.feeds.aggregator import FeedAggregator, deduplicate_by_link
from news_pulse.adapters.feeds.direct_reader import DirectFeedReader
from news_pulse.adapters.feeds.gateway_reader import GatewayFeedReader

__all__ = ["FeedAggregator", "DirectFeedReader", "GatewayFeedReader", "deduplicate_by_link"]
