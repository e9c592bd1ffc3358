"""Article adapters for editorial enrichment."""

from news_pulse.adapters.articles.enricher import Enricher
from news_pulse.adapters.articles.fetcher import HttpArticleFetcher

__all__ = ["Enricher", "HttpArticleFetcher"]
