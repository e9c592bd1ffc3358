"""
news_pulse

Turns a rotating pool of local news feeds into a short narrated episode.

Pipeline: fetch → extract → select → sequence → play
"""

__version__ = "0.1.0"
