"""Gemlog feed ingestion: fetching, dialect detection and parsing."""

from .fetch import FeedDocument, FeedFetcher, decode_document
from .models import Feed, FeedDialect, FeedEntry
from .parser import detect_dialect, parse_feed

__all__ = [
    "Feed",
    "FeedDialect",
    "FeedDocument",
    "FeedEntry",
    "FeedFetcher",
    "decode_document",
    "detect_dialect",
    "parse_feed",
]
