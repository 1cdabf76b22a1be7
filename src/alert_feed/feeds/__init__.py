# ABOUTME: Feed module for fetching, decoding and encoding Atom feeds.
# ABOUTME: Exposes the HTTP fetcher plus the feedparser decoder and the XML encoder.

from alert_feed.feeds.fetcher import FeedFetcher
from alert_feed.feeds.parser import parse_feed
from alert_feed.feeds.serializer import render_feed

__all__ = ["FeedFetcher", "parse_feed", "render_feed"]
