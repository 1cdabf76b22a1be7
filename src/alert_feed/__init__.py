# ABOUTME: Main package for the alert-feed NWS Atom feed client.
# ABOUTME: Exports settings access and the Atom feed models.

from alert_feed.config import get_settings
from alert_feed.models import Entry, Feed

__all__ = [
    "get_settings",
    "Entry",
    "Feed",
]
