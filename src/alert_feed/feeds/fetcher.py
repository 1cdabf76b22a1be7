# ABOUTME: Atom feed fetcher for the NWS active alerts feed.
# ABOUTME: Uses httpx for the blocking GET and hands the body to the feedparser decoder.

import httpx
import structlog

from alert_feed.config import Settings, get_settings
from alert_feed.exceptions import FeedFetchError
from alert_feed.feeds.parser import parse_feed
from alert_feed.models import Feed

log = structlog.get_logger()

ACCEPT_HEADER = "application/atom+xml, application/xml;q=0.9, */*;q=0.1"


class FeedFetcher:
    """Fetches an Atom feed over HTTP and decodes it."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.settings.feed_timeout,
                headers={
                    "User-Agent": self.settings.feed_user_agent,
                    "Accept": ACCEPT_HEADER,
                },
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "FeedFetcher":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def fetch_bytes(self, url: str | None = None) -> bytes:
        """Download the complete feed body.

        Args:
            url: Feed URL. Defaults to the configured feed URL.

        Returns:
            The raw response body.

        Raises:
            FeedFetchError: On transport failure, an unsuccessful status, or an empty body.
        """
        url = url or self.settings.feed_url

        log.debug("fetching_feed", url=url)

        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FeedFetchError(f"HTTP status code: {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FeedFetchError(f"failed to fetch {url}: {e}") from e

        body = response.content
        if not body:
            raise FeedFetchError(f"no content from {url}")

        log.info("feed_fetched", url=url, status=response.status_code, size=len(body))
        return body

    def fetch_feed(self, url: str | None = None) -> Feed:
        """Fetch and decode the feed.

        Raises:
            FeedFetchError: If the body could not be obtained; nothing is parsed then.
            FeedParseError: If the body is not a well-formed Atom document.
        """
        body = self.fetch_bytes(url)
        feed = parse_feed(body)
        log.info("feed_decoded", entries=len(feed.entries))
        return feed
