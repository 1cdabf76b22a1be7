# ABOUTME: Error taxonomy for feed retrieval and decoding.
# ABOUTME: FeedFetchError covers transport failures, FeedParseError covers bad documents.


class FeedError(Exception):
    """Base class for every failure while obtaining a feed."""


class FeedFetchError(FeedError):
    """Raised when a complete response body cannot be obtained."""


class FeedParseError(FeedError):
    """Raised when the response body is not a well-formed Atom document."""
