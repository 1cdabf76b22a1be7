# ABOUTME: Pytest fixtures and configuration for alert-feed tests.
# ABOUTME: Provides mock settings, sample Atom documents, and an HTTP transport stub.

from collections.abc import Callable, Iterator

import httpx
import pytest
import structlog

from alert_feed.config import Settings

MINIMAL_FEED = b'<feed xmlns="http://www.w3.org/2005/Atom"><title>Active Alerts</title></feed>'

NWS_FEED = b"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<feed xmlns="http://www.w3.org/2005/Atom"
      xmlns:cap="urn:oasis:names:tc:emergency:cap:1.1">
  <id>https://alerts.weather.gov/cap/us.atom</id>
  <generator>NWS CAP Server</generator>
  <updated>2018-03-06T11:22:39-05:00</updated>
  <author>
    <name>w-nws.webmaster@noaa.gov</name>
  </author>
  <title>Current Watches, Warnings and Advisories for the United States Issued by the National Weather Service</title>
  <link href="https://alerts.weather.gov/cap/us.atom"/>
  <entry>
    <id>https://alerts.weather.gov/cap/wwacapget.php?x=AK125A1A2B3C4D.WinterStormWarning</id>
    <updated>2018-03-06T10:15:00-09:00</updated>
    <published>2018-03-06T10:15:00-09:00</published>
    <author>
      <name>w-nws.webmaster@noaa.gov</name>
    </author>
    <title>Winter Storm Warning issued March 06 at 10:15AM AKST until March 07 at 06:00AM AKST by NWS</title>
    <link href="https://alerts.weather.gov/cap/wwacapget.php?x=AK125A1A2B3C4D.WinterStormWarning"/>
    <summary>...WINTER STORM WARNING REMAINS IN EFFECT UNTIL 6 AM AKST WEDNESDAY...</summary>
    <cap:event>Winter Storm Warning</cap:event>
    <cap:effective>2018-03-06T10:15:00-09:00</cap:effective>
    <cap:expires>2018-03-07T06:00:00-09:00</cap:expires>
    <cap:status>Actual</cap:status>
    <cap:msgType>Alert</cap:msgType>
    <cap:category>Met</cap:category>
    <cap:urgency>Expected</cap:urgency>
    <cap:severity>Moderate</cap:severity>
    <cap:certainty>Likely</cap:certainty>
    <cap:areaDesc>Northern Arctic Coast</cap:areaDesc>
    <cap:polygon>1,1 2,2 3,3 1,1</cap:polygon>
    <cap:polygon>5,5 6,6 7,7 5,5</cap:polygon>
    <cap:circle>70.5,-156.5 10</cap:circle>
    <cap:geocode>
      <valueName>FIPS6</valueName>
      <value>002185 002188</value>
      <valueName>UGC</valueName>
      <value>AKZ202</value>
    </cap:geocode>
    <cap:parameter>
      <valueName>VTEC</valueName>
      <value>/O.CON.PAFG.WS.W.0003.000000T0000Z-180307T1500Z/</value>
    </cap:parameter>
  </entry>
</feed>
"""

RICH_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xmlns:ext="urn:example:ext" xml:lang="en-US">
  <id>urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6</id>
  <title type="html">Active &lt;b&gt;Alerts&lt;/b&gt;</title>
  <subtitle>Watches and warnings</subtitle>
  <updated>2024-05-01T12:00:00Z</updated>
  <author><name>NWS</name><uri>https://www.weather.gov/</uri><email>nws@example.gov</email></author>
  <link rel="self" type="application/atom+xml" href="https://example.gov/alerts.atom"/>
  <link rel="alternate" type="text/html" href="https://example.gov/alerts"/>
  <category term="weather" scheme="https://example.gov/terms" label="Weather"/>
  <generator uri="https://example.gov/gen" version="2.1">AlertGen</generator>
  <rights>Public domain</rights>
  <ext:region>Alaska</ext:region>
  <entry xml:base="https://example.gov/alerts/">
    <id>urn:alert:1</id>
    <title>Flood Watch</title>
    <source>
      <id>urn:feed:upstream</id>
      <title>Upstream Alerts</title>
      <updated>2024-04-30T09:00:00Z</updated>
      <link rel="self" href="https://upstream.example.gov/alerts.atom"/>
    </source>
    <updated>2024-05-01T11:00:00Z</updated>
    <link rel="alternate" type="application/cap+xml" href="https://example.gov/alerts/1.cap"/>
    <link href="https://example.gov/alerts/1"/>
    <content type="text">River levels rising.</content>
    <ext:flag level="2">on</ext:flag>
  </entry>
</feed>
"""


@pytest.fixture
def mock_settings() -> Settings:
    """Create mock settings for testing."""
    return Settings(
        feed_url="https://example.com/alerts.atom",
        feed_timeout=5,
        feed_user_agent="alert-feed-tests",
        log_level="DEBUG",
    )


@pytest.fixture
def make_transport() -> Callable[..., httpx.MockTransport]:
    """Build a MockTransport answering every request with a fixed response."""

    def factory(content: bytes = MINIMAL_FEED, status_code: int = 200) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, content=content)

        return httpx.MockTransport(handler)

    return factory


@pytest.fixture
def refused_transport() -> httpx.MockTransport:
    """Transport whose connections are always refused."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    return httpx.MockTransport(handler)


@pytest.fixture
def timeout_transport() -> httpx.MockTransport:
    """Transport whose requests always time out."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    return httpx.MockTransport(handler)


@pytest.fixture
def minimal_feed_xml() -> bytes:
    """Smallest Atom document: a feed with only a title."""
    return MINIMAL_FEED


@pytest.fixture
def nws_feed_xml() -> bytes:
    """NWS national feed excerpt with one CAP alert entry."""
    return NWS_FEED


@pytest.fixture
def rich_feed_xml() -> bytes:
    """Atom feed exercising every supported construct."""
    return RICH_FEED


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Drop logging configuration made by a test, which may point at a closed capture stream."""
    yield
    structlog.reset_defaults()
