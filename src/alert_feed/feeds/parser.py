# ABOUTME: Atom feed decoder built on feedparser, with an ElementTree pass for raw markup.
# ABOUTME: Converts raw response bytes into the Feed model, rejecting malformed or non-Atom bodies.

import copy
import io
import re
import time
import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from typing import Any

import feedparser
import structlog

from alert_feed.exceptions import FeedParseError
from alert_feed.feeds.namespaces import CAP_NS, XML_NS, qname, split_tag
from alert_feed.models import (
    Category,
    Entry,
    Extension,
    Feed,
    Generator,
    Link,
    NamedValue,
    Person,
    Source,
    Text,
)

log = structlog.get_logger()

# feedparser reports text construct types as media types
_TEXT_TYPES = {
    "text/plain": "text",
    "text/html": "html",
    "application/xhtml+xml": "xhtml",
}

# CAP element -> Entry attribute
CAP_TEXT_ELEMENTS = {
    "event": "event",
    "status": "status",
    "msgType": "msg_type",
    "urgency": "urgency",
    "severity": "severity",
    "certainty": "certainty",
    "areaDesc": "area_desc",
}
CAP_TIME_ELEMENTS = {
    "effective": "effective",
    "expires": "expires",
}
CAP_LIST_ELEMENTS = {
    "category": "alert_categories",
    "polygon": "polygons",
    "circle": "circles",
}
CAP_NAMED_VALUE_ELEMENTS = {
    "geocode": "geocodes",
    "parameter": "parameters",
}

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


def parse_feed(data: bytes) -> Feed:
    """Decode an Atom document.

    feedparser validates the document and decodes the Atom constructs. The raw
    element tree supplies what feedparser normalizes away: link attributes as
    written, xml:lang/xml:base, CAP elements and other foreign-namespace children.

    Args:
        data: Raw response body.

    Returns:
        The decoded Feed.

    Raises:
        FeedParseError: If the body is empty, not well-formed XML, or not an Atom feed.
    """
    if not data.strip():
        raise FeedParseError("empty document")

    # BytesIO keeps feedparser from treating the payload as a path or URL
    parsed = feedparser.parse(io.BytesIO(data))

    if parsed.bozo and not isinstance(parsed.bozo_exception, feedparser.CharacterEncodingOverride):
        raise FeedParseError(f"malformed feed: {parsed.bozo_exception}")

    version = parsed.get("version") or ""
    if not version.startswith("atom"):
        raise FeedParseError(f"not an Atom feed (detected format: {version or 'unknown'})")

    root = _load_tree(data, parsed.get("encoding"))
    atom_ns, _ = split_tag(root.tag)

    elements = _children(root, atom_ns, "entry")
    if len(elements) != len(parsed.entries):
        raise FeedParseError(
            f"entry count mismatch: {len(elements)} elements, {len(parsed.entries)} decoded"
        )

    feed = Feed(
        **_head_fields(parsed.feed, root, atom_ns),
        lang=root.get(qname(XML_NS, "lang")),
        base=root.get(qname(XML_NS, "base")),
        entries=[
            _build_entry(entry, element, atom_ns)
            for entry, element in zip(parsed.entries, elements, strict=True)
        ],
        extensions=[_extension(child) for child in _foreign_children(root, atom_ns)],
    )
    log.debug("feed_parsed", version=version, entries=len(feed.entries))
    return feed


def _load_tree(data: bytes, encoding: str | None) -> ET.Element:
    try:
        return ET.fromstring(data)
    except ET.ParseError:
        pass

    # feedparser decoded the body with another encoding than the declared one
    try:
        text = data.decode(encoding or "utf-8")
        return ET.fromstring(_XML_DECLARATION.sub("", text, count=1))
    except (LookupError, UnicodeDecodeError, ET.ParseError) as e:
        raise FeedParseError(f"malformed feed: {e}") from e


def _head_fields(meta: dict[str, Any], element: ET.Element, atom_ns: str) -> dict[str, Any]:
    """Metadata shared by the feed and by an entry's atom:source."""
    generator = None
    if meta.get("generator_detail"):
        detail = meta["generator_detail"]
        generator = Generator(
            value=detail.get("name") or "",
            uri=detail.get("href"),
            version=detail.get("version"),
        )

    return {
        "id": meta.get("id"),
        "title": _text(meta.get("title_detail")),
        "subtitle": _text(meta.get("subtitle_detail")),
        "updated": _timestamp(meta.get("updated_parsed")),
        "authors": _people(meta.get("authors")),
        "contributors": _people(meta.get("contributors")),
        "links": _links(element, atom_ns),
        "categories": _categories(meta.get("tags")),
        "generator": generator,
        "icon": meta.get("icon"),
        "logo": meta.get("logo") or meta.get("image", {}).get("href"),
        "rights": _text(meta.get("rights_detail")),
    }


def _build_entry(entry: dict[str, Any], element: ET.Element, atom_ns: str) -> Entry:
    content = None
    if entry.get("content"):
        content = _text(entry["content"][0])

    source = None
    source_elements = _children(element, atom_ns, "source")
    if source_elements:
        source = Source(**_head_fields(entry.get("source") or {}, source_elements[0], atom_ns))

    return Entry(
        id=entry.get("id"),
        title=_text(entry.get("title_detail")),
        updated=_timestamp(entry.get("updated_parsed")),
        published=_timestamp(entry.get("published_parsed")),
        authors=_people(entry.get("authors")),
        contributors=_people(entry.get("contributors")),
        links=_links(element, atom_ns),
        categories=_categories(entry.get("tags")),
        # feedparser copies text content into `summary` but only a real <summary> has a detail
        summary=_text(entry.get("summary_detail")),
        content=content,
        rights=_text(entry.get("rights_detail")),
        source=source,
        lang=element.get(qname(XML_NS, "lang")),
        base=element.get(qname(XML_NS, "base")),
        **_cap_fields(element, atom_ns),
    )


def _cap_fields(element: ET.Element, atom_ns: str) -> dict[str, Any]:
    """Read CAP children of an entry; other foreign children become extensions."""
    fields: dict[str, Any] = {name: [] for name in CAP_LIST_ELEMENTS.values()}
    fields.update({name: [] for name in CAP_NAMED_VALUE_ELEMENTS.values()})
    extensions: list[Extension] = []

    for child in _foreign_children(element, atom_ns):
        namespace, name = split_tag(child.tag)
        text = (child.text or "").strip()
        moment = None
        if namespace == CAP_NS and name in CAP_TIME_ELEMENTS:
            moment = _parse_datetime(text)

        if namespace != CAP_NS:
            extensions.append(_extension(child))
        elif name in CAP_TEXT_ELEMENTS and text:
            fields[CAP_TEXT_ELEMENTS[name]] = text
        elif moment is not None:
            fields[CAP_TIME_ELEMENTS[name]] = moment
        elif name in CAP_LIST_ELEMENTS:
            fields[CAP_LIST_ELEMENTS[name]].append(text)
        elif name in CAP_NAMED_VALUE_ELEMENTS:
            fields[CAP_NAMED_VALUE_ELEMENTS[name]].extend(_named_values(child))
        else:
            # empty or unparsable values are kept as written
            extensions.append(_extension(child))

    fields["extensions"] = extensions
    return fields


def _named_values(element: ET.Element) -> list[NamedValue]:
    """Pair up valueName/value children, whatever namespace they were written in."""
    pairs = []
    name = None
    for child in element:
        _, tag = split_tag(child.tag)
        text = (child.text or "").strip()
        if tag == "valueName":
            name = text
        elif tag == "value" and name is not None:
            pairs.append(NamedValue(name=name, value=text))
            name = None
    return pairs


def _children(element: ET.Element, atom_ns: str, name: str) -> list[ET.Element]:
    tag = qname(atom_ns, name)
    return [child for child in element if child.tag == tag]


def _foreign_children(element: ET.Element, atom_ns: str) -> list[ET.Element]:
    return [child for child in element if split_tag(child.tag)[0] != atom_ns]


def _extension(element: ET.Element) -> Extension:
    detached = copy.copy(element)
    detached.tail = None
    return Extension(xml=ET.tostring(detached, encoding="unicode"))


def _text(detail: dict[str, Any] | None) -> Text | None:
    if detail is None:
        return None
    media_type = detail.get("type") or "text/plain"
    return Text(value=detail.get("value") or "", type=_TEXT_TYPES.get(media_type, media_type))


def _timestamp(parsed: time.struct_time | None) -> datetime | None:
    """Convert a feedparser UTC struct_time to an aware datetime."""
    if not parsed:
        return None
    return datetime(*parsed[:6], tzinfo=UTC)


def _parse_datetime(text: str | None) -> datetime | None:
    """Parse an ISO 8601 CAP timestamp, keeping its offset."""
    if not text:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        log.warning("cap_timestamp_invalid", value=text)
        return None


def _people(items: list[dict[str, Any]] | None) -> list[Person]:
    return [
        Person(name=item.get("name") or "", uri=item.get("href"), email=item.get("email"))
        for item in items or []
        if item
    ]


def _links(element: ET.Element, atom_ns: str) -> list[Link]:
    """Links as written; feedparser would add a default type to untyped links."""
    return [
        Link(
            href=link.get("href"),
            rel=link.get("rel"),
            type=link.get("type"),
            hreflang=link.get("hreflang"),
            title=link.get("title"),
            length=link.get("length"),
        )
        for link in _children(element, atom_ns, "link")
        if link.get("href")
    ]


def _categories(items: list[dict[str, Any]] | None) -> list[Category]:
    return [
        Category(term=item["term"], scheme=item.get("scheme"), label=item.get("label"))
        for item in items or []
        if item.get("term")
    ]
