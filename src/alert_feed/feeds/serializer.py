# ABOUTME: Atom feed encoder producing the canonical XML text of a Feed.
# ABOUTME: Writes Atom 1.0 with the default namespace, CAP elements and extensions as decoded.

import xml.etree.ElementTree as ET
from datetime import datetime

from alert_feed.feeds.namespaces import ATOM_NS, CAP_NS, XHTML_NS, XML_NS, qname
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

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'

# Entry attribute -> CAP element name, in CAP document order
CAP_SCALARS_BEFORE_CATEGORY = (
    ("event", "event"),
    ("effective", "effective"),
    ("expires", "expires"),
    ("status", "status"),
    ("msg_type", "msgType"),
)
CAP_SCALARS_AFTER_CATEGORY = (
    ("urgency", "urgency"),
    ("severity", "severity"),
    ("certainty", "certainty"),
    ("area_desc", "areaDesc"),
)


def render_feed(feed: Feed) -> str:
    """Serialize a Feed to Atom XML text, XML declaration included."""
    root = ET.Element(_atom("feed"))
    _set_common_attributes(root, feed.lang, feed.base)

    _add_head(root, feed)
    for entry in feed.entries:
        root.append(_entry_element(entry))
    _add_extensions(root, feed.extensions)

    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def _add_head(parent: ET.Element, head: Source) -> None:
    _add_value(parent, "id", head.id)
    _add_text(parent, "title", head.title)
    _add_text(parent, "subtitle", head.subtitle)
    _add_value(parent, "updated", _timestamp(head.updated))
    _add_people(parent, "author", head.authors)
    _add_people(parent, "contributor", head.contributors)
    _add_links(parent, head.links)
    _add_categories(parent, head.categories)
    if head.generator is not None:
        _add_generator(parent, head.generator)
    _add_value(parent, "icon", head.icon)
    _add_value(parent, "logo", head.logo)
    _add_text(parent, "rights", head.rights)


def _entry_element(entry: Entry) -> ET.Element:
    element = ET.Element(_atom("entry"))
    _set_common_attributes(element, entry.lang, entry.base)

    _add_value(element, "id", entry.id)
    _add_text(element, "title", entry.title)
    _add_value(element, "updated", _timestamp(entry.updated))
    _add_value(element, "published", _timestamp(entry.published))
    _add_people(element, "author", entry.authors)
    _add_people(element, "contributor", entry.contributors)
    _add_links(element, entry.links)
    _add_categories(element, entry.categories)
    # summary must precede content: feedparser treats a late <summary> as content
    _add_text(element, "summary", entry.summary)
    _add_text(element, "content", entry.content)
    _add_text(element, "rights", entry.rights)
    if entry.source is not None:
        _add_head(ET.SubElement(element, _atom("source")), entry.source)

    _add_cap_scalars(element, entry, CAP_SCALARS_BEFORE_CATEGORY)
    _add_cap_values(element, "category", entry.alert_categories)
    _add_cap_scalars(element, entry, CAP_SCALARS_AFTER_CATEGORY)
    _add_cap_values(element, "polygon", entry.polygons)
    _add_cap_values(element, "circle", entry.circles)
    if entry.geocodes:
        _add_named_values(ET.SubElement(element, _cap("geocode")), entry.geocodes)
    for parameter in entry.parameters:
        _add_named_values(ET.SubElement(element, _cap("parameter")), [parameter])
    _add_extensions(element, entry.extensions)

    return element


def _atom(tag: str) -> str:
    return qname(ATOM_NS, tag)


def _cap(tag: str) -> str:
    return qname(CAP_NS, tag)


def _timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def _set_common_attributes(element: ET.Element, lang: str | None, base: str | None) -> None:
    if lang is not None:
        element.set(qname(XML_NS, "lang"), lang)
    if base is not None:
        element.set(qname(XML_NS, "base"), base)


def _add_value(parent: ET.Element, tag: str, value: str | None) -> None:
    if value is not None:
        ET.SubElement(parent, _atom(tag)).text = value


def _add_cap_scalars(
    parent: ET.Element, entry: Entry, fields: tuple[tuple[str, str], ...]
) -> None:
    for attr, name in fields:
        value = getattr(entry, attr)
        if isinstance(value, datetime):
            # CAP times keep their own offset
            value = value.isoformat()
        if value:
            ET.SubElement(parent, _cap(name)).text = value


def _add_cap_values(parent: ET.Element, name: str, values: list[str]) -> None:
    for value in values:
        ET.SubElement(parent, _cap(name)).text = value


def _add_named_values(parent: ET.Element, pairs: list[NamedValue]) -> None:
    # NWS writes valueName/value unprefixed, in the Atom default namespace
    for pair in pairs:
        ET.SubElement(parent, _atom("valueName")).text = pair.name
        ET.SubElement(parent, _atom("value")).text = pair.value


def _add_extensions(parent: ET.Element, extensions: list[Extension]) -> None:
    for extension in extensions:
        parent.append(ET.fromstring(extension.xml))


def _add_text(parent: ET.Element, tag: str, text: Text | None) -> None:
    if text is None:
        return

    element = ET.SubElement(parent, _atom(tag))
    if text.type == "xhtml":
        try:
            div = ET.fromstring(f"<div>{text.value}</div>")
        except ET.ParseError:
            # markup that is not well-formed XML can still travel escaped
            element.set("type", "html")
            element.text = text.value
            return
        div.set("xmlns", XHTML_NS)
        element.set("type", "xhtml")
        element.append(div)
        return

    if text.type != "text":
        element.set("type", text.type)
    element.text = text.value


def _add_people(parent: ET.Element, tag: str, people: list[Person]) -> None:
    for person in people:
        element = ET.SubElement(parent, _atom(tag))
        ET.SubElement(element, _atom("name")).text = person.name
        _add_value(element, "uri", person.uri)
        _add_value(element, "email", person.email)


def _add_links(parent: ET.Element, links: list[Link]) -> None:
    for link in links:
        attrs = {"href": link.href}
        for name in ("rel", "type", "hreflang", "title", "length"):
            value = getattr(link, name)
            if value is not None:
                attrs[name] = value
        ET.SubElement(parent, _atom("link"), attrs)


def _add_categories(parent: ET.Element, categories: list[Category]) -> None:
    for category in categories:
        attrs = {"term": category.term}
        if category.scheme is not None:
            attrs["scheme"] = category.scheme
        if category.label is not None:
            attrs["label"] = category.label
        ET.SubElement(parent, _atom("category"), attrs)


def _add_generator(parent: ET.Element, generator: Generator) -> None:
    attrs = {}
    if generator.uri is not None:
        attrs["uri"] = generator.uri
    if generator.version is not None:
        attrs["version"] = generator.version
    ET.SubElement(parent, _atom("generator"), attrs).text = generator.value
