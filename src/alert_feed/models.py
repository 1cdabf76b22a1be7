# ABOUTME: Pydantic models for Atom feed documents.
# ABOUTME: Defines Feed, Entry and the Atom constructs, including NWS CAP entry fields.

from datetime import datetime

from pydantic import BaseModel

CAP_CONTENT_TYPE = "application/cap+xml"


class Text(BaseModel):
    """Atom text construct.

    `type` is "text", "html" or "xhtml"; entry content may also carry a media type.
    """

    value: str = ""
    type: str = "text"


class Person(BaseModel):
    """Atom person construct (author or contributor)."""

    name: str = ""
    uri: str | None = None
    email: str | None = None


class Link(BaseModel):
    """Reference from a feed or entry to a Web resource.

    Attributes hold exactly what the document carried; a missing `rel` means "alternate".
    """

    href: str
    rel: str | None = None
    type: str | None = None
    hreflang: str | None = None
    title: str | None = None
    length: str | None = None


class Category(BaseModel):
    """Category attached to a feed or entry."""

    term: str
    scheme: str | None = None
    label: str | None = None


class Generator(BaseModel):
    """Software that produced the feed."""

    value: str = ""
    uri: str | None = None
    version: str | None = None


class NamedValue(BaseModel):
    """CAP valueName/value pair, as used by geocode and parameter."""

    name: str
    value: str = ""


class Extension(BaseModel):
    """Foreign-namespace element kept verbatim as serialized XML."""

    xml: str


class Source(BaseModel):
    """Feed-level metadata; also the content of an entry's atom:source."""

    id: str | None = None
    title: Text | None = None
    subtitle: Text | None = None
    updated: datetime | None = None
    authors: list[Person] = []
    contributors: list[Person] = []
    links: list[Link] = []
    categories: list[Category] = []
    generator: Generator | None = None
    icon: str | None = None
    logo: str | None = None
    rights: Text | None = None

    def alternate_link(self) -> str | None:
        for link in self.links:
            if link.rel in (None, "alternate"):
                return link.href
        return None


class Entry(BaseModel):
    """Single feed entry. For NWS feeds each entry summarizes one CAP alert."""

    id: str | None = None
    title: Text | None = None
    updated: datetime | None = None
    published: datetime | None = None
    authors: list[Person] = []
    contributors: list[Person] = []
    links: list[Link] = []
    categories: list[Category] = []
    summary: Text | None = None
    content: Text | None = None
    rights: Text | None = None
    source: Source | None = None
    lang: str | None = None
    base: str | None = None

    # CAP extension elements
    event: str | None = None
    effective: datetime | None = None
    expires: datetime | None = None
    status: str | None = None
    msg_type: str | None = None
    alert_categories: list[str] = []
    urgency: str | None = None
    severity: str | None = None
    certainty: str | None = None
    area_desc: str | None = None
    polygons: list[str] = []
    circles: list[str] = []
    geocodes: list[NamedValue] = []
    parameters: list[NamedValue] = []

    extensions: list[Extension] = []

    def alert_link(self) -> str | None:
        """Return the href of the full CAP alert, or the alternate link if none is typed."""
        for link in self.links:
            if link.type == CAP_CONTENT_TYPE:
                return link.href
        for link in self.links:
            if link.rel in (None, "alternate"):
                return link.href
        return None

    def get_geocodes(self, name: str) -> list[str]:
        """Return the space separated codes of the first geocode called `name`."""
        for geocode in self.geocodes:
            if geocode.name == name:
                return geocode.value.split()
        return []

    def get_parameter(self, name: str) -> str | None:
        """Return the value of the first parameter called `name`."""
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter.value
        return None


class Feed(Source):
    """Decoded Atom feed document."""

    lang: str | None = None
    base: str | None = None
    entries: list[Entry] = []
    extensions: list[Extension] = []
