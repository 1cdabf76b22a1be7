# ABOUTME: XML namespaces shared by the Atom decoder and encoder.
# ABOUTME: Registers the prefixes ElementTree writes: Atom as default, CAP as "cap".

import xml.etree.ElementTree as ET

ATOM_NS = "http://www.w3.org/2005/Atom"
CAP_NS = "urn:oasis:names:tc:emergency:cap:1.1"
XHTML_NS = "http://www.w3.org/1999/xhtml"
XML_NS = "http://www.w3.org/XML/1998/namespace"

ET.register_namespace("", ATOM_NS)
ET.register_namespace("cap", CAP_NS)


def qname(namespace: str, name: str) -> str:
    """ElementTree tag for `name` in `namespace` (no namespace when empty)."""
    return f"{{{namespace}}}{name}" if namespace else name


def split_tag(tag: str) -> tuple[str, str]:
    """Split an ElementTree tag into (namespace, local name)."""
    if tag.startswith("{"):
        namespace, _, name = tag[1:].partition("}")
        return namespace, name
    return "", tag
