"""OOXML markup helpers on top of xml.etree.ElementTree.

ElementTree drops namespace declarations it does not see used and has no
parent pointers. Parts are therefore serialised with their original root
start tag restored, and structural edits go through a ``Fragment`` that
keeps a child -> parent index.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass
from itertools import takewhile
from typing import Iterable, Iterator
from xml.etree import ElementTree as ET

# ---------------------------------------------------------------------------
# OOXML namespaces
# ---------------------------------------------------------------------------
NAMESPACES = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "wp": "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "pic": "http://schemas.openxmlformats.org/drawingml/2006/picture",
    "mc": "http://schemas.openxmlformats.org/markup-compatibility/2006",
    "m": "http://schemas.openxmlformats.org/officeDocument/2006/math",
    "v": "urn:schemas-microsoft-com:vml",
    "o": "urn:schemas-microsoft-com:office:office",
    "w10": "urn:schemas-microsoft-com:office:word",
    "w14": "http://schemas.microsoft.com/office/word/2010/wordml",
    "wp14": "http://schemas.microsoft.com/office/word/2010/wordprocessingDrawing",
    "wps": "http://schemas.microsoft.com/office/word/2010/wordprocessingShape",
    "wpg": "http://schemas.microsoft.com/office/word/2010/wordprocessingGroup",
    "wne": "http://schemas.microsoft.com/office/word/2006/wordml",
}
RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

# Register prefixes so ET output uses w: / r: instead of ns0: / ns1:
for _pfx, _uri in NAMESPACES.items():
    ET.register_namespace(_pfx, _uri)

_PREFIX_BY_URI = {uri: prefix for prefix, uri in NAMESPACES.items()}

_START_TAG = re.compile(r"<(?![?!])[^>]*>")
_XMLNS_ATTR = re.compile(r'\sxmlns(?::([\w.-]+))?="([^"]*)"')
_RESERVED_PREFIX = re.compile(r"ns\d+$")


def qn(name: str) -> str:
    """Expand a prefixed name (``w:p``) to Clark notation (``{uri}p``)."""
    prefix, _, local = name.partition(":")
    return f"{{{NAMESPACES[prefix]}}}{local}"


def local_name(tag: str) -> str:
    """Strip the namespace from an element tag."""
    return tag.split("}")[-1] if "}" in tag else tag


# ---------------------------------------------------------------------------
# Part parsing / serialisation
# ---------------------------------------------------------------------------

@dataclass
class XmlPart:
    """A parsed package part and the root start tag it was read with."""

    root: ET.Element
    root_tag: str
    default_namespace: str | None = None


def parse_part(data: bytes) -> XmlPart:
    """Parse an XML part, registering every namespace prefix it declares."""
    for _, (prefix, uri) in ET.iterparse(io.BytesIO(data), events=("start-ns",)):
        if prefix and not _RESERVED_PREFIX.match(prefix):
            ET.register_namespace(prefix, uri)

    root = ET.fromstring(data)
    text = data.decode("utf-8-sig")
    match = _START_TAG.search(text)
    root_tag = match.group(0) if match else ""

    default_namespace = None
    for prefix, uri in _XMLNS_ATTR.findall(root_tag):
        if not prefix and root.tag.startswith(f"{{{uri}}}"):
            default_namespace = uri
    return XmlPart(root=root, root_tag=root_tag, default_namespace=default_namespace)


def _merge_root_tag(original: str, generated: str) -> str:
    """Return the original root tag plus declarations only ET emitted."""
    if generated.endswith("/>"):
        return generated
    declared = {prefix for prefix, _ in _XMLNS_ATTR.findall(original)}
    extra = [
        match.group(0)
        for match in _XMLNS_ATTR.finditer(generated)
        if (match.group(1) or "") not in declared
    ]
    tag = original[:-2] if original.endswith("/>") else original[:-1]
    return f"{tag.rstrip()}{''.join(extra)}>"


def serialize_part(part: XmlPart) -> bytes:
    """Serialise a part back to bytes, preserving root namespace declarations.

    Declarations that only appear in the root tag (``mc:Ignorable`` targets
    such as ``w14``) would otherwise be dropped by ElementTree. Parts read
    with a default namespace (relationships, content types) are written
    back unprefixed.
    """
    # default_namespace= rejects the unqualified attributes (Id, Target,
    # Extension) every package part carries, so map the URI to "" instead
    if part.default_namespace:
        ET.register_namespace("", part.default_namespace)
    xml = ET.tostring(part.root, encoding="unicode")
    if part.default_namespace in _PREFIX_BY_URI:
        ET.register_namespace(_PREFIX_BY_URI[part.default_namespace], part.default_namespace)
    match = _START_TAG.match(xml)
    if match and part.root_tag:
        xml = _merge_root_tag(part.root_tag, match.group(0)) + xml[match.end():]
    return (XML_DECLARATION + xml).encode("utf-8")


# ---------------------------------------------------------------------------
# Fragment: element tree with parent links
# ---------------------------------------------------------------------------

class Fragment:
    """An element subtree with a child -> parent index.

    Every structural edit made during rendering goes through these methods
    so the index stays current for later lookups.
    """

    def __init__(self, root: ET.Element):
        self.root = root
        self._parents: dict[ET.Element, ET.Element] = {}
        self._index(root)

    def _index(self, node: ET.Element) -> None:
        for parent in node.iter():
            for child in parent:
                self._parents[child] = parent

    def parent(self, node: ET.Element) -> ET.Element | None:
        return self._parents.get(node)

    def ancestors(self, node: ET.Element, tag: str | None = None) -> list[ET.Element]:
        """Ancestors of *node*, nearest first, optionally filtered by tag."""
        result = []
        parent = self._parents.get(node)
        while parent is not None:
            if tag is None or parent.tag == tag:
                result.append(parent)
            parent = self._parents.get(parent)
        return result

    def closest(self, node: ET.Element, tag: str) -> ET.Element | None:
        """Nearest ancestor with the given tag, or None."""
        ancestors = self.ancestors(node, tag)
        return ancestors[0] if ancestors else None

    def following_siblings(self, node: ET.Element) -> Iterator[ET.Element]:
        parent = self.parent(node)
        if parent is None:
            return iter(())
        siblings = list(parent)
        return iter(siblings[siblings.index(node) + 1:])

    def next_sibling(self, node: ET.Element) -> ET.Element | None:
        return next(self.following_siblings(node), None)

    def siblings_between(self, start: ET.Element, end: ET.Element) -> list[ET.Element]:
        """Siblings strictly after *start* and before *end*."""
        return list(takewhile(lambda n: n is not end, self.following_siblings(start)))

    def insert_before(self, anchor: ET.Element, nodes: Iterable[ET.Element]) -> None:
        parent = self._parents[anchor]
        position = list(parent).index(anchor)
        for offset, node in enumerate(nodes):
            parent.insert(position + offset, node)
            self._parents[node] = parent
            self._index(node)

    def insert_after(self, anchor: ET.Element, nodes: Iterable[ET.Element]) -> None:
        parent = self._parents[anchor]
        position = list(parent).index(anchor) + 1
        for offset, node in enumerate(nodes):
            parent.insert(position + offset, node)
            self._parents[node] = parent
            self._index(node)

    def append(self, parent: ET.Element, node: ET.Element) -> None:
        parent.append(node)
        self._parents[node] = parent
        self._index(node)

    def remove(self, node: ET.Element) -> None:
        parent = self._parents.pop(node, None)
        if parent is not None:
            parent.remove(node)

    def unwrap(self, node: ET.Element) -> None:
        """Replace *node* by its own children."""
        children = list(node)
        for child in children:
            node.remove(child)
        self.insert_before(node, children)
        self.remove(node)
