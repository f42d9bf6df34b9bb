"""Mail-merge field tokenizer.

Word stores a ``MERGEFIELD`` either as a single ``w:fldSimple`` element or
as a "complex" field spread over sibling runs::

    <w:r><w:fldChar w:fldCharType="begin"/></w:r>
    <w:r><w:instrText> MERGEFIELD =person.name \\* MERGEFORMAT </w:instrText></w:r>
    <w:r><w:fldChar w:fldCharType="separate"/></w:r>
    <w:r><w:t>«=person.name»</w:t></w:r>
    <w:r><w:fldChar w:fldCharType="end"/></w:r>

Both are exposed as ``Field`` objects carrying the merge expression and the
nodes needed to rewrite or drop the field.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from xml.etree import ElementTree as ET

from .markup import Fragment, qn

logger = logging.getLogger(__name__)

_MERGEFIELD = re.compile(r'^\s*MERGEFIELD\s+("[^"]*"|\S+)(?:\s+\\.*)?\s*$', re.DOTALL)
_LINE_PARTS = re.compile(r"[^\n]+|\n")
_XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"

W_T = qn("w:t")
W_R = qn("w:r")
W_BR = qn("w:br")
W_FLD_SIMPLE = qn("w:fldSimple")
W_FLD_CHAR = qn("w:fldChar")
W_FLD_CHAR_TYPE = qn("w:fldCharType")
W_INSTR = qn("w:instr")
W_INSTR_TEXT = qn("w:instrText")


def expression_from_instruction(instruction: str) -> str | None:
    """Return the merge expression of a field instruction, or None."""
    match = _MERGEFIELD.match(instruction or "")
    if not match:
        return None
    return match.group(1).strip('"')


def _text_nodes(text: str) -> list[ET.Element]:
    """Split *text* into w:t / w:br elements, one per line break."""
    nodes = []
    for part in _LINE_PARTS.findall(text):
        if part == "\n":
            nodes.append(ET.Element(W_BR))
        else:
            t = ET.Element(W_T, {_XML_SPACE: "preserve"})
            t.text = part
            nodes.append(t)
    return nodes


def _make_run(text: str) -> ET.Element:
    run = ET.Element(W_R)
    run.extend(_text_nodes(text))
    return run


def _has_fld_char(node: ET.Element, char_type: str) -> bool:
    return any(
        fld_char.get(W_FLD_CHAR_TYPE) == char_type
        for fld_char in node.iter(W_FLD_CHAR)
    )


class Field(ABC):
    """A merge field found in a fragment."""

    def __init__(self, fragment: Fragment, expression: str):
        self.fragment = fragment
        self.expression = expression

    @property
    @abstractmethod
    def start_node(self) -> ET.Element: ...

    @property
    @abstractmethod
    def end_node(self) -> ET.Element: ...

    @abstractmethod
    def replace(self, text: str) -> None:
        """Replace the field by *text*, keeping the display run formatting."""

    @abstractmethod
    def remove(self) -> None:
        """Drop the field and its display text."""

    def _write_display(self, node: ET.Element, text: str) -> bool:
        display = node.find(f".//{W_T}")
        if display is None:
            return False
        self.fragment.insert_after(display, _text_nodes(text))
        self.fragment.remove(display)
        return True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.expression!r}>"


class SimpleField(Field):
    """A ``w:fldSimple`` merge field."""

    def __init__(self, fragment: Fragment, node: ET.Element, expression: str):
        super().__init__(fragment, expression)
        self.node = node

    @property
    def start_node(self) -> ET.Element:
        return self.node

    @property
    def end_node(self) -> ET.Element:
        return self.node

    def replace(self, text: str) -> None:
        # Only the first display run survives; Word may split «expr» over several
        pattern = self.node.find(W_R)
        if pattern is not None and self._write_display(pattern, text):
            keep = pattern
        else:
            keep = _make_run(text)
            self.fragment.append(self.node, keep)
        for child in list(self.node):
            if child is not keep:
                self.fragment.remove(child)
        self.fragment.unwrap(self.node)

    def remove(self) -> None:
        self.fragment.remove(self.node)


class ComplexField(Field):
    """A merge field delimited by ``w:fldChar`` begin / end runs."""

    def __init__(self, fragment: Fragment, nodes: list[ET.Element], expression: str):
        super().__init__(fragment, expression)
        self.nodes = nodes

    @property
    def start_node(self) -> ET.Element:
        return self.nodes[0]

    @property
    def end_node(self) -> ET.Element:
        return self.nodes[-1]

    def _pattern_node(self) -> ET.Element | None:
        """The first result run after the ``separate`` marker."""
        for position, node in enumerate(self.nodes[:-1]):
            if _has_fld_char(node, "separate"):
                candidate = self.nodes[position + 1]
                if candidate is not self.end_node:
                    return candidate
                return None
        return None

    def replace(self, text: str) -> None:
        pattern = self._pattern_node()
        if pattern is not None and self._write_display(pattern, text):
            keep = pattern
        else:
            keep = _make_run(text)
            self.fragment.insert_before(self.start_node, [keep])
        for node in self.nodes:
            if node is not keep:
                self.fragment.remove(node)

    def remove(self) -> None:
        for node in self.nodes:
            self.fragment.remove(node)


class MergeFieldParser:
    """Finds merge fields in document order."""

    def parse_fields(self, fragment: Fragment) -> list[Field]:
        fields: list[Field] = []
        for node in list(fragment.root.iter()):
            if node.tag == W_FLD_SIMPLE:
                field = self._build_simple_field(fragment, node)
            elif node.tag == W_FLD_CHAR and node.get(W_FLD_CHAR_TYPE) == "begin":
                field = self._build_complex_field(fragment, node)
            else:
                continue
            if field is not None:
                fields.append(field)
        logger.debug("Found %d merge fields", len(fields))
        return fields

    def _build_simple_field(self, fragment: Fragment, node: ET.Element) -> Field | None:
        expression = expression_from_instruction(node.get(W_INSTR, ""))
        if expression is None:
            return None
        return SimpleField(fragment, node, expression)

    def _build_complex_field(self, fragment: Fragment, begin: ET.Element) -> Field | None:
        run = fragment.parent(begin)
        if run is None:
            return None
        nodes = [run]
        while not _has_fld_char(nodes[-1], "end"):
            following = fragment.next_sibling(nodes[-1])
            if following is None:
                logger.warning("Skipping field without an end marker")
                return None
            nodes.append(following)

        instruction = "".join(
            instr.text or "" for node in nodes for instr in node.iter(W_INSTR_TEXT)
        )
        expression = expression_from_instruction(instruction)
        if expression is None:
            return None
        return ComplexField(fragment, nodes, expression)
