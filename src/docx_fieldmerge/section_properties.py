"""View over a document's final section properties (``w:sectPr``)."""

from __future__ import annotations

from xml.etree import ElementTree as ET

from .errors import TemplateStructureError
from .markup import NAMESPACES, qn

W_SECT_PR = qn("w:sectPr")
W_PG_NUM_TYPE = qn("w:pgNumType")
W_START = qn("w:start")

# Elements that follow w:pgNumType in the CT_SectPr sequence
_AFTER_PG_NUM_TYPE = frozenset(
    qn(f"w:{name}")
    for name in (
        "cols",
        "formProt",
        "vAlign",
        "noEndnote",
        "titlePg",
        "textDirection",
        "bidi",
        "rtlGutter",
        "docGrid",
        "printerSettings",
        "sectPrChange",
    )
)


class SectionProperties:
    def __init__(self, node: ET.Element):
        self.node = node

    @classmethod
    def from_document(cls, root: ET.Element) -> "SectionProperties":
        """The body-level section properties, or the last ones found.

        Raises:
            TemplateStructureError: If the part has no ``w:sectPr``.
        """
        node = root.find("w:body/w:sectPr", NAMESPACES)
        if node is None:
            sections = list(root.iter(W_SECT_PR))
            if not sections:
                raise TemplateStructureError("Document has no section properties")
            node = sections[-1]
        return cls(node)

    @property
    def start_page_number(self) -> int | None:
        pg_num_type = self.node.find("w:pgNumType", NAMESPACES)
        if pg_num_type is None or pg_num_type.get(W_START) is None:
            return None
        return int(pg_num_type.get(W_START))

    @start_page_number.setter
    def start_page_number(self, number: int) -> None:
        self._find_or_add_pg_num_type().set(W_START, str(int(number)))

    def _find_or_add_pg_num_type(self) -> ET.Element:
        pg_num_type = self.node.find("w:pgNumType", NAMESPACES)
        if pg_num_type is not None:
            return pg_num_type
        pg_num_type = ET.Element(W_PG_NUM_TYPE)
        for position, child in enumerate(self.node):
            if child.tag in _AFTER_PG_NUM_TYPE:
                self.node.insert(position, pg_num_type)
                break
        else:
            self.node.append(pg_num_type)
        return pg_num_type
