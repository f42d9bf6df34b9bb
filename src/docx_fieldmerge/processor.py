"""Build-and-evaluate pipeline for one XML part, plus the post-processors."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Iterable
from xml.etree import ElementTree as ET

from .context import Context
from .fields import MergeFieldParser
from .markup import NAMESPACES, RELATIONSHIPS_NS, Fragment, qn
from .operations import OperationBuilder
from .section_properties import SectionProperties
from .statements import Statement
from .values import Image

logger = logging.getLogger(__name__)

IMAGE_RELATIONSHIP_TYPE = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"
)
RELATIONSHIPS_TAG = f"{{{RELATIONSHIPS_NS}}}Relationships"
RELATIONSHIP_TAG = f"{{{RELATIONSHIPS_NS}}}Relationship"

W_P = qn("w:p")
W_BR = qn("w:br")
W_TYPE = qn("w:type")
W_SECT_PR = qn("w:sectPr")

_TRAILING_NUMBER = re.compile(r"(\d+)$")


class Processor:
    """Renders merge fields in a part against a context.

    The processor holds its field parser; create one per caller rather
    than sharing global state. Loop and condition bodies re-enter
    ``manipulate`` on detached copies.
    """

    def __init__(self, parser: MergeFieldParser | None = None):
        self.parser = parser or MergeFieldParser()

    def process(
        self,
        root: ET.Element,
        context: Context | Mapping[Any, Any],
        properties: Mapping[str, Any] | None = None,
    ) -> ET.Element:
        """Evaluate every statement in *root*, then apply *properties*."""
        self.manipulate(root, Context.wrap(context))
        if properties:
            self.write_properties(root, properties)
        return root

    def build_operations(self, fragment: Fragment) -> list[Statement]:
        fields = self.parser.parse_fields(fragment)
        return OperationBuilder(fields, fragment, self).operations()

    def manipulate(self, root: ET.Element, context: Context) -> ET.Element:
        fragment = Fragment(root)
        for statement in self.build_operations(fragment):
            logger.debug("Evaluating %s", type(statement).__name__)
            statement.evaluate(context)
        return root

    def write_properties(self, root: ET.Element, properties: Mapping[str, Any]) -> None:
        for key, value in properties.items():
            if key == "start_page_number":
                if value is not None:
                    SectionProperties.from_document(root).start_page_number = value
            else:
                logger.warning("Ignoring unknown render property %r", key)


def process(
    root: ET.Element,
    context: Context | Mapping[Any, Any],
    properties: Mapping[str, Any] | None = None,
) -> ET.Element:
    """Render *root* in place with a fresh Processor."""
    return Processor().process(root, context, properties)


def next_relationship_id(relationships: ET.Element) -> int:
    """One past the highest numeric suffix among existing relationship ids."""
    highest = 0
    for relationship in relationships.iter(RELATIONSHIP_TAG):
        match = _TRAILING_NUMBER.search(relationship.get("Id", ""))
        if match:
            highest = max(highest, int(match.group(1)))
    return highest + 1


def process_relationships(
    root: ET.Element,
    images: Iterable[Image],
    media_dir: str = "media",
) -> ET.Element:
    """Append an image relationship per image and record its id on the image."""
    relationships = root if root.tag == RELATIONSHIPS_TAG else root.find(RELATIONSHIPS_TAG)
    next_id = next_relationship_id(relationships)
    for image in images:
        ET.SubElement(
            relationships,
            RELATIONSHIP_TAG,
            {
                "Id": f"rId{next_id}",
                "Type": IMAGE_RELATIONSHIP_TYPE,
                "Target": f"{media_dir}/{image.name}",
            },
        )
        image.rid = next_id
        logger.debug("Bound image %s to rId%d", image.name, next_id)
        next_id += 1
    return root


def remove_trailing_blank_page(root: ET.Element) -> ET.Element:
    """Drop the page break in the paragraph right before the final section.

    A page break there pushes the last section onto an empty page.
    """
    body = root.find("w:body", NAMESPACES)
    if body is None:
        return root

    found_last = False
    for child in reversed(list(body)):
        if found_last:
            if child.tag == W_P:
                for run in child.findall("w:r", NAMESPACES):
                    for br in run.findall("w:br", NAMESPACES):
                        if br.get(W_TYPE) == "page":
                            run.remove(br)
                break
        elif child.tag == W_SECT_PR:
            found_last = True
    return root
