"""Structural scope of a start / end marker pair.

A block is the run of top-level units (paragraphs or table rows) between
the unit holding the start marker and the unit holding the end marker.
The kind is picked by the first matching predicate in ``RESOLUTION_ORDER``.
"""

from __future__ import annotations

import copy
import enum
import logging
from functools import cached_property
from typing import TYPE_CHECKING, Callable
from xml.etree import ElementTree as ET

from .errors import TemplateStructureError
from .fields import Field
from .markup import Fragment, qn
from .values import Image

if TYPE_CHECKING:
    from .context import Context
    from .processor import Processor

logger = logging.getLogger(__name__)

W_P = qn("w:p")
W_TR = qn("w:tr")
PIC_C_NV_PR = qn("pic:cNvPr")
A_BLIP = qn("a:blip")
R_EMBED = qn("r:embed")

IMAGE_SIGIL = "@"


class BlockKind(enum.Enum):
    IMAGE = "image"
    ROW = "row"
    PARAGRAPH = "paragraph"

    @property
    def unit_tag(self) -> str:
        return W_TR if self is BlockKind.ROW else W_P


def _unit(fragment: Fragment, field: Field, kind: BlockKind) -> ET.Element | None:
    return fragment.closest(field.start_node, kind.unit_tag)


def _encloses_image(fragment: Fragment, start: Field, end: Field) -> bool:
    return (
        start.expression.startswith(IMAGE_SIGIL)
        and _encloses_paragraph(fragment, start, end)
    )


def _encloses_row(fragment: Fragment, start: Field, end: Field) -> bool:
    start_row = _unit(fragment, start, BlockKind.ROW)
    end_row = _unit(fragment, end, BlockKind.ROW)
    return start_row is not None and end_row is not None and start_row is not end_row


def _encloses_paragraph(fragment: Fragment, start: Field, end: Field) -> bool:
    return (
        _unit(fragment, start, BlockKind.PARAGRAPH) is not None
        and _unit(fragment, end, BlockKind.PARAGRAPH) is not None
    )


RESOLUTION_ORDER: list[tuple[Callable[[Fragment, Field, Field], bool], BlockKind]] = [
    (_encloses_image, BlockKind.IMAGE),
    (_encloses_row, BlockKind.ROW),
    (_encloses_paragraph, BlockKind.PARAGRAPH),
]


class Block:
    """The units delimited by a start / end field pair.

    The block owns no nodes: everything stays in the fragment until
    ``splice`` or ``embed_image`` commits a result.
    """

    def __init__(
        self,
        kind: BlockKind,
        start_field: Field,
        end_field: Field,
        fragment: Fragment,
        processor: "Processor",
    ):
        self.kind = kind
        self.start_field = start_field
        self.end_field = end_field
        self.fragment = fragment
        self.processor = processor
        self.start_node = _unit(fragment, start_field, kind)
        self.end_node = _unit(fragment, end_field, kind)

    @classmethod
    def enclosed_by(
        cls,
        start_field: Field,
        end_field: Field,
        fragment: Fragment,
        processor: "Processor",
    ) -> "Block":
        """Resolve the block for a marker pair.

        Raises:
            TemplateStructureError: If no paragraph or row encloses the pair,
                or a loop / condition pair shares one paragraph.
        """
        for encloses, kind in RESOLUTION_ORDER:
            if encloses(fragment, start_field, end_field):
                block = cls(kind, start_field, end_field, fragment, processor)
                # Only image placeholders may open and close inside one unit
                if kind is not BlockKind.IMAGE and block.start_node is block.end_node:
                    raise TemplateStructureError(
                        f"«{start_field.expression}» and «{end_field.expression}» "
                        f"must sit in separate paragraphs or table rows"
                    )
                return block
        raise TemplateStructureError(
            f"Could not find a paragraph or table row enclosing "
            f"«{start_field.expression}» and «{end_field.expression}»"
        )

    @cached_property
    def body(self) -> list[ET.Element]:
        """Sibling units strictly between the start and end units."""
        if self.start_node is self.end_node:
            return []
        return self.fragment.siblings_between(self.start_node, self.end_node)

    def duplicate(self, context: "Context") -> list[ET.Element]:
        """Render a detached copy of the body against *context*."""
        container = ET.Element("fragment")
        container.extend(copy.deepcopy(node) for node in self.body)
        self.processor.manipulate(container, context)
        nodes = list(container)
        container.clear()
        return nodes

    def splice(self, nodes: list[ET.Element]) -> None:
        """Put *nodes* in place of the whole block, markers included."""
        body = self.body
        self.fragment.insert_before(self.start_node, nodes)
        for node in body:
            self.fragment.remove(node)
        self.fragment.remove(self.start_node)
        if self.end_node is not self.start_node:
            self.fragment.remove(self.end_node)

    def embed_image(self, image: Image) -> None:
        """Point the placeholder drawing at *image* and drop the markers."""
        units = [self.start_node, *self.body]
        if self.end_node is not self.start_node:
            units.append(self.end_node)

        picture = _first(units, PIC_C_NV_PR)
        blip = _first(units, A_BLIP)
        if picture is None or blip is None:
            raise TemplateStructureError(
                f"No picture placeholder between «{self.start_field.expression}» "
                f"and «{self.end_field.expression}»"
            )
        picture.set("name", image.name)
        blip.set(R_EMBED, image.relationship_id)
        self.start_field.remove()
        self.end_field.remove()
        logger.debug("Embedded image %s as %s", image.name, image.relationship_id)

    def __repr__(self) -> str:
        return (
            f"<Block {self.kind.value} "
            f"{self.start_field.expression!r}..{self.end_field.expression!r}>"
        )


def _first(units: list[ET.Element], tag: str) -> ET.Element | None:
    for unit in units:
        found = next(unit.iter(tag), None)
        if found is not None:
            return found
    return None
