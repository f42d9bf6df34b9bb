"""Archive-level details of a WordprocessingML package."""

from __future__ import annotations

import mimetypes
import re
from typing import Iterable
from xml.etree import ElementTree as ET

from .markup import CONTENT_TYPES_NS

DOCUMENT_PART = "word/document.xml"
RELATIONSHIPS_PART = "word/_rels/document.xml.rels"
CONTENT_TYPES_PART = "[Content_Types].xml"
HEADER_FOOTER_PART = re.compile(r"word/(?:header|footer)\d*\.xml")

DEFAULT_TAG = f"{{{CONTENT_TYPES_NS}}}Default"

IMAGE_CONTENT_TYPES = {
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    "emf": "image/x-emf",
    "wmf": "image/x-wmf",
    "svg": "image/svg+xml",
}

_JPG = re.compile(r"^(.*)\.jpg$")


def normalize_image_name(name: str) -> str:
    """Word expects ``.jpeg`` media; rename ``*.jpg``."""
    match = _JPG.match(name)
    return f"{match.group(1)}.jpeg" if match else name


def media_entry(media_dir: str, name: str) -> str:
    return f"word/{media_dir}/{name}"


def is_header_or_footer(entry_name: str) -> bool:
    return HEADER_FOOTER_PART.fullmatch(entry_name) is not None


def register_media_types(types_root: ET.Element, names: Iterable[str]) -> list[str]:
    """Add a ``Default`` content type for each new media extension.

    Returns:
        The extensions that were added.
    """
    known = {
        default.get("Extension", "").lower()
        for default in types_root.findall(DEFAULT_TAG)
    }
    added = []
    for name in names:
        extension = name.rsplit(".", 1)[-1].lower() if "." in name else ""
        if not extension or extension in known:
            continue
        content_type = (
            IMAGE_CONTENT_TYPES.get(extension)
            or mimetypes.guess_type(name)[0]
            or "application/octet-stream"
        )
        default = ET.Element(DEFAULT_TAG, {"Extension": extension, "ContentType": content_type})
        # Defaults precede Overrides
        position = len(types_root.findall(DEFAULT_TAG))
        types_root.insert(position, default)
        known.add(extension)
        added.append(extension)
    return added
