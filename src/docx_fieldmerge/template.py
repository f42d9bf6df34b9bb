"""Render a .docx template to a new package."""

from __future__ import annotations

import io
import logging
import os
import zipfile
from collections.abc import Mapping
from typing import Any, Iterable

from .config.settings import Settings, settings as default_settings
from .context import Context
from .errors import ArchiveError
from .markup import parse_part, serialize_part
from .package import (
    CONTENT_TYPES_PART,
    DOCUMENT_PART,
    RELATIONSHIPS_PART,
    is_header_or_footer,
    media_entry,
    normalize_image_name,
    register_media_types,
)
from .processor import Processor, process_relationships, remove_trailing_blank_page
from .values import Image

logger = logging.getLogger(__name__)


class Template:
    """A .docx file containing merge fields."""

    def __init__(self, path: str | os.PathLike, settings: Settings | None = None):
        self.path = os.fspath(path)
        self.settings = settings or default_settings

    def render_to_file(
        self,
        output_path: str | os.PathLike,
        context: Context | Mapping[Any, Any],
        images: Iterable[Image] = (),
        properties: Mapping[str, Any] | None = None,
    ) -> str:
        """Same as ``render_to_bytes`` but writes the result to *output_path*.

        Nothing is written unless the whole render succeeds.
        """
        data = self.render_to_bytes(context, images, properties)
        output_path = os.fspath(output_path)
        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        with open(output_path, "wb") as f:
            f.write(data)
        return output_path

    def render_to_bytes(
        self,
        context: Context | Mapping[Any, Any],
        images: Iterable[Image] = (),
        properties: Mapping[str, Any] | None = None,
    ) -> bytes:
        """Process the template and return the new package bytes.

        Args:
            context: Data available to the template's expressions.
            images: Images to embed; each must be referenced through the
                context by an ``@name:start`` / ``@name:end`` placeholder.
            properties: Render options; ``start_page_number`` sets the
                final section's first page number.

        Raises:
            TemplateStructureError: The template markup is malformed.
            EvaluationError: The context does not fit the template.
            ArchiveError: The package has no ``word/document.xml``.
        """
        images = list(images)
        context = Context.wrap(context)
        processor = Processor()

        buffer = io.BytesIO()
        with zipfile.ZipFile(self.path) as source:
            names = set(source.namelist())
            if DOCUMENT_PART not in names:
                raise ArchiveError(f"{self.path} has no {DOCUMENT_PART}")

            # Caller images are only touched once the package is known to be usable
            for image in images:
                image.name = normalize_image_name(image.name)

            parts = self._render_parts(source, names, processor, context, images, properties)
            media = {media_entry(self.settings.media_dir, image.name): image.data for image in images}

            with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as output:
                for entry_name, data in media.items():
                    output.writestr(entry_name, data)
                for info in source.infolist():
                    if info.filename in media:
                        logger.warning("Replacing existing media entry %s", info.filename)
                        continue
                    data = parts.get(info.filename)
                    if data is None:
                        data = source.read(info.filename)
                    output.writestr(info, data)

        logger.info(
            "Rendered %s: %d parts processed, %d images embedded",
            self.path,
            len(parts),
            len(images),
        )
        return buffer.getvalue()

    def _render_parts(
        self,
        source: zipfile.ZipFile,
        names: set[str],
        processor: Processor,
        context: Context,
        images: list[Image],
        properties: Mapping[str, Any] | None,
    ) -> dict[str, bytes]:
        parts: dict[str, bytes] = {}

        # Relationship ids must exist before image placeholders are evaluated
        if images and RELATIONSHIPS_PART in names:
            rels = parse_part(source.read(RELATIONSHIPS_PART))
            process_relationships(rels.root, images, self.settings.media_dir)
            parts[RELATIONSHIPS_PART] = serialize_part(rels)

        if images and CONTENT_TYPES_PART in names:
            types = parse_part(source.read(CONTENT_TYPES_PART))
            if register_media_types(types.root, (image.name for image in images)):
                parts[CONTENT_TYPES_PART] = serialize_part(types)

        document = parse_part(source.read(DOCUMENT_PART))
        processor.process(document.root, context, properties)
        if self.settings.remove_trailing_blank_page:
            remove_trailing_blank_page(document.root)
        parts[DOCUMENT_PART] = serialize_part(document)

        if self.settings.process_headers_and_footers:
            for entry_name in sorted(filter(is_header_or_footer, names)):
                part = parse_part(source.read(entry_name))
                processor.process(part.root, context)
                parts[entry_name] = serialize_part(part)

        return parts
