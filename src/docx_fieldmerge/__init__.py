"""Merge data into .docx templates built from Word mail-merge fields."""

import logging

from .context import Context
from .errors import (
    ArchiveError,
    EvaluationError,
    ExpressionSyntaxError,
    TemplateError,
    TemplateStructureError,
)
from .processor import Processor, process, process_relationships, remove_trailing_blank_page
from .template import Template
from .values import Image

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ArchiveError",
    "Context",
    "EvaluationError",
    "ExpressionSyntaxError",
    "Image",
    "Processor",
    "Template",
    "TemplateError",
    "TemplateStructureError",
    "process",
    "process_relationships",
    "remove_trailing_blank_page",
]
