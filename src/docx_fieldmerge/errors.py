"""Exceptions raised while building or rendering a template."""


class TemplateError(Exception):
    """Base class for every error raised by docx_fieldmerge."""


class TemplateStructureError(TemplateError):
    """The template markup cannot be turned into an operation tree.

    Raised while building: an opening marker without its end marker, or a
    marker pair with no enclosing paragraph / row to operate on.
    """


class ExpressionSyntaxError(TemplateStructureError):
    """A field expression is not a valid lookup path."""


class EvaluationError(TemplateError):
    """An expression could not be resolved, or resolved to the wrong shape."""


class ArchiveError(TemplateError):
    """The input package is missing a part required for rendering."""
