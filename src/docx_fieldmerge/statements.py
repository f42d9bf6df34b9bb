"""Statements produced by the operation builder."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from .blocks import Block
from .context import Context
from .errors import EvaluationError
from .expression import Expression
from .fields import Field
from .values import ImageValue, ListValue, Nil, Scalar, describe, is_truthy

logger = logging.getLogger(__name__)


@dataclass
class Insertion:
    """``=expr``: replace the field by the value's text."""

    expression: Expression
    field: Field

    def evaluate(self, context: Context) -> None:
        value = self.expression.evaluate(context)
        if not (isinstance(value, Scalar) or value is Nil):
            raise EvaluationError(
                f"Cannot insert a {describe(value)} value for «={self.expression}»"
            )
        self.field.replace(str(value))


@dataclass
class Loop:
    """``expr:each(item)`` ... ``expr:endEach``: one copy of the block per item."""

    expression: Expression
    item_name: str
    block: Block

    def evaluate(self, context: Context) -> None:
        value = self.expression.evaluate(context)
        if not isinstance(value, ListValue):
            raise EvaluationError(
                f"«{self.expression}:each({self.item_name})» needs a list, "
                f"got a {describe(value)} value"
            )
        content = []
        for item in value:
            content.extend(self.block.duplicate(context.child(self.item_name, item)))
        logger.debug("Loop %s produced %d iterations", self.expression, len(value))
        self.block.splice(content)


@dataclass
class Condition:
    """``expr:if`` ... ``expr:endIf``: keep the block when the test holds."""

    expression: Expression
    block: Block
    negate: bool = False

    def evaluate(self, context: Context) -> None:
        truthy = is_truthy(self.expression.evaluate(context))
        if truthy != self.negate:
            self.block.splice(self.block.duplicate(context))
        else:
            self.block.splice([])


@dataclass
class ImageStatement:
    """``@expr:start`` ... ``@expr:end``: point the placeholder at an image."""

    expression: Expression
    block: Block

    def evaluate(self, context: Context) -> None:
        value = self.expression.evaluate(context)
        if value is Nil:
            self.block.splice([])
            return
        if not isinstance(value, ImageValue):
            raise EvaluationError(
                f"«@{self.expression}» needs an image, got a {describe(value)} value"
            )
        image = value.image
        if image.rid is None:
            raise EvaluationError(
                f"Image {image.name!r} for «@{self.expression}» has no relationship id; "
                f"pass it in the images given to the render"
            )
        self.block.embed_image(image)


Statement = Union[Insertion, Loop, Condition, ImageStatement]
