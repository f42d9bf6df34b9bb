"""Turns the flat field stream into top-level statements.

Block markers inside a block are consumed while looking for the matching
end marker but produce no statement at this level; they are found again
when the block body is rendered.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from typing import TYPE_CHECKING, Iterable

from .blocks import Block
from .errors import TemplateStructureError
from .expression import Expression
from .fields import Field
from .markup import Fragment
from .statements import Condition, ImageStatement, Insertion, Loop, Statement

if TYPE_CHECKING:
    from .processor import Processor

logger = logging.getLogger(__name__)

INSERTION = re.compile(r"=(.+)")
LOOP = re.compile(r"(\S+):each\((\S+)\)")
CONDITION_WITH_ARGUMENT = re.compile(r"(\S+):if\(([^)]+)\)")
CONDITION = re.compile(r"(\S+):if")
IMAGE = re.compile(r"@(\S+):start")

# predicate -> negate
CONDITION_PREDICATES = {
    "any?": False,
    "present?": False,
    "empty?": True,
    "blank?": True,
    "nil?": True,
}


class OperationBuilder:
    """Consumes fields in order and builds the statements they open."""

    def __init__(self, fields: Iterable[Field], fragment: Fragment, processor: "Processor"):
        self._fields = deque(fields)
        self._fragment = fragment
        self._processor = processor
        self._field: Field | None = None

    def operations(self) -> list[Statement]:
        operations = []
        while self._fields:
            statement = self._consume(allow_insertion=True)
            if statement is not None:
                operations.append(statement)
        return operations

    def _consume(self, allow_insertion: bool) -> Statement | None:
        self._field = self._fields.popleft() if self._fields else None
        if self._field is None:
            return None
        field = self._field
        expression = field.expression.strip()

        match = INSERTION.fullmatch(expression)
        if match:
            if allow_insertion:
                return Insertion(Expression.parse(match.group(1)), field)
            return None

        match = LOOP.fullmatch(expression)
        if match:
            name, item_name = match.groups()
            block = self._consume_block(f"{name}:endEach")
            return Loop(Expression.parse(name), item_name, block)

        match = CONDITION_WITH_ARGUMENT.fullmatch(expression)
        if match:
            name, argument = match.groups()
            block = self._consume_block(f"{name}:endIf")
            argument = argument.strip()
            if argument in CONDITION_PREDICATES:
                return Condition(Expression.parse(name), block, CONDITION_PREDICATES[argument])
            return Condition(Expression.parse(argument), block)

        match = CONDITION.fullmatch(expression)
        if match:
            name = match.group(1)
            block = self._consume_block(f"{name}:endIf")
            return Condition(Expression.parse(name), block)

        match = IMAGE.fullmatch(expression)
        if match:
            name = match.group(1)
            block = self._consume_block(f"@{name}:end")
            return ImageStatement(Expression.parse(name), block)

        logger.debug("Ignoring marker «%s»", expression)
        return None

    def _consume_block(self, end_expression: str) -> Block:
        start_field = end_field = self._field
        while end_field is not None and end_field.expression.strip() != end_expression:
            self._consume(allow_insertion=False)
            end_field = self._field

        if end_field is None:
            raise TemplateStructureError(
                f"Could not find end field for «{start_field.expression}». "
                f"Was looking for «{end_expression}»"
            )
        return Block.enclosed_by(start_field, end_field, self._fragment, self._processor)
