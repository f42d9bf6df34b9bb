"""Lookup-path expressions such as ``person.first_name`` or ``items[0].label``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .context import Context
from .errors import EvaluationError, ExpressionSyntaxError
from .values import ListValue, Record, Value, describe

_NAME = re.compile(r"[^.\[\]\s]+")
_INDEX = re.compile(r"""\[\s*(?:(-?\d+)|"([^"]*)"|'([^']*)')\s*\]""")


@dataclass(frozen=True)
class Expression:
    """A parsed path: a root name followed by field and index steps."""

    text: str
    root: str
    steps: tuple[str | int, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "Expression":
        """Parse *text* into an Expression.

        Raises:
            ExpressionSyntaxError: If *text* is not a valid path.
        """
        source = text.strip()
        match = _NAME.match(source)
        if not match:
            raise ExpressionSyntaxError(f"Invalid expression «{text}»")
        root = match.group(0)
        position = match.end()
        steps: list[str | int] = []

        while position < len(source):
            if source[position] == ".":
                match = _NAME.match(source, position + 1)
                if not match:
                    raise ExpressionSyntaxError(
                        f"Expected a field name after '.' in «{text}»"
                    )
                steps.append(match.group(0))
            else:
                match = _INDEX.match(source, position)
                if not match:
                    raise ExpressionSyntaxError(
                        f"Unexpected {source[position]!r} at offset {position} in «{text}»"
                    )
                number, double_quoted, single_quoted = match.groups()
                if number is not None:
                    steps.append(int(number))
                else:
                    steps.append(double_quoted if double_quoted is not None else single_quoted)
            position = match.end()

        return cls(text=source, root=root, steps=tuple(steps))

    def evaluate(self, context: Context) -> Value:
        """Resolve the path against *context*.

        Raises:
            EvaluationError: If any step is undefined or applied to a value
                that cannot be stepped into.
        """
        if self.root not in context:
            raise EvaluationError(f"Undefined name «{self.root}» in «{self.text}»")
        value = context[self.root]
        for step in self.steps:
            value = self._step(value, step)
        return value

    def _step(self, value: Value, step: str | int) -> Value:
        if isinstance(value, Record):
            try:
                return value.get(step)
            except (LookupError, AttributeError):
                raise EvaluationError(
                    f"Undefined field {step!r} in «{self.text}»"
                ) from None
        if isinstance(value, ListValue) and isinstance(step, int):
            try:
                return value.at(step)
            except IndexError:
                raise EvaluationError(
                    f"Index {step} out of range ({len(value)} items) in «{self.text}»"
                ) from None
        raise EvaluationError(
            f"Cannot look up {step!r} on a {describe(value)} value in «{self.text}»"
        )

    def __str__(self) -> str:
        return self.text
