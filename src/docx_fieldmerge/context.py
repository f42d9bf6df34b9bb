"""Data bindings visible to template expressions."""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Mapping
from typing import Any

from .errors import EvaluationError
from .values import Value, to_value


class Context:
    """String-keyed bindings with overlay scopes for loop iterations.

    Keys are stringified on the way in so callers may pass enums or other
    hashables as keys. A child scope never mutates its parent.
    """

    def __init__(self, bindings: Mapping[Any, Any] | None = None):
        self._bindings = ChainMap({str(key): value for key, value in (bindings or {}).items()})

    @classmethod
    def wrap(cls, context: "Context | Mapping[Any, Any] | None") -> "Context":
        if isinstance(context, Context):
            return context
        return cls(context)

    def child(self, name: str, value: Any) -> "Context":
        """A new scope binding *name* on top of this one."""
        scope = Context.__new__(Context)
        scope._bindings = self._bindings.new_child({name: value})
        return scope

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __getitem__(self, name: str) -> Value:
        try:
            return to_value(self._bindings[name])
        except KeyError:
            raise EvaluationError(f"Undefined name «{name}»") from None

    def keys(self):
        return self._bindings.keys()
