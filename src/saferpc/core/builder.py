"""Fluent route builder (source of truth).

``RouteBuilder`` accumulates an optional input schema, an optional output
schema and optional metadata, then compiles an implementation into a
:class:`~saferpc.core.handler.Handler`::

    greet = (
        RouteBuilder()
        .input(str)
        .output(Greeting)
        .meta({"description": "Say hello"})
        .implement(lambda self, call: {"message": f"Hello, {call.input}!"})
    )

State
-----
Each builder value carries a :class:`BuilderState`: the set of fields already
written and whether ``implement`` was called. Transitions are guarded:

- ``input`` / ``output`` / ``meta`` return a *new* builder with one more field
  set; writing a field twice raises ``BuilderMisuseError``.
- ``implement`` is terminal for the definition it is called on; further calls
  on that same builder raise ``BuilderMisuseError``.

Root builders (``RouteBuilder()``, the builder passed to ``extend`` callbacks,
``make_capable()``) are factories: every chain started from them is a fresh
definition, so they are never locked by ``implement``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Callable, FrozenSet, Optional

from .errors import BuilderMisuseError
from .handler import Handler

__all__ = ["BuilderState", "RouteBuilder"]

_UNSET: Any = object()

_FIELD_LABELS = {
    "input": "Input schema",
    "output": "Output schema",
    "meta": "Metadata",
}


@dataclass(frozen=True)
class BuilderState:
    """Which fields of a route definition have been written."""

    fields: FrozenSet[str] = frozenset()
    root: bool = True

    def has(self, name: str) -> bool:
        return name in self.fields

    def with_field(self, name: str) -> "BuilderState":
        return replace(self, fields=self.fields | {name}, root=False)


class RouteBuilder:
    """Immutable-step builder producing validated handlers."""

    __slots__ = ("_state", "_input_schema", "_output_schema", "_metadata", "_implemented")

    def __init__(self) -> None:
        self._state = BuilderState()
        self._input_schema: Any = _UNSET
        self._output_schema: Any = _UNSET
        self._metadata: Any = _UNSET
        self._implemented = False

    @property
    def state(self) -> BuilderState:
        return self._state

    @property
    def implemented(self) -> bool:
        return self._implemented

    def __repr__(self) -> str:
        fields = ",".join(sorted(self._state.fields)) or "-"
        flag = " implemented" if self._implemented else ""
        return f"<{type(self).__name__} fields={fields}{flag}>"

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def input(self, schema: Any) -> "RouteBuilder":
        """Set the input schema."""
        return self._transition("input", "_input_schema", schema)

    def output(self, schema: Any) -> "RouteBuilder":
        """Set the output schema."""
        return self._transition("output", "_output_schema", schema)

    def meta(self, data: Any) -> "RouteBuilder":
        """Attach free-form metadata (exposed read-only on the descriptor)."""
        return self._transition("meta", "_metadata", data)

    def implement(self, fn: Callable) -> Handler:
        """Compile ``fn(self, call)`` into a handler. Terminal for this definition."""
        self._guard_open()
        if not callable(fn):
            raise BuilderMisuseError(f"implement() requires a callable, got {fn!r}")
        handler = Handler(
            fn,
            input_schema=self._value(self._input_schema),
            output_schema=self._value(self._output_schema),
            metadata=self._metadata_value(),
        )
        if not self._state.root:
            object.__setattr__(self, "_implemented", True)
        return handler

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _guard_open(self) -> None:
        if self._implemented:
            raise BuilderMisuseError("Route already implemented; start a new chain")

    def _transition(self, field_name: str, slot: str, value: Any) -> "RouteBuilder":
        self._guard_open()
        if self._state.has(field_name):
            raise BuilderMisuseError(f"{_FIELD_LABELS[field_name]} already set")
        if field_name != "meta" and value is None:
            raise BuilderMisuseError(f"{_FIELD_LABELS[field_name]} cannot be None")
        clone = self._clone()
        object.__setattr__(clone, slot, value)
        object.__setattr__(clone, "_state", self._state.with_field(field_name))
        return clone

    def _clone(self) -> "RouteBuilder":
        clone = RouteBuilder.__new__(RouteBuilder)
        for slot in RouteBuilder.__slots__:
            object.__setattr__(clone, slot, getattr(self, slot))
        object.__setattr__(clone, "_implemented", False)
        return clone

    @staticmethod
    def _value(value: Any) -> Optional[Any]:
        return None if value is _UNSET else value

    def _metadata_value(self) -> Optional[Any]:
        if self._metadata is _UNSET or self._metadata is None:
            return None
        if not isinstance(self._metadata, Mapping):
            return {"value": self._metadata}
        return self._metadata
