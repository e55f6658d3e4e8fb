"""Validated RPC handlers (source of truth).

A :class:`Handler` is the compiled form of a route definition: an async
callable bound to an input/output contract. It is produced only by
``RouteBuilder.implement`` and is immutable afterwards.

Call contract
-------------
``await handler(actor, raw_input)`` (or ``await actor.<name>(raw_input)`` once
the handler lives on the actor class):

1. input schema present: ``raw_input`` is validated; failures raise
   ``ValidationError(phase="input")`` and the implementation is not run;
2. the implementation runs as ``fn(actor, CallContext(env, ctx, input))`` and
   may return a value or an awaitable;
3. output schema present: the result is validated; failures raise
   ``ValidationError(phase="output")``. Side effects of step 2 stay applied;
4. the validated (or raw) result is returned.

Errors and call logs carry the route name: the attribute name the actor's
class gives the handler (recorded per class by ``__set_name__``), falling back
to the implementation's ``__name__``. The handler object itself is never
renamed, so it can be shared between classes.

Capability tag
--------------
Handler identities are recorded in a module-level ``WeakSet`` by the
constructor. :func:`is_rpc_handler` is the only membership test; attribute
shape is never consulted, so unrelated data that looks like a descriptor is
not mistaken for a handler.
"""

from __future__ import annotations

import inspect
import logging
import time
import weakref
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from . import schema as schemas
from .config import resolve
from .errors import ValidationError

__all__ = [
    "MISSING",
    "BoundHandler",
    "CallContext",
    "Descriptor",
    "Handler",
    "is_rpc_handler",
]

logger = logging.getLogger("saferpc")

_HANDLERS: "weakref.WeakSet[Handler]" = weakref.WeakSet()

# owner class -> {handler: attribute name}
_ROUTE_NAMES: "weakref.WeakKeyDictionary[type, Dict[Handler, str]]" = (
    weakref.WeakKeyDictionary()
)


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True)
class Descriptor:
    """Immutable contract of a handler."""

    input_schema: Any = schemas.EmptyInput
    output_schema: Any = Any
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def input_schema_id(self) -> str:
        return schemas.schema_id(self.input_schema)

    @property
    def output_schema_id(self) -> str:
        return schemas.schema_id(self.output_schema)


@dataclass(frozen=True)
class CallContext:
    """Arguments handed to a route implementation."""

    env: Any
    ctx: Any
    input: Any = None


class Handler:
    """Async callable with a validated contract. Create via ``RouteBuilder``."""

    __slots__ = (
        "_fn",
        "_input_schema",
        "_output_schema",
        "_descriptor",
        "_name",
        "__weakref__",
    )

    def __init__(
        self,
        fn: Callable,
        *,
        input_schema: Any = None,
        output_schema: Any = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ):
        self._fn = fn
        self._input_schema = input_schema
        self._output_schema = output_schema
        self._name = getattr(fn, "__name__", None) or "handler"
        self._descriptor = Descriptor(
            input_schema=schemas.EmptyInput if input_schema is None else input_schema,
            output_schema=Any if output_schema is None else output_schema,
            metadata=metadata or {},
        )
        _HANDLERS.add(self)

    def __setattr__(self, name: str, value: Any) -> None:
        if hasattr(self, "_descriptor"):
            raise AttributeError(f"{type(self).__name__} is immutable")
        object.__setattr__(self, name, value)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def descriptor(self) -> Descriptor:
        return self._descriptor

    @property
    def name(self) -> str:
        return self._name

    @property
    def doc(self) -> str:
        return inspect.getdoc(self._fn) or ""

    @property
    def has_input(self) -> bool:
        return self._input_schema is not None

    @property
    def has_output(self) -> bool:
        return self._output_schema is not None

    def __set_name__(self, owner: type, name: str) -> None:
        # recorded per owner; the handler itself is shared and never renamed
        _ROUTE_NAMES.setdefault(owner, {})[self] = name

    def route_name(self, owner: Optional[type] = None) -> str:
        """Return the attribute name ``owner`` (or a base) gives this handler."""
        for klass in getattr(owner, "__mro__", ()):
            names = _ROUTE_NAMES.get(klass)
            if names and self in names:
                return names[self]
        return self._name

    def __repr__(self) -> str:
        d = self._descriptor
        return f"<Handler {self._name} ({d.input_schema_id}) -> {d.output_schema_id}>"

    # ------------------------------------------------------------------
    # Binding and execution
    # ------------------------------------------------------------------
    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return BoundHandler(self, instance, self.route_name(owner or type(instance)))

    async def __call__(
        self, actor: Any, raw_input: Any = MISSING, *, route: Optional[str] = None
    ) -> Any:
        label = route or self.route_name(type(actor))
        opts = resolve()
        log_calls = bool(getattr(opts, "log_calls", False))
        if log_calls:
            logger.info("%s start", label)
        t0 = time.perf_counter()

        try:
            result = await self._run(actor, raw_input, label)
        except Exception:
            if log_calls:
                elapsed = (time.perf_counter() - t0) * 1000
                logger.info("%s failed (%.2f ms)", label, elapsed)
            raise

        if log_calls:
            elapsed = (time.perf_counter() - t0) * 1000
            logger.info("%s end (%.2f ms)", label, elapsed)
        return result

    async def _run(self, actor: Any, raw_input: Any, label: str) -> Any:
        validated_input = None
        if self._input_schema is not None:
            value = None if raw_input is MISSING else raw_input
            validated_input = await self._validate(
                "input", self._input_schema, value, label
            )

        call = CallContext(
            env=getattr(actor, "env", None),
            ctx=getattr(actor, "ctx", None),
            input=validated_input,
        )
        result = self._fn(actor, call)
        if inspect.isawaitable(result):
            result = await result

        if self._output_schema is not None:
            result = await self._validate("output", self._output_schema, result, label)
        return result

    async def _validate(self, phase: str, schema: Any, value: Any, label: str) -> Any:
        try:
            return await schemas.parse(schema, value)
        except Exception as exc:
            logger.debug("%s: %s validation failed", label, phase)
            errors = exc.errors() if callable(getattr(exc, "errors", None)) else []
            raise ValidationError(phase, route=label, errors=errors, cause=exc) from exc


class BoundHandler:
    """A handler viewed through an actor instance (``actor.<route>``)."""

    __slots__ = ("handler", "__self__", "name")

    def __init__(self, handler: Handler, instance: Any, name: Optional[str] = None):
        self.handler = handler
        self.__self__ = instance
        self.name = name or handler.name

    @property
    def descriptor(self) -> Descriptor:
        return self.handler.descriptor

    @property
    def __name__(self) -> str:
        return self.name

    def __call__(self, raw_input: Any = MISSING):
        return self.handler(self.__self__, raw_input, route=self.name)

    def __repr__(self) -> str:
        return f"<bound {self.name} {self.handler!r} of {self.__self__!r}>"


def is_rpc_handler(value: Any) -> bool:
    """Return True only for handlers produced by ``RouteBuilder.implement``.

    Bound views (``actor.<route>``) are not handlers: they belong to one actor
    and cannot be attached to another class.
    """
    try:
        return value in _HANDLERS
    except TypeError:
        return False
