"""Handler registry (source of truth).

A :class:`Registry` is the ordered, immutable ``name -> Handler`` table that
attachment strategies place on an actor class under
``REGISTRY_ATTR_NAME``. It is the explicit registration list introspection
reads back; the individual handlers live next to it as class attributes.

Construction rules
------------------
- keys must be Python identifiers, must not start with ``__`` and must not
  equal ``REGISTRY_ATTR_NAME``;
- values must satisfy :func:`~saferpc.core.handler.is_rpc_handler`;
- violations raise ``BuilderMisuseError`` before anything is attached.

Lookup and execution
--------------------
- ``resolve(name, **options)`` merges ``options`` into ``SmartOptions`` using the
  registry defaults. Missing names fall back to ``default_handler`` (if
  provided) else raise ``NotImplementedError``. With ``use_smartasync`` the
  handler is wrapped via ``smartasync.smartasync`` so sync code can call it.
- ``call(actor, name, raw_input)`` dispatches by name (awaitable).
- ``summary()`` returns ``{name: {"input_schema": id, "output_schema": id}}``.

Collision policy
----------------
``check_collisions(owner, names, policy)`` inspects ``owner`` (and its MRO)
for existing members that are not handlers. ``"error"`` raises
``RouteCollisionError``; ``"warn"`` logs a warning and lets the route win;
``"override"`` is silent.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple

from smartseeds import SmartOptions

from .errors import BuilderMisuseError, RouteCollisionError
from .handler import MISSING, Handler, is_rpc_handler

__all__ = ["REGISTRY_ATTR_NAME", "Registry", "check_collisions", "registry_of"]

REGISTRY_ATTR_NAME = "__saferpc_registry__"

logger = logging.getLogger(__name__)


class Registry(Mapping):
    """Ordered, immutable mapping of route names to handlers."""

    __slots__ = ("_handlers", "_get_defaults")

    def __init__(
        self,
        handlers: Optional[Any] = None,
        *,
        get_default_handler: Optional[Callable] = None,
        get_use_smartasync: Optional[bool] = None,
    ) -> None:
        items = handlers.items() if isinstance(handlers, Mapping) else (handlers or ())
        table: Dict[str, Handler] = {}
        for name, handler in items:
            self._validate_entry(name, handler)
            if name in table:
                raise BuilderMisuseError(f"Handler name collision: {name}")
            table[name] = handler
        self._handlers = table
        defaults: Dict[str, Any] = {}
        if get_default_handler is not None:
            defaults["default_handler"] = get_default_handler
        if get_use_smartasync is not None:
            defaults["use_smartasync"] = get_use_smartasync
        self._get_defaults = defaults

    @staticmethod
    def _validate_entry(name: Any, handler: Any) -> None:
        if not isinstance(name, str) or not name.isidentifier():
            raise BuilderMisuseError(f"Route name must be an identifier, got {name!r}")
        if name.startswith("__") or name == REGISTRY_ATTR_NAME:
            raise BuilderMisuseError(f"Route name {name!r} is reserved")
        if not is_rpc_handler(handler):
            raise BuilderMisuseError(
                f"Route {name!r} is not a handler; build it with RouteBuilder.implement()"
            )

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------
    def __getitem__(self, name: str) -> Handler:
        return self._handlers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"<Registry {list(self._handlers)}>"

    def merged(self, other: Mapping) -> "Registry":
        """Return a new registry with ``other`` entries overriding ours."""
        combined = dict(self._handlers)
        combined.update(other)
        result = Registry(combined)
        result._get_defaults = dict(self._get_defaults)
        return result

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def resolve(self, name: str, **options: Any) -> Callable:
        """Resolve the handler registered under ``name``."""
        opts = SmartOptions(options, defaults=self._get_defaults)
        default = getattr(opts, "default_handler", None)
        use_smartasync = getattr(opts, "use_smartasync", False)

        handler = self._handlers.get(name)
        if handler is None:
            handler = default
        if handler is None:
            raise NotImplementedError(f"Handler '{name}' not found")

        if use_smartasync:
            from smartasync import smartasync  # type: ignore

            target = handler

            async def invoke(*args: Any, **kwargs: Any) -> Any:
                result = target(*args, **kwargs)
                if inspect.isawaitable(result):
                    result = await result
                return result

            handler = smartasync(invoke)

        return handler

    async def call(self, actor: Any, name: str, raw_input: Any = MISSING) -> Any:
        """Dispatch ``raw_input`` to the handler named ``name`` on ``actor``."""
        handler = self.resolve(name)
        if handler is self._handlers.get(name):
            return await handler(actor, raw_input, route=name)
        return await handler(actor, raw_input)

    def entries(self) -> Tuple[str, ...]:
        return tuple(self._handlers)

    def summary(self) -> Dict[str, Dict[str, str]]:
        return {
            name: {
                "input_schema": handler.descriptor.input_schema_id,
                "output_schema": handler.descriptor.output_schema_id,
            }
            for name, handler in self._handlers.items()
        }


def registry_of(owner: Any) -> Optional[Registry]:
    """Return the registry attached to ``owner`` (class or instance), if any."""
    cls = owner if isinstance(owner, type) else type(owner)
    candidate = getattr(cls, REGISTRY_ATTR_NAME, None)
    return candidate if isinstance(candidate, Registry) else None


def check_collisions(owner: type, names: Iterable[str], policy: str) -> None:
    """Apply the collision policy for ``names`` about to be set on ``owner``."""
    if policy == "override":
        return
    for name in names:
        try:
            existing = inspect.getattr_static(owner, name)
        except AttributeError:
            continue
        if is_rpc_handler(existing):
            continue
        if policy == "error":
            raise RouteCollisionError(name, owner)
        logger.warning(
            "Route %r overrides existing member of %s", name, owner.__name__
        )
