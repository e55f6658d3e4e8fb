"""Class extension strategy (source of truth).

``extend(Base, builder_fn)`` derives a new actor class carrying a registry,
leaving ``Base`` untouched::

    Greeter = extend(
        BaseActor,
        lambda rpc: {
            "greet": rpc.input(str).implement(lambda self, call: f"hi {call.input}"),
        },
    )

Steps
-----
1. ``builder_fn`` is called with a fresh root :class:`RouteBuilder` and must
   return a mapping ``name -> Handler``.
2. The mapping becomes a :class:`Registry` (names and values validated); the
   collision policy is applied against ``Base``.
3. A new class is built with ``types.new_class(name, (Base,))`` where the
   namespace holds every handler plus the registry under
   ``REGISTRY_ATTR_NAME``. Nothing is written to ``Base`` at any point, so
   independent registries can be derived from the same base.

Errors in steps 1-2 propagate before a class exists.
"""

from __future__ import annotations

import logging
import types
from collections.abc import Mapping
from typing import Any, Callable, Optional, Type, TypeVar

from .builder import RouteBuilder
from .config import resolve
from .errors import BuilderMisuseError
from .registry import REGISTRY_ATTR_NAME, Registry, check_collisions

__all__ = ["extend"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def extend(
    base: Type[T],
    builder_fn: Callable[[RouteBuilder], Mapping],
    *,
    name: Optional[str] = None,
    on_collision: Optional[str] = None,
) -> Type[T]:
    """Return a subclass of ``base`` exposing the routes built by ``builder_fn``.

    Args:
        base: Actor class supplied by the host runtime.
        builder_fn: Receives a root ``RouteBuilder``; returns ``{name: handler}``.
        name: Class name of the derived class (defaults to ``base.__name__``).
        on_collision: ``"error"``, ``"warn"`` or ``"override"``; defaults to
            the configured policy.

    Raises:
        BuilderMisuseError: ``builder_fn`` returned something other than a
            mapping of handlers, or a route name is invalid.
        RouteCollisionError: a route name shadows a member of ``base`` under
            the ``"error"`` policy.
    """
    if not isinstance(base, type):
        raise TypeError(f"extend() requires a class, got {base!r}")
    routes = builder_fn(RouteBuilder())
    if not isinstance(routes, Mapping):
        raise BuilderMisuseError(
            f"Route builder must return a mapping of handlers, got {type(routes).__name__}"
        )
    registry = Registry(routes)

    opts = resolve(on_collision=on_collision)
    check_collisions(base, registry.keys(), getattr(opts, "on_collision", "error"))

    namespace: dict[str, Any] = {
        "__module__": base.__module__,
        "__qualname__": name or base.__qualname__,
        "__doc__": base.__doc__,
    }
    namespace.update(registry)
    namespace[REGISTRY_ATTR_NAME] = registry
    derived = types.new_class(
        name or base.__name__, (base,), exec_body=lambda ns: ns.update(namespace)
    )
    logger.debug("Extended %s with routes %s", base.__name__, list(registry))
    return derived
