"""Best-effort discovery of RPC members (source of truth).

``summarize(instance)`` returns ``{name: {"input_schema": id,
"output_schema": id}}`` for every route reachable on ``instance``;
``describe(instance)`` adds JSON schemas, metadata and docs for tool-calling
clients.

Discovery order
---------------
1. registries recorded under ``REGISTRY_ATTR_NAME`` along the class MRO,
   base classes first so subclasses override;
2. any other member found by ``dir()`` whose static value (read with
   ``inspect.getattr_static``, so no property or descriptor code runs)
   satisfies ``is_rpc_handler``. This catches handlers not yet promoted.

Membership is decided by the identity predicate only, never by the shape of
a value. Neither function raises: members that fail to resolve are skipped.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Dict, Iterator, Tuple

from smartseeds.typeutils import safe_is_instance

from . import schema as schemas
from .handler import Handler, is_rpc_handler
from .registry import REGISTRY_ATTR_NAME, Registry

__all__ = ["summarize", "describe", "iter_routes"]

logger = logging.getLogger(__name__)


def iter_routes(instance: Any) -> Iterator[Tuple[str, Handler]]:
    """Yield ``(name, handler)`` pairs reachable on ``instance``."""
    found: Dict[str, Handler] = {}
    for cls in reversed(type(instance).__mro__):
        registry = vars(cls).get(REGISTRY_ATTR_NAME)
        if isinstance(registry, Registry):
            found.update(registry.items())

    try:
        names = dir(instance)
    except Exception:
        names = []
    for name in names:
        if name in found or name.startswith("__"):
            continue
        try:
            value = inspect.getattr_static(instance, name)
        except Exception:
            continue
        if not is_rpc_handler(value):
            continue
        found[name] = value

    yield from found.items()


def summarize(instance: Any) -> Dict[str, Dict[str, str]]:
    """Return the schema identifiers of every route on ``instance``."""
    result: Dict[str, Dict[str, str]] = {}
    for name, handler in iter_routes(instance):
        try:
            descriptor = handler.descriptor
            result[name] = {
                "input_schema": descriptor.input_schema_id,
                "output_schema": descriptor.output_schema_id,
            }
        except Exception:
            logger.debug("Skipping route %r during summary", name)
    return result


def describe(instance: Any) -> Dict[str, Any]:
    """Return a discovery document for ``instance`` (routes plus actor info)."""
    routes: Dict[str, Any] = {}
    for name, handler in iter_routes(instance):
        try:
            descriptor = handler.descriptor
            routes[name] = {
                "input_schema": descriptor.input_schema_id,
                "output_schema": descriptor.output_schema_id,
                "input_json_schema": schemas.json_schema(descriptor.input_schema),
                "output_json_schema": schemas.json_schema(descriptor.output_schema),
                "metadata": dict(descriptor.metadata),
                "doc": handler.doc,
            }
        except Exception:
            logger.debug("Skipping route %r during describe", name)
    actor: Dict[str, Any] = {"class": type(instance).__name__}
    if safe_is_instance(instance, "saferpc.core.actor.RpcActor"):
        try:
            ctx_id = getattr(getattr(instance, "ctx", None), "id", None)
            if ctx_id is not None:
                actor["id"] = str(ctx_id)
        except Exception:
            logger.debug("Actor identity unavailable for %s", actor["class"])
    return {"actor": actor, "routes": routes}

