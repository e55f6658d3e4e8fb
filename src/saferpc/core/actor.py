"""RpcActor base class and actor proxy (source of truth).

``RpcActor(ctx, env)`` mirrors the constructor contract of the host actor
runtime: the runtime supplies a stable per-instance context (``ctx``) and an
opaque environment (``env``), and handlers read both from the instance. Host
classes that already expose ``ctx``/``env`` do not need this base.

``safeactor`` returns a cached :class:`_ActorProxy` bound to the instance:

- ``registry``: the registry attached to the instance's class (or None);
- ``get(name)``: the bound handler for ``name``; missing routes raise
  ``NotImplementedError``;
- ``call(name, raw_input)``: awaitable dispatch by name, the way a front door
  routes inbound requests;
- ``summary()`` / ``describe()``: introspection views.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from smartseeds.typeutils import safe_is_instance

from .handler import MISSING, BoundHandler
from .introspection import describe, iter_routes, summarize
from .registry import Registry, registry_of

__all__ = ["RpcActor", "is_rpc_actor"]

_PROXY_ATTR_NAME = "__safeactor_proxy__"


class RpcActor:
    """Minimal actor base carrying the host-supplied context and environment."""

    __slots__ = ("ctx", "env", _PROXY_ATTR_NAME)

    def __init__(self, ctx: Any = None, env: Any = None):
        self.ctx = ctx
        self.env = env

    @property
    def safeactor(self) -> "_ActorProxy":
        proxy = getattr(self, _PROXY_ATTR_NAME, None)
        if proxy is None:
            proxy = _ActorProxy(self)
            setattr(self, _PROXY_ATTR_NAME, proxy)
        return proxy


class _ActorProxy:
    __slots__ = ("_owner",)

    def __init__(self, owner: Any):
        self._owner = owner

    @property
    def registry(self) -> Optional[Registry]:
        return registry_of(self._owner)

    def get(self, name: str) -> BoundHandler:
        for route, handler in iter_routes(self._owner):
            if route == name:
                return BoundHandler(handler, self._owner, route)
        raise NotImplementedError(
            f"Handler '{name}' not found on {type(self._owner).__name__}"
        )

    async def call(self, name: str, raw_input: Any = MISSING) -> Any:
        return await self.get(name)(raw_input)

    def summary(self) -> Dict[str, Dict[str, str]]:
        return summarize(self._owner)

    def describe(self) -> Dict[str, Any]:
        return describe(self._owner)


def is_rpc_actor(obj: Any) -> bool:
    """Return True when ``obj`` is an RpcActor instance."""
    return safe_is_instance(obj, "saferpc.core.actor.RpcActor")
