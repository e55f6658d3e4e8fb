"""Instance promotion strategy (source of truth).

Handlers may be declared as ordinary instance attributes and promoted to the
class on construction::

    rpc = make_capable()

    class Counter(RpcActor):
        def __init__(self, ctx, env):
            super().__init__(ctx, env)
            self.count = 0
            self.increment = rpc.input(int).implement(_increment)
            rpc.init(self)

``CapableBuilder.init(instance)``
---------------------------------
1. enumerate ``vars(instance)``;
2. keep the members satisfying ``is_rpc_handler`` (plain data and functions
   are skipped);
3. on the first construction of the concrete class, build a registry from
   them (merged over the registry inherited from a parent class, if any),
   apply the collision policy, set every handler on ``type(instance)`` and the
   registry under ``REGISTRY_ATTR_NAME``;
4. on later constructions the class already owns a registry covering those
   names, so nothing is rebuilt: the registry object stays the same;
5. in every case the instance's own copies are deleted, so the class
   attributes are what callers see.

New route names showing up on a later construction are merged into a fresh
registry for the class.

``static_init(cls, *args, **kwargs)`` constructs one instance ahead of host
traffic so the class is promoted eagerly; the instance is returned.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type, TypeVar

from .builder import RouteBuilder
from .config import resolve
from .errors import BuilderMisuseError
from .handler import Handler, is_rpc_handler
from .registry import REGISTRY_ATTR_NAME, Registry, check_collisions

__all__ = ["CapableBuilder", "make_capable"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CapableBuilder(RouteBuilder):
    """Root route builder that can also promote instance handlers."""

    __slots__ = ()

    def init(self, instance: Any, *, on_collision: Optional[str] = None) -> Registry:
        """Promote the handlers declared on ``instance`` to its class."""
        try:
            own = vars(instance)
        except TypeError:
            raise BuilderMisuseError(
                f"init() requires an instance with a __dict__, got {type(instance).__name__}"
            ) from None

        found: Dict[str, Handler] = {
            name: value for name, value in list(own.items()) if is_rpc_handler(value)
        }
        cls = type(instance)
        registry = cls.__dict__.get(REGISTRY_ATTR_NAME)
        if not isinstance(registry, Registry) or not set(found) <= set(registry):
            registry = self._promote(cls, found, registry, on_collision)

        for name in found:
            del own[name]
        return registry

    def _promote(
        self,
        cls: type,
        found: Dict[str, Handler],
        current: Optional[Registry],
        on_collision: Optional[str],
    ) -> Registry:
        inherited = current
        if not isinstance(inherited, Registry):
            inherited = getattr(cls, REGISTRY_ATTR_NAME, None)
        candidate = Registry(found)
        if isinstance(inherited, Registry):
            registry = inherited.merged(candidate)
        else:
            registry = candidate

        opts = resolve(on_collision=on_collision)
        known = set(current) if isinstance(current, Registry) else set()
        new_names = [name for name in found if name not in known]
        check_collisions(cls, new_names, getattr(opts, "on_collision", "error"))

        for name, handler in found.items():
            handler.__set_name__(cls, name)
            setattr(cls, name, handler)
        setattr(cls, REGISTRY_ATTR_NAME, registry)
        logger.debug("Promoted routes %s onto %s", list(found), cls.__name__)
        return registry

    def static_init(self, cls: Type[T], *args: Any, **kwargs: Any) -> T:
        """Construct one instance of ``cls`` so its routes are promoted now."""
        instance = cls(*args, **kwargs)
        if not isinstance(cls.__dict__.get(REGISTRY_ATTR_NAME), Registry):
            self.init(instance)
        return instance


def make_capable() -> CapableBuilder:
    """Return a root builder whose ``init`` promotes instance handlers."""
    return CapableBuilder()
