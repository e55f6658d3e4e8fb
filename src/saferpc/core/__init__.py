"""Core runtime aggregator (source of truth).

Purpose: expose the building blocks from a single module. No extra logic
beyond imports/exports.

- ``builder`` → ``RouteBuilder``, ``BuilderState``
- ``handler`` → ``Handler``, ``BoundHandler``, ``Descriptor``, ``CallContext``,
  ``is_rpc_handler``, ``MISSING``
- ``registry`` → ``Registry``, ``REGISTRY_ATTR_NAME``, ``registry_of``
- ``extend`` → ``extend`` (class extension strategy)
- ``promote`` → ``make_capable``, ``CapableBuilder`` (instance promotion)
- ``introspection`` → ``summarize``, ``describe``
- ``actor`` → ``RpcActor``, ``is_rpc_actor``
- ``config`` → ``configure``, ``configuration``, ``reset_configuration``
- ``errors`` → exception taxonomy
"""

from .actor import RpcActor, is_rpc_actor
from .builder import BuilderState, RouteBuilder
from .config import configuration, configure, reset_configuration
from .errors import BuilderMisuseError, RouteCollisionError, SafeRpcError, ValidationError
from .extend import extend
from .handler import MISSING, BoundHandler, CallContext, Descriptor, Handler, is_rpc_handler
from .introspection import describe, summarize
from .promote import CapableBuilder, make_capable
from .registry import REGISTRY_ATTR_NAME, Registry, registry_of

__all__ = [
    "MISSING",
    "REGISTRY_ATTR_NAME",
    "BoundHandler",
    "BuilderMisuseError",
    "BuilderState",
    "CallContext",
    "CapableBuilder",
    "Descriptor",
    "Handler",
    "Registry",
    "RouteBuilder",
    "RouteCollisionError",
    "RpcActor",
    "SafeRpcError",
    "ValidationError",
    "configuration",
    "configure",
    "describe",
    "extend",
    "is_rpc_actor",
    "is_rpc_handler",
    "make_capable",
    "registry_of",
    "reset_configuration",
    "summarize",
]
