"""saferpc public API surface (source of truth).

Validated RPC handlers for host-managed actor classes:

- ``RouteBuilder`` compiles input/output schemas and an implementation into
  a ``Handler``;
- ``extend(Base, builder_fn)`` derives an actor class carrying the handlers;
- ``make_capable()`` promotes handlers declared on instances to their class;
- ``summarize`` / ``describe`` export route contracts for discovery;
- ``is_rpc_handler`` is the only capability test.

Constraints
-----------
- Import must stay lightweight: no handler or registry is created at import.
- Version string lives here as ``__version__`` and must remain available for
  packaging tools.
"""

__version__ = "0.1.0"

from .core import (
    MISSING,
    BuilderMisuseError,
    CallContext,
    Descriptor,
    Handler,
    Registry,
    RouteBuilder,
    RouteCollisionError,
    RpcActor,
    SafeRpcError,
    ValidationError,
    configuration,
    configure,
    describe,
    extend,
    is_rpc_actor,
    is_rpc_handler,
    make_capable,
    reset_configuration,
    summarize,
)

__all__ = [
    "MISSING",
    "BuilderMisuseError",
    "CallContext",
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
    "reset_configuration",
    "summarize",
]
