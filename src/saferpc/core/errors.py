"""Exception taxonomy for saferpc.

Definition-time misuse (builder chaining, registry construction) raises
:class:`BuilderMisuseError` synchronously, before any class is written.
Call-time contract failures raise :class:`ValidationError` tagged with the
phase that failed; they are local to the call.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

__all__ = [
    "SafeRpcError",
    "BuilderMisuseError",
    "RouteCollisionError",
    "ValidationError",
]


class SafeRpcError(Exception):
    """Base class for every error raised by saferpc."""


class BuilderMisuseError(SafeRpcError, ValueError):
    """A route or registry was defined incorrectly."""


class RouteCollisionError(BuilderMisuseError):
    """A route name would shadow an existing member of the actor class."""

    def __init__(self, name: str, owner: type):
        self.name = name
        self.owner = owner
        super().__init__(
            f"Route '{name}' collides with an existing member of {owner.__name__}"
        )


class ValidationError(SafeRpcError):
    """Input or output of a handler call failed schema validation."""

    def __init__(
        self,
        phase: str,
        *,
        route: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.phase = phase
        self.route = route
        self._errors = list(errors or [])
        self.cause = cause
        where = f" in {route}" if route else ""
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{phase} validation error{where}{detail}")

    def errors(self) -> List[Dict[str, Any]]:
        """Return the validator's error list (pydantic shape when available)."""
        return list(self._errors)
