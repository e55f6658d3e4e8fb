"""Schema validation contract (source of truth).

Handlers only depend on one operation: ``await parse(schema, value)`` which
returns the validated/coerced value or raises. Pydantic provides the default
implementation through ``TypeAdapter``; any type pydantic accepts is a valid
schema (``str``, ``Annotated[str, Field(min_length=1)]``, ``BaseModel``
subclasses, ``TypedDict``...).

Objects that bring their own validator are used unchanged when they expose
``parse_async(value)`` or ``parse(value)`` (awaitable results are awaited).

``EmptyInput`` is the "empty object" schema reported for handlers declared
without an input schema; ``typing.Any`` is reported for missing output
schemas.
"""

from __future__ import annotations

import inspect
import re
from functools import lru_cache
from typing import Any, Dict, Optional, get_origin

from pydantic import BaseModel, TypeAdapter

__all__ = [
    "EmptyInput",
    "parse",
    "schema_id",
    "json_schema",
]


class EmptyInput(BaseModel):
    """Schema of a handler that takes no input."""


_MODULE_PREFIX = re.compile(r"\b(?:typing|typing_extensions|builtins|annotated_types)\.")


def _custom_parser(schema: Any):
    if isinstance(schema, type) or get_origin(schema) is not None:
        return None
    for attr in ("parse_async", "parse"):
        method = getattr(schema, attr, None)
        if callable(method):
            return method
    return None


@lru_cache(maxsize=None)
def _cached_adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def _adapter(schema: Any) -> TypeAdapter:
    try:
        return _cached_adapter(schema)
    except TypeError:
        # unhashable schema objects are not cached
        return TypeAdapter(schema)


async def parse(schema: Any, value: Any) -> Any:
    """Validate ``value`` against ``schema`` and return the coerced value."""
    parser = _custom_parser(schema)
    if parser is not None:
        result = parser(value)
        if inspect.isawaitable(result):
            result = await result
        return result
    return _adapter(schema).validate_python(value)


def schema_id(schema: Any) -> str:
    """Return a short, stable identifier for a schema."""
    if schema is None:
        return "None"
    if isinstance(schema, type) and get_origin(schema) is None:
        return schema.__name__
    name = getattr(schema, "schema_id", None)
    if isinstance(name, str) and name:
        return name
    return _MODULE_PREFIX.sub("", repr(schema))


def json_schema(schema: Any) -> Optional[Dict[str, Any]]:
    """Return the JSON schema for ``schema``, or None when none can be built."""
    exporter = getattr(schema, "json_schema", None)
    if _custom_parser(schema) is not None and callable(exporter):
        try:
            return exporter()
        except Exception:
            return None
    try:
        return _adapter(schema).json_schema()
    except Exception:
        return None
