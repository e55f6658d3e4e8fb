"""Process-wide saferpc options.

``configure(flags=None, **options)`` validates options with pydantic's
``validate_call`` against the signature of :func:`_accepted_options` and
writes them to the module store. ``flags`` is a comma-separated string such as
``"log_calls"`` or ``"log_calls:off"`` parsed into booleans.

``resolve(**overrides)`` merges per-call overrides (``None`` means "not
given") over the stored defaults and returns a ``SmartOptions`` view.
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import validate_call
from smartseeds import SmartOptions

__all__ = [
    "CollisionPolicy",
    "configure",
    "configuration",
    "reset_configuration",
    "resolve",
]

CollisionPolicy = Literal["error", "warn", "override"]

_DEFAULTS: Dict[str, Any] = {"log_calls": False, "on_collision": "error"}
_store: Dict[str, Any] = dict(_DEFAULTS)


@validate_call
def _accepted_options(
    log_calls: bool = False,
    on_collision: CollisionPolicy = "error",
) -> Dict[str, Any]:
    return {"log_calls": log_calls, "on_collision": on_collision}


def _parse_flags(flags: str) -> Dict[str, bool]:
    mapping: Dict[str, bool] = {}
    for chunk in flags.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        if ":" in chunk:
            name, value = chunk.split(":", 1)
            mapping[name.strip()] = value.strip().lower() != "off"
        else:
            mapping[chunk] = True
    return mapping


def configure(flags: Optional[str] = None, **options: Any) -> Dict[str, Any]:
    """Update the process-wide defaults and return the new configuration.

    Raises pydantic ``ValidationError`` on unknown keys or invalid values;
    the store is left untouched in that case.
    """
    if flags:
        options = {**_parse_flags(flags), **options}
    merged = {**_store, **options}
    validated = _accepted_options(**merged)
    _store.update(validated)
    return configuration()


def configuration() -> Dict[str, Any]:
    return dict(_store)


def reset_configuration() -> None:
    _store.clear()
    _store.update(_DEFAULTS)


def resolve(**overrides: Any) -> SmartOptions:
    given = {key: value for key, value in overrides.items() if value is not None}
    if given:
        _accepted_options(**{**_store, **given})
    return SmartOptions(given, defaults=dict(_store))
