"""Tests for the Registry mapping."""

import asyncio

import pytest

from saferpc import BuilderMisuseError, Registry, RouteBuilder, RpcActor, ValidationError


def _echo(self, call):
    return call.input


echo = RouteBuilder().input(str).implement(_echo)
ping = RouteBuilder().implement(lambda self, call: "pong")


def test_registry_is_ordered_and_read_only():
    registry = Registry({"echo": echo, "ping": ping})
    assert list(registry) == ["echo", "ping"]
    assert registry.entries() == ("echo", "ping")
    assert registry["echo"] is echo
    assert len(registry) == 2
    with pytest.raises(TypeError):
        registry["other"] = echo


def test_registry_accepts_pairs_and_rejects_duplicates():
    assert list(Registry([("echo", echo)])) == ["echo"]
    with pytest.raises(BuilderMisuseError, match="collision"):
        Registry([("echo", echo), ("echo", ping)])


def test_registry_rejects_non_handlers():
    with pytest.raises(BuilderMisuseError):
        Registry({"echo": _echo})


def test_registry_rejects_dunder_names():
    with pytest.raises(BuilderMisuseError, match="reserved"):
        Registry({"__echo": echo})


def test_resolve_missing_route():
    registry = Registry({"echo": echo})
    with pytest.raises(NotImplementedError):
        registry.resolve("missing")
    assert registry.resolve("missing", default_handler=ping) is ping


def test_registry_default_handler():
    registry = Registry({"echo": echo}, get_default_handler=ping)
    assert registry.resolve("missing") is ping


def test_get_keeps_mapping_contract():
    registry = Registry({"echo": echo})
    assert registry.get("echo") is echo
    assert registry.get("missing") is None
    assert registry.get("missing", ping) is ping


def test_resolve_with_smartasync_from_sync_code():
    registry = Registry({"echo": echo})
    handler = registry.resolve("echo", use_smartasync=True)
    assert handler(RpcActor(), "hi") == "hi"


def test_registry_rejects_bound_views():
    class Holder(RpcActor):
        shout = echo

    with pytest.raises(BuilderMisuseError, match="not a handler"):
        Registry({"shout": Holder().shout})


def test_call_dispatches_by_name():
    registry = Registry({"echo": echo, "ping": ping})
    actor = RpcActor()
    assert asyncio.run(registry.call(actor, "echo", "hi")) == "hi"
    assert asyncio.run(registry.call(actor, "ping")) == "pong"


def test_summary_and_merge():
    registry = Registry({"echo": echo})
    merged = registry.merged({"ping": ping})
    assert list(merged) == ["echo", "ping"]
    assert list(registry) == ["echo"]
    assert merged.summary() == {
        "echo": {"input_schema": "str", "output_schema": "Any"},
        "ping": {"input_schema": "EmptyInput", "output_schema": "Any"},
    }


def test_call_reports_registered_name_on_failure():
    registry = Registry({"loud": echo})
    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(registry.call(RpcActor(), "loud", 5))
    assert excinfo.value.route == "loud"
