"""Tests for RouteBuilder chaining rules."""

import pytest

from saferpc import BuilderMisuseError, Handler, RouteBuilder, is_rpc_handler


def _noop(self, call):
    return None


@pytest.mark.parametrize(
    "first, second",
    [
        (lambda b: b.input(str), lambda b: b.input(int)),
        (lambda b: b.output(str), lambda b: b.output(int)),
        (lambda b: b.meta({"a": 1}), lambda b: b.meta({"b": 2})),
    ],
)
def test_fields_are_write_once(first, second):
    builder = first(RouteBuilder())
    with pytest.raises(BuilderMisuseError, match="already set"):
        second(builder)


def test_each_field_set_once_succeeds():
    handler = RouteBuilder().input(str).output(int).meta({"tag": "x"}).implement(_noop)
    assert isinstance(handler, Handler)
    assert handler.descriptor.input_schema is str
    assert handler.descriptor.output_schema is int
    assert dict(handler.descriptor.metadata) == {"tag": "x"}


def test_fields_can_be_set_in_any_order():
    handler = RouteBuilder().meta({"k": 1}).output(int).input(str).implement(_noop)
    assert handler.descriptor.input_schema is str
    assert handler.descriptor.output_schema is int


def test_transitions_return_new_builders():
    root = RouteBuilder()
    with_input = root.input(str)
    assert with_input is not root
    assert root.state.fields == frozenset()
    assert with_input.state.fields == frozenset({"input"})
    # the root can start another chain with a different input
    assert root.input(int).state.fields == frozenset({"input"})


def test_falsy_metadata_still_counts_as_set():
    builder = RouteBuilder().meta({})
    with pytest.raises(BuilderMisuseError):
        builder.meta({"late": True})


def test_none_schema_is_rejected():
    with pytest.raises(BuilderMisuseError, match="cannot be None"):
        RouteBuilder().input(None)


def test_implement_is_terminal_for_a_definition():
    builder = RouteBuilder().input(str)
    builder.implement(_noop)
    assert builder.implemented
    with pytest.raises(BuilderMisuseError, match="already implemented"):
        builder.implement(_noop)
    with pytest.raises(BuilderMisuseError):
        builder.output(int)
    with pytest.raises(BuilderMisuseError):
        builder.meta({})


def test_root_builder_is_a_reusable_factory():
    root = RouteBuilder()
    first = root.implement(_noop)
    second = root.implement(_noop)
    assert first is not second
    assert not root.implemented
    assert is_rpc_handler(first) and is_rpc_handler(second)


def test_implement_requires_callable():
    with pytest.raises(BuilderMisuseError, match="requires a callable"):
        RouteBuilder().input(str).implement("not callable")


def test_defaults_when_nothing_is_set():
    from typing import Any

    from saferpc.core.schema import EmptyInput

    handler = RouteBuilder().implement(_noop)
    assert handler.descriptor.input_schema is EmptyInput
    assert handler.descriptor.output_schema is Any
    assert dict(handler.descriptor.metadata) == {}
    assert not handler.has_input
    assert not handler.has_output


def test_non_mapping_metadata_is_wrapped():
    handler = RouteBuilder().meta("say hello").implement(_noop)
    assert dict(handler.descriptor.metadata) == {"value": "say hello"}


def test_handler_is_immutable():
    handler = RouteBuilder().implement(_noop)
    with pytest.raises(AttributeError):
        handler._fn = print
    with pytest.raises(TypeError):
        handler.descriptor.metadata["x"] = 1
