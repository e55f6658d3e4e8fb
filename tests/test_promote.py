"""Tests for the instance promotion strategy."""

import asyncio

import pytest

from saferpc import BuilderMisuseError, RouteCollisionError, RpcActor, make_capable, summarize
from saferpc.core.promote import CapableBuilder
from saferpc.core.registry import REGISTRY_ATTR_NAME, registry_of

rpc = make_capable()


def _increment(self, call):
    self.count += call.input
    return {"count": self.count}


def _total(self, call):
    return self.count


class Counter(RpcActor):
    def __init__(self, ctx=None, env=None):
        super().__init__(ctx, env)
        self.count = 0
        self.label = "counter"
        self.helper = lambda: "plain"
        self.increment = rpc.input(int).output(dict[str, int]).implement(_increment)
        self.total = rpc.output(int).implement(_total)
        rpc.init(self)


def test_make_capable_returns_root_builder():
    builder = make_capable()
    assert isinstance(builder, CapableBuilder)
    assert builder.state.root
    # chains started from it are ordinary builders
    assert not isinstance(builder.input(int), CapableBuilder)


def test_handlers_are_moved_to_the_class():
    counter = Counter()
    own = vars(counter)
    assert "increment" not in own and "total" not in own
    assert own["count"] == 0 and own["label"] == "counter"
    assert own["helper"]() == "plain"
    assert "increment" in vars(Counter)
    assert REGISTRY_ATTR_NAME in vars(Counter)


def test_promoted_handlers_run_against_each_instance():
    first, second = Counter(), Counter()
    assert asyncio.run(first.increment(2)) == {"count": 2}
    assert asyncio.run(first.increment(3)) == {"count": 5}
    assert asyncio.run(second.total()) == 0


def test_promotion_is_idempotent():
    first = Counter()
    registry = registry_of(first)
    handler = vars(Counter)["increment"]
    second = Counter()
    assert registry_of(second) is registry
    assert vars(Counter)["increment"] is handler
    assert summarize(first) == summarize(second)
    assert "increment" not in vars(second)


def test_summary_of_promoted_routes():
    assert summarize(Counter()) == {
        "increment": {"input_schema": "int", "output_schema": "dict[str, int]"},
        "total": {"input_schema": "EmptyInput", "output_schema": "int"},
    }


def test_subclass_promotes_onto_its_own_class():
    class Doubler(Counter):
        def __init__(self):
            self.double = rpc.implement(lambda self, call: self.count * 2)
            super().__init__()

    doubler = Doubler()
    assert set(vars(Doubler)[REGISTRY_ATTR_NAME]) == {"increment", "total", "double"}
    assert "double" not in vars(Counter)
    assert asyncio.run(doubler.increment(4)) == {"count": 4}
    assert asyncio.run(doubler.double()) == 8


def test_collision_with_class_member_fails():
    class Clash(RpcActor):
        def __init__(self):
            super().__init__()
            self.ping = rpc.implement(lambda self, call: "rpc")
            rpc.init(self)

        def ping(self):
            return "method"

    with pytest.raises(RouteCollisionError):
        Clash()
    assert REGISTRY_ATTR_NAME not in vars(Clash)


def test_collision_override_is_explicit():
    class Override(RpcActor):
        def __init__(self):
            super().__init__()
            self.ping = rpc.implement(lambda self, call: "rpc")
            rpc.init(self, on_collision="override")

        def ping(self):
            return "method"

    assert asyncio.run(Override().ping()) == "rpc"


def test_init_requires_instance_dict():
    class Slotted:
        __slots__ = ("x",)

    with pytest.raises(BuilderMisuseError, match="__dict__"):
        rpc.init(Slotted())


def test_static_init_promotes_eagerly():
    class Eager(RpcActor):
        def __init__(self, ctx=None, env=None):
            super().__init__(ctx, env)
            self.hello = rpc.implement(lambda self, call: f"hi {call.ctx}")
            rpc.init(self)

    instance = rpc.static_init(Eager, "ctx-9")
    assert isinstance(instance, Eager)
    assert REGISTRY_ATTR_NAME in vars(Eager)
    assert asyncio.run(instance.hello()) == "hi ctx-9"


def test_static_init_promotes_classes_that_skip_init():
    class Lazy(RpcActor):
        def __init__(self):
            super().__init__()
            self.hello = rpc.implement(lambda self, call: "hi")

    rpc.static_init(Lazy)
    assert set(vars(Lazy)[REGISTRY_ATTR_NAME]) == {"hello"}


def test_bound_views_on_the_instance_are_left_alone():
    class Peer(RpcActor):
        def __init__(self):
            super().__init__()
            self.hello = rpc.implement(lambda self, call: "peer")
            rpc.init(self)

    class Holder(RpcActor):
        def __init__(self, peer):
            super().__init__()
            self.callback = peer.hello
            self.own = rpc.implement(lambda self, call: "own")
            rpc.init(self)

    peer = Peer()
    holder = Holder(peer)
    assert set(vars(Holder)[REGISTRY_ATTR_NAME]) == {"own"}
    assert "callback" not in vars(Holder)
    assert asyncio.run(holder.callback()) == "peer"
    assert asyncio.run(holder.own()) == "own"
