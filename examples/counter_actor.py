"""
Example showing both ways of attaching validated routes to an actor class.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

from pydantic import BaseModel

from saferpc import RpcActor, describe, extend, make_capable


class State(BaseModel):
    count: int = 0
    last_message: str = ""


class Hello(BaseModel):
    message: str
    id: str


class BaseCounter(RpcActor):
    def __init__(self, ctx, env):
        super().__init__(ctx, env)
        self.state = State()

    def set_state(self, state: State):
        self.state = state


def hello(self, call):
    state = self.state
    self.set_state(State(count=state.count + 1, last_message=call.input))
    return {"message": f"Hello, {call.input}!! state: {state.model_dump_json()}", "id": str(call.ctx.id)}


# Class extension: routes are compiled once, BaseCounter stays untouched.
Counter = extend(
    BaseCounter,
    lambda rpc: {
        "hello": rpc.input(str).output(Hello).meta({"description": "Say hello"}).implement(hello),
        "ping": rpc.output(dict[str, str]).implement(lambda self, call: {"message": "pong"}),
    },
)


# Instance promotion: routes are declared as fields and moved to the class
# on first construction.
rpc = make_capable()


class PromotedCounter(BaseCounter):
    def __init__(self, ctx, env):
        super().__init__(ctx, env)
        self.hello = rpc.input(str).output(Hello).implement(hello)
        rpc.init(self)


async def main() -> None:
    ctx = SimpleNamespace(id="counter-1")
    for cls in (Counter, PromotedCounter):
        actor = cls(ctx, env={})
        print(await actor.hello("world"))
        print(describe(actor)["routes"]["hello"]["input_schema"])


if __name__ == "__main__":
    asyncio.run(main())
