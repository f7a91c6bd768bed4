"""
Graph runner — a nodnod agent per target, built once and reused.

    body_graph = graph(OrderBodyNode)
    node = await body_graph.run().inject(request).inject_as(FeeRateResolver, rates)

Inputs are keyed by type; a run that receives the same type twice is a
programming error. Exceptions raised inside a node's `__compose__` reach the
caller unchanged.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from functools import cache
from typing import Any, cast

from nodnod import EventLoopAgent, Node, Scope, Value

from sellum.logging_config import get_logger

log = get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Graph — compiled target
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Graph[T]:
    target: type[T]
    agent: EventLoopAgent

    def run(self) -> Run[T]:
        return Run(graph=self, inputs=())

    async def __call__(self, *inputs: object) -> T:
        """Run with every input injected under its runtime type."""
        pending = self.run()
        for value in inputs:
            pending = pending.inject(value)
        return await pending


@cache
def _compile(target: type[Any]) -> Graph[Any]:
    nodes: set[type[Node[Any, Any]]] = {cast(type[Node[Any, Any]], target)}
    return Graph(target=target, agent=EventLoopAgent.build(nodes))


def graph[T](target: type[T]) -> Graph[T]:
    """Compile `target` and its dependencies; repeated calls return the same graph."""
    return cast(Graph[T], _compile(target))


# ═══════════════════════════════════════════════════════════════════════════════
# Run — one execution
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Run[T]:
    graph: Graph[T]
    inputs: tuple[tuple[type[Any], Any], ...]

    def inject(self, value: object) -> Run[T]:
        return self.inject_as(cast(type[Any], type(value)), value)

    def inject_as[V](self, typ: type[V], value: V) -> Run[T]:
        """
        Inject under an explicit type, needed when a node asks for a protocol.

            .inject_as(ShippingCostResolver, FlatRateShipping(...))
        """
        if any(known is typ for known, _ in self.inputs):
            raise TypeError(f"{typ.__name__} injected twice into {self.graph.target.__name__}")
        return Run(graph=self.graph, inputs=(*self.inputs, (typ, value)))

    def __await__(self) -> Any:
        return self._execute().__await__()

    async def _execute(self) -> T:
        target = self.graph.target
        started = time.perf_counter()

        scope = Scope(detail=target.__name__)
        async with scope:
            for typ, value in self.inputs:
                scope.push(Value(typ, value))
            await self.graph.agent.run(scope, {})
            resolved = scope.get(target)

        if resolved is None:
            raise LookupError(f"{target.__name__} was not resolved")
        log.debug(f"{target.__name__} resolved in {(time.perf_counter() - started) * 1000:.1f} ms")
        return cast(T, resolved.value)


def run[T](target: type[T]) -> Run[T]:
    return graph(target).run()


async def compose[T](target: type[T], *inputs: object) -> T:
    """
    One-shot run, every input injected under its runtime type.

        await compose(ActivationNode, subject, repo)
    """
    return await graph(target)(*inputs)


__all__ = ("Graph", "Run", "graph", "run", "compose")
