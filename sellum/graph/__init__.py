"""
Graph — typed computation graphs over nodnod.

    from sellum import graph as G

    @G.node
    class StoreNode:
        def __init__(self, data: Store) -> None:
            self.data = data

        @classmethod
        async def __compose__(cls, subject: ActivationSubject, repo: Repository) -> "StoreNode":
            return cls(await repo.get_store(subject.store_id))

    store = await G.compose(StoreNode, subject, repo)

Independent nodes of one run execute concurrently.
"""

from nodnod import scalar_node as node

from sellum.graph._run import (
    Graph,
    Run,
    graph,
    run,
    compose,
)

__all__ = (
    "node",
    "Graph",
    "Run",
    "graph",
    "run",
    "compose",
)
