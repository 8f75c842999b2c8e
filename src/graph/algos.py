"""Graph algorithms for archfit."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from utils import join_path, split_path

if TYPE_CHECKING:
    from graph.module_graph import ModuleGraph


def enclosing_module(graph: ModuleGraph, dependency: str) -> str | None:
    """Return the longest module path in the graph that contains ``dependency``.

    ``shop.core.Greeter`` maps to ``shop.core`` when that module exists;
    external dependencies map to None.
    """
    segments = split_path(dependency)
    for size in range(len(segments), 0, -1):
        candidate = join_path(segments[:size])
        if candidate in graph:
            return candidate
    return None


def internal_adjacency(graph: ModuleGraph) -> dict[str, set[str]]:
    """Collapse dependency edges onto the modules of the graph itself."""
    adjacency: dict[str, set[str]] = {path: set() for path in graph}
    for source, dependency in graph.edges():
        target = enclosing_module(graph, dependency)
        if target is not None and target != source:
            adjacency[source].add(target)
    return adjacency


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.index = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []

    def visit(self, node: str) -> None:
        self.indices[node] = self.index
        self.low_link[node] = self.index
        self.index += 1
        self.stack.append(node)
        self.on_stack.add(node)

    def pop_component(self, root: str) -> list[str]:
        scc: list[str] = []
        while True:
            member = self.stack.pop()
            self.on_stack.discard(member)
            scc.append(member)
            if member == root:
                return scc


def _strongconnect(root: str, adjacency: dict[str, set[str]], state: _TarjanState) -> None:
    """Iterative Tarjan visit, so deep import chains cannot hit the recursion limit."""
    state.visit(root)
    work: list[tuple[str, list[str]]] = [(root, sorted(adjacency.get(root, ())))]

    while work:
        node, pending = work[-1]
        if pending:
            neighbor = pending.pop(0)
            if neighbor not in state.indices:
                state.visit(neighbor)
                work.append((neighbor, sorted(adjacency.get(neighbor, ()))))
            elif neighbor in state.on_stack:
                state.low_link[node] = min(state.low_link[node], state.indices[neighbor])
            continue

        work.pop()
        if work:
            parent = work[-1][0]
            state.low_link[parent] = min(state.low_link[parent], state.low_link[node])

        if state.low_link[node] == state.indices[node]:
            scc = state.pop_component(node)
            if len(scc) > 1:
                state.sccs.append(scc)


def find_cycles(graph: ModuleGraph) -> list[list[str]]:
    """Find import cycles between modules of the graph.

    Returns:
        Strongly connected components with more than one module, each sorted,
        and the list itself sorted, so output is deterministic.
    """
    adjacency = internal_adjacency(graph)
    state = _TarjanState()

    for node in sorted(adjacency):
        if node not in state.indices:
            _strongconnect(node, adjacency, state)

    return sorted(sorted(scc) for scc in state.sccs)


def cycle_path(cycle: list[str], adjacency: dict[str, set[str]]) -> list[str]:
    """Return the shortest closed chain through the smallest member of a cycle.

    Breadth-first search stays inside the strongly connected component and
    visits neighbors in sorted order, so the chain is deterministic.

    Raises:
        ValueError: If ``cycle`` does not lead back to its smallest member.
    """
    members = set(cycle)
    start = min(cycle)
    parents: dict[str, str] = {}
    queue = deque([start])

    while queue:
        node = queue.popleft()
        for target in sorted(t for t in adjacency[node] if t in members):
            if target == start:
                chain = [node]
                while chain[-1] != start:
                    chain.append(parents[chain[-1]])
                chain.reverse()
                return [*chain, start]
            if target not in parents:
                parents[target] = node
                queue.append(target)

    msg = f"No cycle returns to {start}"
    raise ValueError(msg)


__all__ = [
    "cycle_path",
    "enclosing_module",
    "find_cycles",
    "internal_adjacency",
]
