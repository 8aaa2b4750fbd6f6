"""
Task ordering: Kahn's topological sort over predecessor edges, with a
deterministic ascending-id tie-break, and the hierarchy-safe order used by
the layout engine (predecessors and parents before dependents).
"""

import heapq
from typing import Callable, List, Tuple

import networkx as nx
from loguru import logger

from shared.graph import TaskGraph, wbs_sort_key
from tasks.models import Task


class CycleError(ValueError):
    """
    Topological sort could not order every task (CycleDetected).
    cycle_ids: tasks on at least one cycle. remaining_ids: every unordered task
    (cycle members plus anything downstream of them). ordered: the acyclic prefix.
    """

    kind = "CycleDetected"

    def __init__(self, cycle_ids: List[str], remaining_ids: List[str], ordered: List[Task]):
        super().__init__("Circular dependency detected in task graph: " + ", ".join(cycle_ids))
        self.cycle_ids = cycle_ids
        self.remaining_ids = remaining_ids
        self.ordered = ordered

    def to_payload(self) -> dict:
        return {"kind": self.kind, "cycleIds": self.cycle_ids, "remainingIds": self.remaining_ids}


def _kahn(G: nx.DiGraph, key: Callable[[str], Tuple]) -> Tuple[List[str], List[str]]:
    """Kahn's algorithm; ready nodes popped smallest key first. Returns (ordered, remaining)."""
    in_degree = dict(G.in_degree())
    heap = [(key(n), n) for n, d in in_degree.items() if d == 0]
    heapq.heapify(heap)
    ordered: List[str] = []
    while heap:
        _, n = heapq.heappop(heap)
        ordered.append(n)
        for s in G.successors(n):
            in_degree[s] -= 1
            if in_degree[s] == 0:
                heapq.heappush(heap, (key(s), s))
    done = set(ordered)
    remaining = sorted(n for n in G.nodes() if n not in done)
    return ordered, remaining


def cycle_members(G: nx.DiGraph) -> List[str]:
    """Nodes that sit on at least one directed cycle."""
    members = set()
    for comp in nx.strongly_connected_components(G):
        if len(comp) > 1:
            members.update(comp)
        else:
            n = next(iter(comp))
            if G.has_edge(n, n):
                members.add(n)
    return sorted(members)


def sort(graph: TaskGraph) -> List[Task]:
    """
    Order tasks so every predecessor precedes its successors.
    Hierarchy edges are not considered. Raises CycleError if any cycle exists.
    """
    ordered, remaining = _kahn(graph.G, key=lambda n: (n,))
    tasks = [graph.get(n) for n in ordered]
    if remaining:
        cycle_ids = cycle_members(graph.G.subgraph(remaining))
        logger.warning("Dependency cycle among {} task(s): {}", len(cycle_ids), ", ".join(cycle_ids))
        raise CycleError(cycle_ids, remaining, tasks)
    return tasks


def hierarchy_order(graph: TaskGraph) -> List[str]:
    """
    Ids ordered so predecessors and parents come first (Kahn over dependency
    plus parent->child edges). Tasks stuck behind a cycle follow in (wbs, id)
    order so every task appears exactly once.
    """
    H = nx.DiGraph(graph.G)
    for tid in graph.ids():
        parent = graph.parent(tid)
        if parent is not None:
            H.add_edge(parent, tid)
    ordered, remaining = _kahn(H, key=lambda n: (n,))
    if remaining:
        tail = sorted(remaining, key=lambda n: wbs_sort_key(graph.get(n)))
        ordered.extend(tail)
    return ordered
