"""
Task graph arena: tasks indexed by id, dependency edges in a networkx DiGraph
(predecessor -> successor), hierarchy kept as parent/children id maps.
Shared by the builder (wiring), ordering, layout and selection.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import networkx as nx

from tasks.models import Task


def wbs_sort_key(task: Task) -> Tuple[str, str]:
    """Plain codepoint order on (wbs, id). '1.10' sorts before '1.2' and that is kept."""
    return (task.wbs, task.id)


class TaskGraph:
    """Id-addressed task arena. Never holds object references between tasks."""

    def __init__(self) -> None:
        self._tasks: Dict[str, Task] = {}
        self._parent: Dict[str, Optional[str]] = {}
        self._children: Dict[str, List[str]] = {}
        self.G = nx.DiGraph()

    # ------------------------------------------------------------------
    # Wiring (used by tasks.builder)
    # ------------------------------------------------------------------

    def add_task(self, task: Task) -> None:
        if task.id in self._tasks:
            raise ValueError(f"Duplicate task id: {task.id}")
        self._tasks[task.id] = task
        self._parent[task.id] = None
        self._children[task.id] = []
        self.G.add_node(task.id)

    def add_dependency(self, pred_id: str, succ_id: str) -> bool:
        """Add edge pred -> succ. Returns False if either end is unknown or it is a self-edge."""
        if pred_id == succ_id or pred_id not in self._tasks or succ_id not in self._tasks:
            return False
        self.G.add_edge(pred_id, succ_id)
        return True

    def set_parent(self, child_id: str, parent_id: str) -> None:
        if child_id == parent_id:
            raise ValueError(f"Task {child_id} cannot be its own parent")
        old = self._parent.get(child_id)
        if old is not None:
            self._children[old].remove(child_id)
        self._parent[child_id] = parent_id
        self._children[parent_id].append(child_id)

    def clear(self) -> None:
        """Release every task, edge and hierarchy link."""
        self._tasks.clear()
        self._parent.clear()
        self._children.clear()
        self.G.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def get(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def tasks(self) -> List[Task]:
        """All tasks in load order."""
        return list(self._tasks.values())

    def ids(self) -> List[str]:
        return list(self._tasks.keys())

    def roots(self) -> List[str]:
        """Task ids without a parent, ascending id."""
        return sorted(tid for tid, p in self._parent.items() if p is None)

    def parent(self, task_id: str) -> Optional[str]:
        return self._parent.get(task_id)

    def children(self, task_id: str) -> List[str]:
        return list(self._children.get(task_id, []))

    def predecessors(self, task_id: str) -> List[str]:
        if task_id not in self.G:
            return []
        return list(self.G.predecessors(task_id))

    def successors(self, task_id: str) -> List[str]:
        if task_id not in self.G:
            return []
        return list(self.G.successors(task_id))

    def edges(self) -> List[Tuple[str, str]]:
        """Dependency edges (pred, succ), sorted for stable output."""
        return sorted(self.G.edges())

    def ancestors(self, task_id: str) -> List[str]:
        """Parent chain from immediate parent up to the root."""
        chain = []
        curr = self._parent.get(task_id)
        while curr is not None:
            chain.append(curr)
            curr = self._parent.get(curr)
        return chain

    def descendants(self, task_id: str) -> List[str]:
        """Full subtree below task_id, depth-first in child order."""
        out: List[str] = []
        stack = list(reversed(self._children.get(task_id, [])))
        while stack:
            tid = stack.pop()
            out.append(tid)
            stack.extend(reversed(self._children.get(tid, [])))
        return out

    def critical_ids(self) -> List[str]:
        return sorted(t.id for t in self._tasks.values() if t.is_critical)

    def subgraph(self, ids: Iterable[str]) -> "TaskGraph":
        """
        Induced subgraph over ids. Only edges with both ends inside survive;
        a task whose parent is outside becomes a root.
        """
        keep = {tid for tid in ids if tid in self._tasks}
        sub = TaskGraph()
        for tid, task in self._tasks.items():
            if tid in keep:
                sub.add_task(task)
        for tid in sub.ids():
            parent = self._parent.get(tid)
            if parent in keep:
                sub._parent[tid] = parent
        for tid in self._tasks:
            if tid in keep:
                sub._children[tid] = [c for c in self._children[tid] if c in keep]
        sub.G.add_edges_from((u, v) for u, v in self.G.edges() if u in keep and v in keep)
        return sub

    def to_payload(self) -> Dict:
        """JSON-ready view for the API: tasks, hierarchy, edges, roots."""
        return {
            "tasks": [
                {
                    "id": t.id,
                    "name": t.name,
                    "wbs": t.wbs,
                    "outlineLevel": t.outline_level,
                    "start": t.start.isoformat() if t.start else None,
                    "finish": t.finish.isoformat() if t.finish else None,
                    "duration": t.duration,
                    "isCritical": t.is_critical,
                    "parent": self._parent.get(t.id),
                    "children": list(self._children.get(t.id, [])),
                    "predecessors": self.predecessors(t.id),
                    "successors": self.successors(t.id),
                }
                for t in self._tasks.values()
            ],
            "edges": [{"from": u, "to": v} for u, v in self.edges()],
            "roots": self.roots(),
            "criticalIds": self.critical_ids(),
        }
