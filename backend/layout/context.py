"""
Layout context: one per loaded graph, passed explicitly instead of a global
visualizer. Caches the full layout and tracks the focused task.
"""

from typing import Dict, Iterable, Optional

from selection import collect_visible_chain
from shared.graph import TaskGraph

from .grid_layout import Position, compute_full_layout
from .subset_layout import compute_subset_layout


class LayoutContext:
    def __init__(self, graph: TaskGraph) -> None:
        self.graph = graph
        self.focus_id: Optional[str] = None
        self._full: Optional[Dict[str, Position]] = None

    def invalidate(self) -> None:
        """Call after mutating the graph."""
        self._full = None
        self.focus_id = None

    def full(self) -> Dict[str, Position]:
        if self._full is None:
            self._full = compute_full_layout(self.graph)
        return dict(self._full)

    def subset(self, visible_ids: Iterable[str]) -> Dict[str, Position]:
        return compute_subset_layout(self.graph, visible_ids, full_positions=self.full())

    def focus(self, task_id: str) -> Dict[str, Position]:
        """Subset layout of task_id's visible chain. Unknown id -> {}."""
        self.focus_id = task_id if task_id in self.graph else None
        return self.subset(collect_visible_chain(self.graph, task_id))

    def restore(self) -> Dict[str, Position]:
        self.focus_id = None
        return self.full()

    def select(self, task_id: str) -> Dict[str, Position]:
        """Click toggle: focus a task, or restore the full layout if it is already focused."""
        if task_id == self.focus_id:
            return self.restore()
        return self.focus(task_id)
