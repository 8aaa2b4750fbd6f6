"""
Grid layout for the task dependency diagram.

Produces integer (column, row) cells, no pixels:
1. Columns from dependency depth and hierarchy (hierarchy-safe order)
2. Rows by recursive subtree placement, roots stacked top to bottom
3. Row compaction to a dense 0..N-1 range
Pure function of the graph: a fresh dict per call, tasks are never mutated.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from shared.graph import TaskGraph, wbs_sort_key
from tasks.task_order import hierarchy_order

Position = Tuple[int, int]


# ---------------------------------------------------------------------------
# 1. Column assignment
# ---------------------------------------------------------------------------

def compute_columns(graph: TaskGraph) -> Dict[str, int]:
    """
    root without predecessors: 0
    no resolved predecessor: parent + 1
    otherwise: 1 + max(predecessor columns), never left of parent + 1
    Predecessors not yet placed (cycle remainder) are left out of the max.
    """
    columns: Dict[str, int] = {}
    for tid in hierarchy_order(graph):
        parent = graph.parent(tid)
        pred_cols = [columns[p] for p in graph.predecessors(tid) if p in columns]
        floor = columns.get(parent, 0) + 1 if parent is not None else 0
        if pred_cols:
            columns[tid] = max(floor, max(pred_cols) + 1)
        else:
            columns[tid] = floor
    return columns


# ---------------------------------------------------------------------------
# 2. Row assignment
# ---------------------------------------------------------------------------

class _RowPlacer:
    """Recursive subtree placement. rows holds every task placed so far."""

    def __init__(self, graph: TaskGraph) -> None:
        self.graph = graph
        self.rows: Dict[str, int] = {}

    def _sorted_children(self, task_id: str) -> List[str]:
        kids = self.graph.children(task_id)
        return sorted(kids, key=lambda c: wbs_sort_key(self.graph.get(c)))

    def place_subtree(self, parent_id: str, parent_row: int) -> int:
        """Place parent_id's children below/right of it. Returns max row used by the subtree."""
        self.rows.setdefault(parent_id, parent_row)
        subtree_max = parent_row
        last_used = parent_row

        children = self._sorted_children(parent_id)
        for i, child in enumerate(children):
            if i == 0:
                candidate = parent_row
            else:
                preds = self.graph.predecessors(child)
                prev_sibling = children[i - 1]
                if len(preds) == 1 and preds[0] == prev_sibling:
                    # chain continuation: stay on the sibling's row
                    candidate = self.rows[prev_sibling]
                else:
                    placed = [self.rows[p] for p in preds if p in self.rows]
                    candidate = (min(placed) if placed else last_used) + 1

            if candidate < parent_row:
                candidate = parent_row + 1

            self.rows[child] = candidate
            last_used = max(last_used, candidate)
            subtree_max = max(subtree_max, candidate)

            child_max = self.place_subtree(child, candidate)
            last_used = max(last_used, child_max)
            subtree_max = max(subtree_max, child_max)
        return subtree_max

    def place_roots(self, root_ids: Iterable[str]) -> None:
        global_row = 0
        for root in root_ids:
            self.rows[root] = global_row
            subtree_max = self.place_subtree(root, global_row)
            global_row = subtree_max + 1


# ---------------------------------------------------------------------------
# 3. Compaction
# ---------------------------------------------------------------------------

def dense_rank(values: Iterable[int]) -> Dict[int, int]:
    """Map each distinct value to its index in sorted order."""
    return {v: i for i, v in enumerate(sorted(set(values)))}


def compact_rows(positions: Dict[str, Position]) -> Dict[str, Position]:
    """Remap used rows to 0..N-1, keeping their order."""
    mapping = dense_rank(row for _, row in positions.values())
    return {tid: (col, mapping[row]) for tid, (col, row) in positions.items()}


def find_overlaps(positions: Dict[str, Position]) -> Dict[Position, List[str]]:
    """Cells holding more than one task."""
    cells: Dict[Position, List[str]] = {}
    for tid, pos in positions.items():
        cells.setdefault(pos, []).append(tid)
    return {pos: sorted(ids) for pos, ids in cells.items() if len(ids) > 1}


def compute_full_layout(graph: TaskGraph, root_ids: Optional[Iterable[str]] = None) -> Dict[str, Position]:
    """
    Compute {task_id: (column, row)} for the whole graph.
    root_ids: optionally restrict to these roots' subtrees (non-roots are ignored).
    Ids missing from the result were not laid out.
    Cells are not guaranteed unique: the row rules can put two tasks in one
    cell. Those are logged; use find_overlaps to detect them.
    """
    if len(graph) == 0:
        return {}

    all_roots = graph.roots()
    if root_ids is None:
        roots = all_roots
    else:
        wanted = set(root_ids)
        roots = [r for r in all_roots if r in wanted]

    columns = compute_columns(graph)
    placer = _RowPlacer(graph)
    placer.place_roots(roots)

    positions = {tid: (columns[tid], row) for tid, row in placer.rows.items()}
    positions = compact_rows(positions)

    overlaps = find_overlaps(positions)
    if overlaps:
        logger.warning(
            "Grid overlaps in layout: {}",
            "; ".join(f"({c},{r}): {', '.join(ids)}" for (c, r), ids in sorted(overlaps.items())),
        )
    return positions
