"""
Compact re-layout for a visible subset of the task graph (focus / drill-down view).

The induced subgraph is laid out with the grid algorithm (columns and the
hierarchy inside the subset), then rows are recompacted in the order the
full layout established, so the focused diagram stays consistent with it.
"""

from typing import Dict, Iterable, Optional

from shared.graph import TaskGraph

from .grid_layout import Position, compute_full_layout, dense_rank


def compute_subset_layout(
    graph: TaskGraph,
    visible_ids: Iterable[str],
    full_positions: Optional[Dict[str, Position]] = None,
) -> Dict[str, Position]:
    """
    Layout for the induced subgraph over visible_ids.
    full_positions: layout of the whole graph (computed when not given).
    Unknown ids are ignored; an empty selection yields {}.
    """
    visible = [tid for tid in dict.fromkeys(visible_ids) if tid in graph]
    if not visible:
        return {}

    sub = graph.subgraph(visible)
    sub_positions = compute_full_layout(sub)
    if full_positions is None:
        full_positions = compute_full_layout(graph)

    def full_pos(tid: str) -> Position:
        return full_positions.get(tid, sub_positions[tid])

    order = sorted(
        sub_positions,
        key=lambda tid: (full_pos(tid)[1], full_pos(tid)[0], sub_positions[tid][1], tid),
    )

    candidate_rows: Dict[str, int] = {}
    next_row = 0
    for tid in order:
        candidate = next_row
        row = full_pos(tid)[1]
        for pred in sub.predecessors(tid):
            if pred not in candidate_rows:
                continue
            if full_pos(pred)[1] == row:
                candidate = max(candidate, candidate_rows[pred] + 1)
            else:
                candidate = max(candidate, candidate_rows[pred])
        candidate_rows[tid] = candidate
        next_row = candidate + 1

    mapping = dense_rank(candidate_rows.values())
    return {tid: (sub_positions[tid][0], mapping[candidate_rows[tid]]) for tid in order}
