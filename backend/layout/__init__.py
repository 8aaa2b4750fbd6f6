"""Layout module - computes grid layouts for task graphs."""

from typing import Any, Dict

from shared.graph import TaskGraph

from .context import LayoutContext
from .grid_layout import Position, compact_rows, compute_full_layout, find_overlaps
from .subset_layout import compute_subset_layout


def build_layout_payload(graph: TaskGraph, positions: Dict[str, Position]) -> Dict[str, Any]:
    """
    Renderer payload: {positions: {id: {column, row}}, edges: [{from, to}], columns, rows}.
    Only edges whose both ends were laid out are listed.
    """
    edges = [
        {"from": u, "to": v}
        for u, v in graph.edges()
        if u in positions and v in positions
    ]
    return {
        "positions": {tid: {"column": col, "row": row} for tid, (col, row) in positions.items()},
        "edges": edges,
        "columns": max((c for c, _ in positions.values()), default=-1) + 1,
        "rows": max((r for _, r in positions.values()), default=-1) + 1,
    }


__all__ = [
    "LayoutContext",
    "Position",
    "build_layout_payload",
    "compact_rows",
    "compute_full_layout",
    "compute_subset_layout",
    "find_overlaps",
]
