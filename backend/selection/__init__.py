"""
Selection - which tasks stay visible when the user focuses on one task.

Visible chain of a focus task:
  - the task and its whole ancestor chain
  - its full descendant subtree
  - one hop of predecessors and successors of the focus task and of every
    descendant, each with its ancestor chain (their own links are not followed)
"""

from typing import Set

from shared.graph import TaskGraph


def _add_with_ancestors(graph: TaskGraph, task_id: str, collected: Set[str]) -> None:
    collected.add(task_id)
    for ancestor in graph.ancestors(task_id):
        if ancestor in collected:
            break
        collected.add(ancestor)


def collect_visible_chain(graph: TaskGraph, focus_id: str) -> Set[str]:
    """Return the ids visible when focus_id is selected. Unknown id -> empty set."""
    if focus_id not in graph:
        return set()

    branch = [focus_id] + graph.descendants(focus_id)
    collected: Set[str] = set(branch)
    _add_with_ancestors(graph, focus_id, collected)

    for tid in branch:
        for linked in graph.predecessors(tid) + graph.successors(tid):
            if linked not in collected:
                _add_with_ancestors(graph, linked, collected)
    return collected
