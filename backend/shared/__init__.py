"""Shared graph arena for builder, ordering, layout and selection."""

from .graph import TaskGraph, wbs_sort_key

__all__ = ["TaskGraph", "wbs_sort_key"]
