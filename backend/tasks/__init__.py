"""
Tasks Module
Task model (here), graph builder (tasks.builder), dependency ordering (tasks.task_order).
Only the model is re-exported: shared.graph imports it, and the builder imports shared.graph.
"""

from .models import BuildError, Diagnostic, RawTask, Task

__all__ = ["BuildError", "Diagnostic", "RawTask", "Task"]
