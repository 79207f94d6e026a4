"""
Task module: lazy asynchronous Either and its concurrency combinators.
"""

from fpcore.task.task_either import TaskEither
from fpcore.task.combinators import (
    parallel,
    collect_errors,
    sequence,
    traverse,
    batch,
    with_timeout,
)

__all__ = [
    "TaskEither",
    "parallel",
    "collect_errors",
    "sequence",
    "traverse",
    "batch",
    "with_timeout",
]
