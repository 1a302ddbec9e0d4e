"""Static, positional split of the document list across workers."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from doccat.models import WorkAssignment


def assignment_sizes(total: int, worker_count: int) -> List[int]:
    """Sizes per worker: the first ``total % worker_count`` get one extra."""
    if worker_count < 1:
        raise ValueError("worker_count must be at least 1")
    base, rem = divmod(total, worker_count)
    return [base + 1 if index < rem else base for index in range(worker_count)]


def partition(documents: Sequence[Path], worker_count: int) -> List[WorkAssignment]:
    """Split ``documents`` into contiguous slices for ranks ``1..worker_count``.

    The split only looks at positions, never at content, and never changes
    once dispatched.
    """
    assignments = []
    start = 0
    for rank, size in enumerate(assignment_sizes(len(documents), worker_count), start=1):
        assignments.append(WorkAssignment(rank=rank, documents=tuple(documents[start : start + size])))
        start += size
    return assignments
