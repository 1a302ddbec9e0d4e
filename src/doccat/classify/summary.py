"""Dominant topic selection.

Topics are scanned in catalog order with a running maximum that starts at 0.
A topic replaces the current choice only when its count is strictly greater,
so on a tie the topic that reached the maximum first wins. A document with
no hits at all has no dominant topic.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence, Tuple

from doccat.models import ClassificationResult


def dominant_topic(counts: Sequence[Tuple[str, int]]) -> Optional[str]:
    best_topic: Optional[str] = None
    best_count = 0
    for topic, count in counts:
        if count > best_count:
            best_topic, best_count = topic, count
    return best_topic


def summarize(results: Iterable[ClassificationResult]) -> Dict[str, Optional[str]]:
    """Map each document name to its dominant topic."""
    return {result.document: dominant_topic(result.counts) for result in results}
