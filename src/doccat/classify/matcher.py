"""Keyword counting against a catalog."""

from __future__ import annotations

import logging
from typing import Dict

from doccat.models import Catalog, ClassificationResult

LOGGER = logging.getLogger(__name__)


def count_occurrences(text: str, keyword: str) -> int:
    """Count non-overlapping occurrences of ``keyword`` in ``text``.

    Scanning resumes right after the end of each match, so ``"aa"`` occurs
    twice in ``"aaaa"``, not three times.
    """
    if not keyword:
        return 0
    count = 0
    pos = text.find(keyword)
    while pos != -1:
        count += 1
        pos = text.find(keyword, pos + len(keyword))
    return count


def match(text: str, catalog: Catalog) -> Dict[str, int]:
    """Return the keyword hit count of every topic, in catalog order."""
    return {
        topic: sum(count_occurrences(text, keyword) for keyword in keywords)
        for topic, keywords in catalog.items()
    }


def classify_text(document: str, text: str, catalog: Catalog) -> ClassificationResult:
    counts = match(text, catalog)
    LOGGER.debug("Matched %s: %s", document, counts)
    return ClassificationResult(document=document, counts=tuple(counts.items()))
