"""Catalog source parsing.

The catalog source is line oriented::

    Animals@%cat,dog
    Colors@%red,blue

Each line names a topic, then ``@%``, then its comma-separated keywords.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from doccat.errors import CatalogLoadError
from doccat.models import Catalog
from doccat.utils.text import split_tokens

LOGGER = logging.getLogger(__name__)

TOPIC_SEPARATOR = "@%"
KEYWORD_SEPARATOR = ","


def parse_catalog(lines: Iterable[str], *, source: str = "<catalog>") -> Catalog:
    """Build a catalog from source lines, preserving their order."""
    topics: list[tuple[str, list[str]]] = []
    seen: set[str] = set()
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        topic, sep, rest = line.partition(TOPIC_SEPARATOR)
        if not sep:
            raise CatalogLoadError(
                f"{source}:{lineno}: expected 'Topic{TOPIC_SEPARATOR}keyword,...', got {line!r}"
            )
        if not topic:
            raise CatalogLoadError(f"{source}:{lineno}: empty topic name")
        if topic in seen:
            raise CatalogLoadError(f"{source}:{lineno}: duplicate topic {topic!r}")
        seen.add(topic)
        keywords = split_tokens(rest, KEYWORD_SEPARATOR)
        if not keywords:
            LOGGER.warning("Topic %r has no keywords and will always count 0", topic)
        topics.append((topic, keywords))
    return Catalog(topics)


def load_catalog(path: Path) -> Catalog:
    """Read and parse a catalog source file."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            catalog = parse_catalog(handle, source=str(path))
    except FileNotFoundError as exc:
        raise CatalogLoadError(f"Catalog file does not exist: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogLoadError(f"Cannot read catalog {path}: {exc}") from exc

    if not catalog:
        raise CatalogLoadError(f"Catalog {path} defines no topics")
    LOGGER.info(
        "Loaded catalog %s: %d topics, %d keywords", path, len(catalog), catalog.keyword_count
    )
    return catalog
