"""Utility helpers for working with document files."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

from doccat.config import DEFAULT_EXTENSIONS
from doccat.utils.text import join_lines


def iter_document_paths(
    directory: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    *,
    recursive: bool = False,
) -> Iterator[Path]:
    """Yield regular files under ``directory`` whose suffix is allowlisted.

    Paths are yielded in sorted order so that every run enumerates, and
    therefore partitions, the same way.
    """
    allowed = {ext.lower() for ext in extensions}
    candidates = directory.rglob("*") if recursive else directory.iterdir()
    for path in sorted(candidates):
        if path.is_file() and path.suffix.lower() in allowed:
            yield path


def list_documents(
    directory: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    *,
    recursive: bool = False,
) -> list[Path]:
    """Enumerate documents, raising ``FileNotFoundError`` for a missing directory.

    Results are keyed by basename, so two documents in different
    subdirectories that share a name raise ``ValueError``.
    """
    if not directory.is_dir():
        raise FileNotFoundError(f"Input directory not found: {directory}")
    documents = list(iter_document_paths(directory, extensions, recursive=recursive))
    seen: dict[str, Path] = {}
    for path in documents:
        name = document_name(path)
        if name in seen:
            raise ValueError(f"Duplicate document name {name!r}: {seen[name]} and {path}")
        seen[name] = path
    return documents


def document_name(path: Path) -> str:
    """Stable name used in result lines: the path's basename."""
    return Path(path).name


def read_document_text(path: Path) -> str:
    """Read a document for matching.

    Line breaks are dropped, so a keyword split across two lines still matches.
    Undecodable bytes are replaced rather than rejected.
    """
    with Path(path).open("r", encoding="utf-8", errors="replace", newline="") as handle:
        return join_lines(handle)
