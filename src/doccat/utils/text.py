"""Text helpers shared by the catalog loader and document reader."""

from __future__ import annotations

from typing import Iterable, List


def join_lines(lines: Iterable[str]) -> str:
    """Concatenate lines with their line terminators removed."""
    return "".join(line.rstrip("\r\n") for line in lines)


def split_tokens(text: str, delimiter: str) -> List[str]:
    """Split on ``delimiter`` and drop empty tokens."""
    return [token for token in text.split(delimiter) if token]
