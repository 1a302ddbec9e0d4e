"""Line-oriented result output shared by all workers.

One result per line::

    report.txt:\tAnimals;2,\tColors;2,\t

Several worker processes append to the same file. Each line is written with
a single ``write`` on an ``O_APPEND`` descriptor while holding an exclusive
``flock``, so lines from different writers may come in any order but are never
split or interleaved.
"""

from __future__ import annotations

import fcntl
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Protocol

from doccat.models import ClassificationResult

LOGGER = logging.getLogger(__name__)

NAME_END = ":\t"
COUNT_SEP = ";"
ENTRY_END = ",\t"
LINE_BREAKS = ("\n", "\r")

# Names come from the filesystem and may carry undecodable bytes as surrogates.
NAME_ERRORS = "surrogateescape"


class ResultSink(Protocol):
    def append(self, result: ClassificationResult) -> None: ...


def is_writable_name(name: str) -> bool:
    """True when ``name`` fits on a single result line."""
    return not any(mark in name for mark in LINE_BREAKS)


def display_name(name: str) -> str:
    """Printable form of a name that may hold surrogate-escaped bytes."""
    return name.encode("utf-8", NAME_ERRORS).decode("utf-8", "replace")


def format_result_line(result: ClassificationResult) -> str:
    if not is_writable_name(result.document):
        raise ValueError(f"Document name contains a line break: {result.document!r}")
    entries = "".join(f"{topic}{COUNT_SEP}{count}{ENTRY_END}" for topic, count in result.counts)
    return f"{result.document}{NAME_END}{entries}\n"


def parse_result_line(line: str) -> ClassificationResult:
    """Parse a line produced by :func:`format_result_line`."""
    line = line.rstrip("\n")
    document, sep, rest = line.rpartition(NAME_END)
    if not sep:
        raise ValueError(f"Malformed result line: {line!r}")
    counts = []
    for entry in rest.split(ENTRY_END):
        if not entry:
            continue
        topic, sep, count = entry.rpartition(COUNT_SEP)
        if not sep or not count.isdigit():
            raise ValueError(f"Malformed topic count {entry!r} in line {line!r}")
        counts.append((topic, int(count)))
    return ClassificationResult(document=document, counts=tuple(counts))


def read_results(path: Path) -> List[ClassificationResult]:
    """Read back every result line of an output file."""
    with Path(path).open("r", encoding="utf-8", errors=NAME_ERRORS, newline="\n") as handle:
        return [parse_result_line(line) for line in handle if line.strip()]


class FileResultSink:
    """Appends result lines to a file shared between processes."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def reset(self) -> None:
        """Truncate the destination, creating it if needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("", encoding="utf-8")
        LOGGER.debug("Reset result file %s", self.path)

    @contextmanager
    def _locked_fd(self) -> Iterator[int]:
        fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            try:
                yield fd
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

    def append(self, result: ClassificationResult) -> None:
        data = format_result_line(result).encode("utf-8", NAME_ERRORS)
        with self._locked_fd() as fd:
            written = os.write(fd, data)
            while written < len(data):
                written += os.write(fd, data[written:])


class MemoryResultSink:
    """Collects results in a list; used by single-process runs and tests."""

    def __init__(self) -> None:
        self.results: List[ClassificationResult] = []

    def append(self, result: ClassificationResult) -> None:
        self.results.append(result)

    def lines(self) -> List[str]:
        return [format_result_line(result) for result in self.results]
