"""Core doccat data models."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple


class Catalog(Mapping[str, Tuple[str, ...]]):
    """Immutable, ordered mapping of topic name to its keywords.

    Iteration follows definition order. Two catalogs are equal only when they
    hold the same topics, keywords and order.
    """

    __slots__ = ("_topics",)

    def __init__(self, topics: Iterable[tuple[str, Iterable[str]]] = ()) -> None:
        entries: Dict[str, Tuple[str, ...]] = {}
        for name, keywords in topics:
            if not name:
                raise ValueError("Topic name must not be empty")
            if name in entries:
                raise ValueError(f"Duplicate topic: {name!r}")
            keywords = tuple(keywords)
            if any(not keyword for keyword in keywords):
                raise ValueError(f"Topic {name!r} has an empty keyword")
            entries[name] = keywords
        self._topics = entries

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Iterable[str]]) -> "Catalog":
        return cls(mapping.items())

    def __getitem__(self, topic: str) -> Tuple[str, ...]:
        return self._topics[topic]

    def __iter__(self) -> Iterator[str]:
        return iter(self._topics)

    def __len__(self) -> int:
        return len(self._topics)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Catalog):
            return NotImplemented
        return list(self._topics.items()) == list(other._topics.items())

    def __hash__(self) -> int:
        return hash(tuple(self._topics.items()))

    def __repr__(self) -> str:
        return f"Catalog({list(self._topics.items())!r})"

    @property
    def topics(self) -> list[str]:
        return list(self._topics)

    @property
    def keyword_count(self) -> int:
        return sum(len(keywords) for keywords in self._topics.values())


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Keyword counts of one document, one entry per catalog topic."""

    document: str
    counts: Tuple[Tuple[str, int], ...]

    def as_dict(self) -> Dict[str, int]:
        return dict(self.counts)

    @property
    def total(self) -> int:
        return sum(count for _, count in self.counts)


@dataclass(frozen=True, slots=True)
class WorkAssignment:
    """Contiguous slice of documents owned by one worker rank."""

    rank: int
    documents: Tuple[Path, ...]

    def __len__(self) -> int:
        return len(self.documents)


@dataclass(slots=True)
class WorkerStats:
    rank: int
    classified: int = 0
    skipped: list[Path] = field(default_factory=list)

    def record_classified(self) -> None:
        self.classified += 1

    def record_skipped(self, path: Path) -> None:
        self.skipped.append(path)
