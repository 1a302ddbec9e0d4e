"""Exceptions raised by the classification pipeline.

Every fatal error carries the phase of the run it aborted so the CLI can
report where things went wrong.
"""

from __future__ import annotations


class DocCatError(Exception):
    """Base class for fatal pipeline errors."""

    phase = "run"

    def __init__(self, message: str, *, rank: int | None = None) -> None:
        super().__init__(message)
        self.rank = rank

    def describe(self) -> str:
        where = f" (rank {self.rank})" if self.rank is not None else ""
        return f"Fatal error during {self.phase}{where}: {self}"


class CatalogLoadError(DocCatError):
    phase = "catalog load"


class ReplicationError(DocCatError):
    phase = "replication"


class DispatchError(DocCatError):
    phase = "dispatch"


class ClassificationError(DocCatError):
    phase = "classification"


class CatalogCodecError(ValueError):
    """Catalog cannot be encoded or a wire buffer cannot be decoded."""
