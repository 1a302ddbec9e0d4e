"""Manager role: owns the catalog and the document list."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from doccat.catalog.codec import encode
from doccat.catalog.loader import load_catalog
from doccat.config import AppConfig
from doccat.distributed.partition import partition
from doccat.distributed.transport import Transport, TransportError, worker_count
from doccat.errors import (
    CatalogCodecError,
    CatalogLoadError,
    ClassificationError,
    DispatchError,
    ReplicationError,
)
from doccat.models import Catalog, WorkAssignment
from doccat.output.sink import FileResultSink
from doccat.utils.files import list_documents

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RunReport:
    documents: int = 0
    assignment_sizes: Dict[int, int] = field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def workers(self) -> int:
        return len(self.assignment_sizes)


class Orchestrator:
    """Runs the manager side of a distributed classification.

    Phases run in a fixed order: load and encode the catalog, broadcast it,
    wait on the barrier, then enumerate, partition and dispatch documents.
    Nothing is sent to a worker before the catalog is known to be valid.
    """

    def __init__(
        self,
        config: AppConfig,
        transport: Transport,
        sink: Optional[FileResultSink] = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.sink = sink if sink is not None else FileResultSink(config.output_path)

    def prepare_catalog(self) -> tuple[Catalog, bytes]:
        catalog = load_catalog(self.config.catalog_path)
        try:
            payload = encode(catalog)
        except CatalogCodecError as exc:
            raise CatalogLoadError(str(exc)) from exc
        return catalog, payload

    def replicate(self, payload: bytes) -> None:
        try:
            self.transport.broadcast(payload)
            LOGGER.info(
                "Broadcast catalog (%d bytes) to %d workers",
                len(payload),
                worker_count(self.transport),
            )
            self.transport.barrier()
        except TransportError as exc:
            raise ReplicationError(str(exc), rank=self.transport.rank) from exc
        LOGGER.info("All workers hold the catalog")

    def enumerate_documents(self) -> List[Path]:
        try:
            documents = list_documents(
                self.config.input_dir,
                self.config.extensions,
                recursive=self.config.recursive,
            )
        except (OSError, ValueError) as exc:
            raise DispatchError(str(exc)) from exc
        if not documents:
            LOGGER.warning("No documents found in %s", self.config.input_dir)
        return documents

    def dispatch(self, documents: List[Path]) -> List[WorkAssignment]:
        assignments = partition(documents, worker_count(self.transport))
        for assignment in assignments:
            try:
                self.transport.send(len(assignment), assignment.rank)
                for path in assignment.documents:
                    self.transport.send(str(path), assignment.rank)
            except TransportError as exc:
                raise DispatchError(str(exc), rank=assignment.rank) from exc
            LOGGER.info("Dispatched %d documents to worker %d", len(assignment), assignment.rank)
        return assignments

    def run(self) -> RunReport:
        started = time.perf_counter()
        _, payload = self.prepare_catalog()

        if not self.config.append:
            try:
                self.sink.reset()
            except OSError as exc:
                raise ClassificationError(f"Cannot reset {self.sink.path}: {exc}") from exc

        self.replicate(payload)
        documents = self.enumerate_documents()
        assignments = self.dispatch(documents)

        return RunReport(
            documents=len(documents),
            assignment_sizes={a.rank: len(a) for a in assignments},
            elapsed=time.perf_counter() - started,
        )
