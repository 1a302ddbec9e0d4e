"""Worker role: classify the documents the manager assigned."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from doccat.catalog.codec import decode
from doccat.classify.matcher import classify_text
from doccat.distributed.transport import MANAGER_RANK, Transport, TransportError
from doccat.errors import CatalogCodecError, ClassificationError, DispatchError, ReplicationError
from doccat.models import Catalog, ClassificationResult, WorkerStats
from doccat.output.sink import ResultSink, is_writable_name
from doccat.utils.files import document_name, read_document_text

LOGGER = logging.getLogger(__name__)


def classify_documents(
    paths: Iterable[Path],
    catalog: Catalog,
    sink: ResultSink,
    stats: WorkerStats,
) -> List[ClassificationResult]:
    """Classify each path and append its result to ``sink``.

    An unreadable document, or one whose name would split its result line,
    is logged and skipped. A sink failure is fatal.
    """
    results = []
    for path in paths:
        path = Path(path)
        name = document_name(path)
        if not is_writable_name(name):
            LOGGER.warning("Skipping document with a line break in its name: %r", name)
            stats.record_skipped(path)
            continue

        try:
            text = read_document_text(path)
        except OSError as exc:
            LOGGER.warning("Skipping unreadable document %s: %s", path, exc)
            stats.record_skipped(path)
            continue

        result = classify_text(name, text, catalog)
        try:
            sink.append(result)
        except OSError as exc:
            raise ClassificationError(
                f"Cannot write result for {path}: {exc}", rank=stats.rank
            ) from exc
        stats.record_classified()
        results.append(result)
    return results


class WorkerLoop:
    def __init__(self, transport: Transport, sink: ResultSink) -> None:
        self.transport = transport
        self.sink = sink

    @property
    def rank(self) -> int:
        return self.transport.rank

    def receive_catalog(self) -> Catalog:
        """Decode the broadcast catalog, then wait until every peer has it."""
        try:
            payload = self.transport.broadcast()
        except TransportError as exc:
            raise ReplicationError(str(exc), rank=self.rank) from exc

        try:
            catalog = decode(payload)
        except CatalogCodecError as exc:
            self.transport.abort()
            raise ReplicationError(str(exc), rank=self.rank) from exc

        try:
            self.transport.barrier()
        except TransportError as exc:
            raise ReplicationError(str(exc), rank=self.rank) from exc
        LOGGER.debug("Worker %d decoded %d topics", self.rank, len(catalog))
        return catalog

    def receive_assignment(self) -> List[Path]:
        try:
            size = self.transport.recv(MANAGER_RANK)
            return [Path(self.transport.recv(MANAGER_RANK)) for _ in range(size)]
        except TransportError as exc:
            raise DispatchError(str(exc), rank=self.rank) from exc

    def run(self) -> WorkerStats:
        catalog = self.receive_catalog()
        documents = self.receive_assignment()
        LOGGER.info("Worker %d received %d documents", self.rank, len(documents))

        stats = WorkerStats(rank=self.rank)
        classify_documents(documents, catalog, self.sink, stats)
        LOGGER.info(
            "Worker %d done: %d classified, %d skipped",
            self.rank,
            stats.classified,
            len(stats.skipped),
        )
        return stats
