"""Entry points that wire configuration, transport and roles together."""

from __future__ import annotations

import logging
import multiprocessing
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from doccat.catalog.loader import load_catalog
from doccat.classify.summary import summarize
from doccat.config import AppConfig
from doccat.distributed.manager import Orchestrator, RunReport
from doccat.distributed.transport import MANAGER_RANK, LocalTransport
from doccat.distributed.worker import WorkerLoop, classify_documents
from doccat.errors import ClassificationError, DispatchError, DocCatError
from doccat.models import ClassificationResult, WorkerStats
from doccat.output.sink import FileResultSink
from doccat.utils.files import list_documents

LOGGER = logging.getLogger(__name__)

WORKER_LOG_FORMAT = "[%(levelname)s] [worker {rank}] %(message)s"


def configure_worker_logging(rank: int, level: int) -> None:
    logging.basicConfig(level=level, format=WORKER_LOG_FORMAT.format(rank=rank), force=True)


def _local_worker_main(
    rank: int,
    size: int,
    connection: Any,
    barrier: Any,
    output_path: str,
    log_level: int,
) -> None:
    """Body of one local worker process."""
    configure_worker_logging(rank, log_level)
    transport = LocalTransport(rank, size, {MANAGER_RANK: connection}, barrier)
    try:
        WorkerLoop(transport, FileResultSink(Path(output_path))).run()
    except DocCatError as exc:
        LOGGER.error(exc.describe())
        transport.abort()
        sys.exit(1)
    except Exception:
        LOGGER.critical("Worker %d crashed", rank, exc_info=True)
        transport.abort()
        sys.exit(1)
    finally:
        transport.close()


class LocalCluster:
    """Worker processes on this host, started on enter and reaped on exit.

    If the block raises, the barrier is aborted and the workers are
    terminated, so a failed manager never leaves processes behind.
    """

    def __init__(self, workers: int, output_path: Path, *, log_level: Optional[int] = None) -> None:
        if workers < 1:
            raise ValueError("At least one worker is required")
        self.workers = workers
        self.output_path = Path(output_path)
        self.log_level = log_level if log_level is not None else logging.getLogger().getEffectiveLevel()
        self._context = multiprocessing.get_context()
        self._processes: Dict[int, Any] = {}
        self._barrier: Any = None
        self.transport: Optional[LocalTransport] = None

    @property
    def size(self) -> int:
        return self.workers + 1

    def __enter__(self) -> "LocalCluster":
        self._barrier = self._context.Barrier(self.size)
        manager_ends = {}
        for rank in range(1, self.size):
            manager_end, worker_end = self._context.Pipe()
            process = self._context.Process(
                target=_local_worker_main,
                args=(rank, self.size, worker_end, self._barrier, str(self.output_path), self.log_level),
                name=f"doccat-worker-{rank}",
            )
            process.start()
            worker_end.close()
            manager_ends[rank] = manager_end
            self._processes[rank] = process
        self.transport = LocalTransport(MANAGER_RANK, self.size, manager_ends, self._barrier)
        LOGGER.info("Started %d local workers", self.workers)
        return self

    def join(self) -> Dict[int, int]:
        """Wait for every worker and return the exit codes of the failed ones."""
        failed = {}
        for rank, process in self._processes.items():
            process.join()
            if process.exitcode != 0:
                failed[rank] = process.exitcode
        return failed

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self._barrier.abort()
            for process in self._processes.values():
                if process.is_alive():
                    process.terminate()
        for process in self._processes.values():
            process.join()
        if self.transport is not None:
            self.transport.close()


def run_local(config: AppConfig) -> RunReport:
    """Classify with ``config.workers`` worker processes on this host."""
    with LocalCluster(config.workers, config.output_path) as cluster:
        report = Orchestrator(config, cluster.transport, FileResultSink(config.output_path)).run()
        failed = cluster.join()
        if failed:
            ranks = ", ".join(f"{rank} (exit {code})" for rank, code in sorted(failed.items()))
            raise ClassificationError(f"Worker(s) {ranks} did not finish cleanly")
    LOGGER.info("Classified %d documents in %.3fs", report.documents, report.elapsed)
    return report


def run_mpi(config: AppConfig, transport: Any = None) -> RunReport | WorkerStats:
    """Run this process's role in an MPI job.

    Rank 0 returns the manager's report, every other rank its worker stats.
    Any fatal error aborts the whole job.
    """
    if transport is None:
        from doccat.distributed.mpi import MPITransport

        transport = MPITransport()

    try:
        if transport.rank == MANAGER_RANK:
            return Orchestrator(config, transport, FileResultSink(config.output_path)).run()
        return WorkerLoop(transport, FileResultSink(config.output_path)).run()
    except DocCatError as exc:
        LOGGER.error(exc.describe())
        transport.abort()
        raise
    except Exception:
        LOGGER.critical("Rank %d crashed", transport.rank, exc_info=True)
        transport.abort()
        raise


@dataclass(slots=True)
class SequentialReport:
    results: List[ClassificationResult] = field(default_factory=list)
    summary: Dict[str, Optional[str]] = field(default_factory=dict)
    skipped: List[Path] = field(default_factory=list)


def run_sequential(config: AppConfig) -> SequentialReport:
    """Classify every document in this process and pick dominant topics."""
    catalog = load_catalog(config.catalog_path)
    sink = FileResultSink(config.output_path)
    if not config.append:
        try:
            sink.reset()
        except OSError as exc:
            raise ClassificationError(f"Cannot reset {sink.path}: {exc}") from exc

    try:
        documents = list_documents(config.input_dir, config.extensions, recursive=config.recursive)
    except (OSError, ValueError) as exc:
        raise DispatchError(str(exc)) from exc

    stats = WorkerStats(rank=MANAGER_RANK)
    results = classify_documents(documents, catalog, sink, stats)
    return SequentialReport(results=results, summary=summarize(results), skipped=stats.skipped)
