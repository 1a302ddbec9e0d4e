"""Blocking message-passing primitives used by the manager and its workers.

Rank 0 is always the manager, ranks ``1..size-1`` are workers. Every call
blocks until the underlying channel completes it; there are no timeouts.
"""

from __future__ import annotations

import logging
from multiprocessing.connection import Connection
from threading import BrokenBarrierError
from typing import Any, Mapping, Optional, Protocol

LOGGER = logging.getLogger(__name__)

MANAGER_RANK = 0


class TransportError(RuntimeError):
    """A peer went away or a collective operation was aborted."""


class Transport(Protocol):
    rank: int
    size: int

    def broadcast(self, payload: Optional[bytes] = None) -> bytes: ...

    def barrier(self) -> None: ...

    def send(self, obj: Any, dest: int) -> None: ...

    def recv(self, source: int = MANAGER_RANK) -> Any: ...

    def abort(self) -> None: ...


def worker_count(transport: Transport) -> int:
    return transport.size - 1


class LocalTransport:
    """Transport between processes of one host, over ``multiprocessing`` pipes.

    The manager holds one connection per worker rank; each worker holds a
    single connection to the manager. All ``size`` processes share one
    ``multiprocessing.Barrier``.
    """

    def __init__(
        self,
        rank: int,
        size: int,
        connections: Mapping[int, Connection],
        barrier: Any,
    ) -> None:
        self.rank = rank
        self.size = size
        self._connections = dict(connections)
        self._barrier = barrier

    def _connection(self, peer: int) -> Connection:
        try:
            return self._connections[peer]
        except KeyError:
            raise TransportError(f"Rank {self.rank} has no channel to rank {peer}") from None

    def broadcast(self, payload: Optional[bytes] = None) -> bytes:
        if self.rank == MANAGER_RANK:
            if payload is None:
                raise ValueError("The manager must provide the broadcast payload")
            for peer in sorted(self._connections):
                try:
                    self._connections[peer].send_bytes(payload)
                except (OSError, ValueError) as exc:
                    raise TransportError(f"Broadcast to rank {peer} failed: {exc}") from exc
            return bytes(payload)
        try:
            return self._connection(MANAGER_RANK).recv_bytes()
        except (EOFError, OSError) as exc:
            raise TransportError(f"Broadcast receive on rank {self.rank} failed: {exc}") from exc

    def barrier(self) -> None:
        try:
            self._barrier.wait()
        except BrokenBarrierError as exc:
            raise TransportError("Barrier broken: a peer aborted the run") from exc

    def send(self, obj: Any, dest: int) -> None:
        try:
            self._connection(dest).send(obj)
        except (OSError, ValueError) as exc:
            raise TransportError(f"Send from rank {self.rank} to rank {dest} failed: {exc}") from exc

    def recv(self, source: int = MANAGER_RANK) -> Any:
        try:
            return self._connection(source).recv()
        except (EOFError, OSError) as exc:
            raise TransportError(f"Receive on rank {self.rank} from rank {source} failed: {exc}") from exc

    def abort(self) -> None:
        LOGGER.debug("Rank %d aborting the barrier", self.rank)
        self._barrier.abort()

    def close(self) -> None:
        for connection in self._connections.values():
            connection.close()
