"""Transport over an MPI communicator (``mpi4py``).

Run under ``mpirun -n K``: rank 0 manages, ranks ``1..K-1`` classify.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from doccat.distributed.transport import MANAGER_RANK, TransportError

LOGGER = logging.getLogger(__name__)

ASSIGNMENT_TAG = 0


def comm_world() -> Any:
    """Return ``MPI.COMM_WORLD``, importing mpi4py on first use."""
    from mpi4py import MPI

    return MPI.COMM_WORLD


class MPITransport:
    def __init__(self, comm: Any = None) -> None:
        self.comm = comm if comm is not None else comm_world()
        self.rank = self.comm.Get_rank()
        self.size = self.comm.Get_size()
        if self.size < 2:
            raise TransportError(
                "At least 2 processes are required: 1 manager and 1 worker"
            )

    def broadcast(self, payload: Optional[bytes] = None) -> bytes:
        if self.rank == MANAGER_RANK and payload is None:
            raise ValueError("The manager must provide the broadcast payload")
        data = self.comm.bcast(bytes(payload) if self.rank == MANAGER_RANK else None, root=MANAGER_RANK)
        return bytes(data)

    def barrier(self) -> None:
        self.comm.Barrier()

    def send(self, obj: Any, dest: int) -> None:
        self.comm.send(obj, dest=dest, tag=ASSIGNMENT_TAG)

    def recv(self, source: int = MANAGER_RANK) -> Any:
        return self.comm.recv(source=source, tag=ASSIGNMENT_TAG)

    def abort(self, errorcode: int = 1) -> None:
        LOGGER.critical("Rank %d aborting the MPI job", self.rank)
        self.comm.Abort(errorcode)
