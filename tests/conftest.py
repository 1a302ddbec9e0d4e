"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Optional

import pytest

from doccat.distributed.transport import TransportError

CATALOG_TEXT = "Animals@%cat,dog\nColors@%red,blue\n"

DOCUMENTS = {
    "a_pets.txt": "the cat is red and the dog is red",
    "b_sky.html": "<p>blue sky, blue sea, red sunset</p>",
    "c_zoo.tex": "dog dog dog cat",
    "d_none.txt": "nothing to see here",
    "e_split.txt": "the c\nat sat on the mat",
}


class FakeTransport:
    """In-memory transport that records every call in order."""

    def __init__(
        self,
        rank: int = 0,
        size: int = 3,
        *,
        inbox: Iterable[Any] = (),
        payload: Optional[bytes] = None,
        fail_on: Iterable[str] = (),
    ) -> None:
        self.rank = rank
        self.size = size
        self.inbox: List[Any] = list(inbox)
        self.payload = payload
        self.fail_on = set(fail_on)
        self.events: List[Any] = []
        self.sent: List[tuple[int, Any]] = []
        self.aborted = False

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise TransportError(f"{name} failed")

    def broadcast(self, payload: Optional[bytes] = None) -> bytes:
        self._maybe_fail("broadcast")
        self.events.append("broadcast")
        if self.rank == 0:
            self.payload = payload
        return self.payload

    def barrier(self) -> None:
        self._maybe_fail("barrier")
        self.events.append("barrier")

    def send(self, obj: Any, dest: int) -> None:
        self._maybe_fail("send")
        self.events.append(("send", dest))
        self.sent.append((dest, obj))

    def recv(self, source: int = 0) -> Any:
        self._maybe_fail("recv")
        if not self.inbox:
            raise TransportError("channel closed")
        self.events.append("recv")
        return self.inbox.pop(0)

    def abort(self) -> None:
        self.aborted = True


@pytest.fixture
def fake_transport():
    """Return the FakeTransport class for building scripted peers."""
    return FakeTransport


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    path = tmp_path / "catalog.txt"
    path.write_text(CATALOG_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def documents_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "docs"
    directory.mkdir()
    for name, text in DOCUMENTS.items():
        (directory / name).write_text(text, encoding="utf-8")
    (directory / "ignored.pdf").write_text("cat cat cat", encoding="utf-8")
    return directory


@pytest.fixture
def expected_lines() -> set[str]:
    return {
        "a_pets.txt:\tAnimals;2,\tColors;2,\t\n",
        "b_sky.html:\tAnimals;0,\tColors;3,\t\n",
        "c_zoo.tex:\tAnimals;4,\tColors;0,\t\n",
        "d_none.txt:\tAnimals;0,\tColors;0,\t\n",
        "e_split.txt:\tAnimals;1,\tColors;0,\t\n",
    }
