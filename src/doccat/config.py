"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Tuple

DEFAULT_EXTENSIONS: Tuple[str, ...] = (".html", ".txt", ".tex")


def normalize_extensions(extensions: Iterable[str]) -> Tuple[str, ...]:
    """Lowercase extensions and make sure each starts with a dot."""
    normalized = []
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = f".{ext}"
        if ext not in normalized:
            normalized.append(ext)
    return tuple(normalized)


@dataclass(slots=True)
class AppConfig:
    catalog_path: Path = Path("catalog.txt")
    input_dir: Path = Path("sample_documents")
    output_path: Path = Path("classification_results.txt")
    workers: int = 2
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    recursive: bool = False
    append: bool = False

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ValueError("At least one worker is required")
        self.catalog_path = Path(self.catalog_path)
        self.input_dir = Path(self.input_dir)
        self.output_path = Path(self.output_path)
        self.extensions = normalize_extensions(self.extensions)

    def resolve(self, base_dir: Path | None = None) -> "AppConfig":
        """Return a copy whose relative paths are anchored on ``base_dir``."""
        if base_dir is None:
            return replace(self)

        def _anchor(path: Path) -> Path:
            return path if path.is_absolute() else base_dir / path

        return replace(
            self,
            catalog_path=_anchor(self.catalog_path),
            input_dir=_anchor(self.input_dir),
            output_path=_anchor(self.output_path),
        )
