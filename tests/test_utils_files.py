"""Tests for file utility functions."""

from __future__ import annotations

from pathlib import Path

import pytest

from doccat.utils.files import (
    document_name,
    iter_document_paths,
    list_documents,
    read_document_text,
)


class TestIterDocumentPaths:
    """Test iter_document_paths function."""

    def test_default_extensions(self, tmp_path: Path) -> None:
        """Should find .html, .txt and .tex files only."""
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "b.html").write_text("b")
        (tmp_path / "c.tex").write_text("c")
        (tmp_path / "d.pdf").write_text("d")
        (tmp_path / "e").write_text("e")

        names = [p.name for p in iter_document_paths(tmp_path)]

        assert names == ["a.txt", "b.html", "c.tex"]

    def test_sorted_order(self, tmp_path: Path) -> None:
        """Should yield paths in sorted order."""
        for name in ["z.txt", "m.txt", "a.txt"]:
            (tmp_path / name).write_text(name)

        names = [p.name for p in iter_document_paths(tmp_path)]

        assert names == ["a.txt", "m.txt", "z.txt"]

    def test_case_insensitive_extension(self, tmp_path: Path) -> None:
        """Should match extensions regardless of case."""
        (tmp_path / "upper.TXT").write_text("x")

        paths = list(iter_document_paths(tmp_path, [".txt"]))

        assert [p.name for p in paths] == ["upper.TXT"]

    def test_not_recursive_by_default(self, tmp_path: Path) -> None:
        """Should ignore nested directories unless recursive."""
        subdir = tmp_path / "sub"
        subdir.mkdir()
        (tmp_path / "root.txt").write_text("root")
        (subdir / "nested.txt").write_text("nested")

        flat = {p.name for p in iter_document_paths(tmp_path)}
        deep = {p.name for p in iter_document_paths(tmp_path, recursive=True)}

        assert flat == {"root.txt"}
        assert deep == {"root.txt", "nested.txt"}

    def test_skips_directories_with_matching_suffix(self, tmp_path: Path) -> None:
        (tmp_path / "folder.txt").mkdir()

        assert list(iter_document_paths(tmp_path)) == []

    def test_custom_extensions(self, tmp_path: Path) -> None:
        (tmp_path / "notes.md").write_text("md")
        (tmp_path / "notes.txt").write_text("txt")

        paths = list(iter_document_paths(tmp_path, [".md"]))

        assert [p.name for p in paths] == ["notes.md"]


class TestListDocuments:
    """Test list_documents function."""

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Should raise for a missing input directory."""
        with pytest.raises(FileNotFoundError):
            list_documents(tmp_path / "nope")

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert list_documents(tmp_path) == []

    def test_duplicate_names_in_subdirectories(self, tmp_path: Path) -> None:
        """Two documents with one basename cannot both be keyed in results."""
        for sub in ("x", "y"):
            (tmp_path / sub).mkdir()
            (tmp_path / sub / "r.txt").write_text("text", encoding="utf-8")

        with pytest.raises(ValueError, match="Duplicate document name 'r.txt'"):
            list_documents(tmp_path, recursive=True)

    def test_distinct_names_in_subdirectories(self, tmp_path: Path) -> None:
        (tmp_path / "x").mkdir()
        (tmp_path / "x" / "one.txt").write_text("text", encoding="utf-8")
        (tmp_path / "two.txt").write_text("text", encoding="utf-8")

        names = [p.name for p in list_documents(tmp_path, recursive=True)]

        assert sorted(names) == ["one.txt", "two.txt"]


class TestReadDocumentText:
    """Test read_document_text function."""

    def test_joins_lines_without_separator(self, tmp_path: Path) -> None:
        """Should drop line breaks so words across lines are concatenated."""
        doc = tmp_path / "doc.txt"
        doc.write_bytes(b"the ca\nt is red\r\nend")

        assert read_document_text(doc) == "the cat is redend"

    def test_replaces_undecodable_bytes(self, tmp_path: Path) -> None:
        doc = tmp_path / "bin.txt"
        doc.write_bytes(b"red \xff blue")

        text = read_document_text(doc)

        assert text.startswith("red ")
        assert text.endswith(" blue")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            read_document_text(tmp_path / "missing.txt")


def test_document_name_is_basename() -> None:
    assert document_name(Path("/data/docs/report.html")) == "report.html"
