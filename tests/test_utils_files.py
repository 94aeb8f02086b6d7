"""Tests for file utility functions."""

from __future__ import annotations

import hashlib
from pathlib import Path

from docindex.utils.files import atomic_write_text, compute_sha256


class TestComputeSha256:
    """Test compute_sha256 function."""

    def test_known_content(self, tmp_path: Path) -> None:
        """Should match hashlib for the same bytes."""
        path = tmp_path / "data.js"
        path.write_bytes(b"var lunrData = [];\n")

        assert compute_sha256(path) == hashlib.sha256(b"var lunrData = [];\n").hexdigest()

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.js"
        path.write_bytes(b"")

        assert compute_sha256(path) == hashlib.sha256(b"").hexdigest()

    def test_large_file_chunks(self, tmp_path: Path) -> None:
        """Files larger than one read chunk hash correctly."""
        content = b"x" * ((1 << 20) * 2 + 17)
        path = tmp_path / "big.js"
        path.write_bytes(content)

        assert compute_sha256(path) == hashlib.sha256(content).hexdigest()

    def test_different_content_differs(self, tmp_path: Path) -> None:
        first = tmp_path / "a.js"
        second = tmp_path / "b.js"
        first.write_bytes(b"[]")
        second.write_bytes(b"[ ]")

        assert compute_sha256(first) != compute_sha256(second)


class TestAtomicWriteText:
    """Test atomic_write_text function."""

    def test_creates_parents(self, tmp_path: Path) -> None:
        path = tmp_path / "a" / "b" / "out.js"

        atomic_write_text(path, "[]")

        assert path.read_text(encoding="utf-8") == "[]"

    def test_overwrites(self, tmp_path: Path) -> None:
        path = tmp_path / "out.js"
        path.write_text("old", encoding="utf-8")

        atomic_write_text(path, "new")

        assert path.read_text(encoding="utf-8") == "new"

    def test_no_newline_translation(self, tmp_path: Path) -> None:
        path = tmp_path / "out.js"

        atomic_write_text(path, "line\n")

        assert path.read_bytes() == b"line\n"

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        atomic_write_text(tmp_path / "out.js", "[]")

        assert [p.name for p in tmp_path.iterdir()] == ["out.js"]
