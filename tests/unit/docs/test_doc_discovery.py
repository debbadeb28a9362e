from __future__ import annotations

from pathlib import Path

from docdrift.docs import discover_doc_files, scan_doc_paths


def _write(root: Path, relative: str, text: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_discovery_expands_globs_dedupes_and_sorts(tmp_path: Path) -> None:
    _write(tmp_path, "README.md", "# Readme\nhello\n")
    _write(tmp_path, "docs/guide.md", "# Guide\ntext\n")
    _write(tmp_path, "docs/api/ref.md", "# Ref\ntext\n")
    _write(tmp_path, "docs/notes.txt", "ignored")
    _write(tmp_path, "vendor/lib/README.md", "# Vendored\n")

    found = discover_doc_files(
        tmp_path,
        ("README.md", "docs/**/*.md", "**/*.md"),
        ("**/vendor/**",),
    )

    assert found == ["README.md", "docs/api/ref.md", "docs/guide.md"]


def test_scan_doc_paths_orders_by_file_then_line(tmp_path: Path) -> None:
    _write(tmp_path, "b.md", "# B1\nx\n# B2\ny\n")
    _write(tmp_path, "a.md", "# A\nz\n")

    segments = scan_doc_paths(tmp_path, ("*.md",))

    assert [(segment.file, segment.heading) for segment in segments] == [
        ("a.md", "A"),
        ("b.md", "B1"),
        ("b.md", "B2"),
    ]


def test_missing_patterns_yield_no_segments(tmp_path: Path) -> None:
    assert scan_doc_paths(tmp_path, ("docs/**/*.md",)) == []
