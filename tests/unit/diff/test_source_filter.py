from __future__ import annotations

from pathlib import Path

from docdrift.config import default_config
from docdrift.diff import CHANGE_DELETED, FileChange, filter_source_changes, is_source_path


def test_is_source_path_excludes_tests_generated_and_vendor(tmp_path: Path) -> None:
    source = default_config(tmp_path).source

    assert is_source_path("pkg/shipping.go", source)
    assert is_source_path("main.go", source)
    assert not is_source_path("pkg/shipping_test.go", source)
    assert not is_source_path("api/v1/service.pb.go", source)
    assert not is_source_path("pkg/models_gen.go", source)
    assert not is_source_path("vendor/github.com/x/y.go", source)
    assert not is_source_path("pkg/testdata/case.go", source)
    assert not is_source_path("README.md", source)
    assert not is_source_path("pkg/go.mod", source)


def test_filter_uses_old_path_for_deleted_files(tmp_path: Path) -> None:
    source = default_config(tmp_path).source
    changes = [
        FileChange(old_path="a.go", new_path="a.go", change_kind="modified"),
        FileChange(old_path="docs/a.md", new_path="docs/a.md", change_kind="modified"),
        FileChange(old_path="gone.go", new_path="gone.go", change_kind=CHANGE_DELETED),
        FileChange(old_path="a_test.go", new_path="a_test.go", change_kind="added"),
    ]

    kept = filter_source_changes(changes, source)

    assert [change.old_path for change in kept] == ["a.go", "gone.go"]
