from __future__ import annotations

import pytest

from docdrift.diff import (
    CHANGE_ADDED,
    CHANGE_DELETED,
    CHANGE_MODIFIED,
    Hunk,
    MalformedDiffError,
    parse_diff,
)


def test_headers_only_yield_one_change_each_with_no_hunks() -> None:
    paths = ["a.go", "pkg/b.go", "docs/c.md", "cmd/d.go"]
    diff = "\n".join(f"diff --git a/{path} b/{path}" for path in paths)

    changes = parse_diff(diff)

    assert len(changes) == len(paths)
    assert [change.new_path for change in changes] == paths
    assert all(change.hunks == () for change in changes)
    assert all(change.change_kind == CHANGE_MODIFIED for change in changes)


def test_text_without_file_headers_yields_empty_result() -> None:
    assert parse_diff("") == []
    assert parse_diff("just some text\n+not a diff line\n") == []


def test_new_and_deleted_file_modes_override_default_kind() -> None:
    diff = "\n".join(
        [
            "diff --git a/new.go b/new.go",
            "new file mode 100644",
            "--- /dev/null",
            "+++ b/new.go",
            "@@ -0,0 +1,3 @@",
            "+package x",
            "+",
            "+func A() {}",
            "diff --git a/old.go b/old.go",
            "deleted file mode 100644",
            "--- a/old.go",
            "+++ /dev/null",
            "@@ -1,2 +0,0 @@",
            "-package x",
            "-var B = 1",
        ]
    )

    added, deleted = parse_diff(diff)

    assert added.change_kind == CHANGE_ADDED
    assert added.hunks == (Hunk(old_start=0, old_count=0, new_start=1, new_count=3),)
    assert added.added_lines == ("package x", "", "func A() {}")
    assert added.removed_lines == ()
    assert deleted.change_kind == CHANGE_DELETED
    assert deleted.removed_lines == ("package x", "var B = 1")
    assert deleted.touched_new_lines() == frozenset()


def test_hunk_header_without_counts_defaults_to_one() -> None:
    diff = "diff --git a/x.go b/x.go\n@@ -7 +9 @@ const (\n-a\n+b\n"

    (change,) = parse_diff(diff)

    assert change.hunks == (Hunk(old_start=7, old_count=1, new_start=9, new_count=1),)
    assert change.touched_new_lines() == frozenset({9})


def test_hunks_are_ordered_by_new_start() -> None:
    diff = "\n".join(
        [
            "diff --git a/x.go b/x.go",
            "@@ -40,2 +42,3 @@",
            "@@ -3,1 +3,2 @@",
            "@@ -20,0 +21,1 @@",
        ]
    )

    (change,) = parse_diff(diff)

    assert [hunk.new_start for hunk in change.hunks] == [3, 21, 42]
    assert change.touched_new_lines() == frozenset({3, 4, 21, 42, 43, 44})


def test_rename_is_modified_with_differing_paths() -> None:
    diff = "\n".join(
        [
            "diff --git a/old/name.go b/new/name.go",
            "similarity index 90%",
            "rename from old/name.go",
            "rename to new/name.go",
        ]
    )

    (change,) = parse_diff(diff)

    assert change.change_kind == CHANGE_MODIFIED
    assert change.is_rename
    assert change.old_path == "old/name.go"
    assert change.new_path == "new/name.go"


def test_file_marker_lines_are_not_captured_as_content() -> None:
    diff = "diff --git a/x.go b/x.go\n--- a/x.go\n+++ b/x.go\n@@ -1 +1 @@\n-old\n+new\n"

    (change,) = parse_diff(diff)

    assert change.added_lines == ("new",)
    assert change.removed_lines == ("old",)


def test_bytes_input_is_decoded_as_utf8() -> None:
    (change,) = parse_diff("diff --git a/é.go b/é.go\n".encode())

    assert change.new_path == "é.go"


@pytest.mark.parametrize(
    "payload",
    [b"diff --git a/x b/x\n\xff\xfe", "diff --git a/x b/x\n\x00", 42],
)
def test_unscannable_input_raises_malformed_diff(payload: object) -> None:
    with pytest.raises(MalformedDiffError) as excinfo:
        parse_diff(payload)  # type: ignore[arg-type]

    assert excinfo.value.reason


def test_only_newlines_separate_diff_lines() -> None:
    diff = (
        "diff --git a/x.go b/x.go\r\n"
        "@@ -1 +1 @@\r\n"
        "+note\u2028diff --git a/y.go b/y.go\x0c\r\n"
    )

    (change,) = parse_diff(diff)

    assert change.new_path == "x.go"
    assert change.added_lines == ("note\u2028diff --git a/y.go b/y.go\x0c",)
