from __future__ import annotations

import pytest

from docdrift.vcs import MappingTextProvider, RevisionNotFoundError


def test_mapping_provider_serves_current_and_revision_text() -> None:
    provider = MappingTextProvider(
        current={"a.go": "package a\n"},
        revisions={"HEAD": {"a.go": "package old\n"}},
    )

    assert provider.read_working_file("a.go") == "package a\n"
    assert provider.get_file_at_revision("a.go", "HEAD") == "package old\n"


def test_mapping_provider_missing_entries_raise() -> None:
    provider = MappingTextProvider()

    with pytest.raises(FileNotFoundError):
        provider.read_working_file("a.go")
    with pytest.raises(RevisionNotFoundError) as excinfo:
        provider.get_file_at_revision("a.go", "main")

    assert isinstance(excinfo.value, LookupError)
    assert (excinfo.value.path, excinfo.value.revision) == ("a.go", "main")
