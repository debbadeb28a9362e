from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from docdrift.adapters import GoDeclarationAdapter, build_source_adapter
from docdrift.config import default_config


def test_go_extension_selects_go_adapter(tmp_path: Path) -> None:
    adapter = build_source_adapter(default_config(tmp_path).source)

    assert isinstance(adapter, GoDeclarationAdapter)
    assert adapter.name == "go"


def test_unknown_extension_raises_lookup_error(tmp_path: Path) -> None:
    source = replace(default_config(tmp_path).source, extension=".rs")

    with pytest.raises(LookupError, match=r"\.rs"):
        build_source_adapter(source)
