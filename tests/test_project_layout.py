from __future__ import annotations

import tomllib
from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/docdrift/cli.py",
        "src/docdrift/engine.py",
        "src/docdrift/config.py",
        "src/docdrift/diff/__init__.py",
        "src/docdrift/adapters/__init__.py",
        "src/docdrift/symbols/__init__.py",
        "src/docdrift/docs/__init__.py",
        "src/docdrift/docs/bindings.py",
        "src/docdrift/docs/godoc.py",
        "src/docdrift/matching/__init__.py",
        "src/docdrift/judge/__init__.py",
        "src/docdrift/judge/chat.py",
        "src/docdrift/vcs/__init__.py",
        "src/docdrift/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel


def test_pyproject_declares_http_client_and_test_extra() -> None:
    root = Path(__file__).resolve().parents[1]
    with (root / "pyproject.toml").open("rb") as handle:
        project = tomllib.load(handle)["project"]

    assert [dep.split(">")[0] for dep in project["dependencies"]] == ["httpx"]
    assert [dep.split(">")[0] for dep in project["optional-dependencies"]["test"]] == ["pytest"]
    assert project["scripts"] == {"docdrift": "docdrift.cli:main"}
