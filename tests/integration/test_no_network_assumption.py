from __future__ import annotations

import io
import socket
from pathlib import Path

import pytest

from docdrift.cli import main
from docdrift.judge import ScriptedJudge


def _fixture(relative: str) -> str:
    return Path("tests/fixtures", relative).read_text(encoding="utf-8")


def test_no_network_calls_during_check_workflow(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "shipping").mkdir()
    (tmp_path / "shipping" / "shipping.go").write_text(
        _fixture("go/shipping.go"), encoding="utf-8"
    )
    (tmp_path / "README.md").write_text(_fixture("docs/shipping.md"), encoding="utf-8")
    diff_path = tmp_path / "change.diff"
    diff_path.write_text(_fixture("diffs/const_change.diff"), encoding="utf-8")

    def _blocked_create_connection(*args, **kwargs):  # type: ignore[no-untyped-def]
        raise AssertionError(
            f"Network call attempted: create_connection args={args} kwargs={kwargs}"
        )

    base_socket = socket.socket

    class _BlockedSocket(base_socket):
        def connect(self, address):  # type: ignore[no-untyped-def]
            raise AssertionError(f"Network call attempted: connect address={address}")

    monkeypatch.setattr(socket, "create_connection", _blocked_create_connection)
    monkeypatch.setattr(socket, "socket", _BlockedSocket)

    for command in ("symbols", "scan", "check"):
        argv = [command, "--repo-root", str(tmp_path)]
        if command != "scan":
            argv += ["--diff-file", str(diff_path)]
        assert main(argv, judge=ScriptedJudge(), stdout=io.StringIO()) == 0
