from __future__ import annotations

from pathlib import Path

from docdrift.config import default_config
from docdrift.symbols import SymbolExtractor
from docdrift.vcs import MappingTextProvider

_PATH = "shipping/shipping.go"
_BLOCK = "const (\n\tFreeShippingThreshold = 1000.0\n\tStandardShippingFee   = 50.0\n)"
_OLD_BLOCK = "const (\n\tFreeShippingThreshold = 500.0\n\tStandardShippingFee   = 50.0\n)"


def _shipping_text() -> str:
    return Path("tests/fixtures/go/shipping.go").read_text(encoding="utf-8")


def _extractor(tmp_path: Path, with_history: bool = True) -> SymbolExtractor:
    current = _shipping_text()
    revisions = {}
    if with_history:
        revisions = {"HEAD": {_PATH: current.replace("1000.0", "500.0")}}
    provider = MappingTextProvider(current={_PATH: current}, revisions=revisions)
    return SymbolExtractor(provider, default_config(tmp_path).source)


def _hunk_diff(header: str) -> str:
    return f"diff --git a/{_PATH} b/{_PATH}\n--- a/{_PATH}\n+++ b/{_PATH}\n{header}\n"


def test_const_block_change_emits_every_name_with_whole_block(tmp_path: Path) -> None:
    diff = Path("tests/fixtures/diffs/const_change.diff").read_text(encoding="utf-8")

    symbols = _extractor(tmp_path).extract(diff)

    assert [symbol.name for symbol in symbols] == [
        "FreeShippingThreshold",
        "StandardShippingFee",
    ]
    for symbol in symbols:
        assert symbol.kind == "const"
        assert symbol.change_kind == "modified"
        assert (symbol.start_line, symbol.end_line) == (6, 9)
        assert symbol.new_code == _BLOCK
        assert symbol.old_code == _OLD_BLOCK


def test_hunk_outside_every_declaration_yields_no_symbols(tmp_path: Path) -> None:
    extractor = _extractor(tmp_path)

    for header in ("@@ -12,0 +12,1 @@", "@@ -3 +3 @@", "@@ -5 +5 @@", "@@ -40,0 +40,2 @@"):
        assert extractor.extract(_hunk_diff(header)) == [], header


def test_change_on_closing_line_counts_as_overlap(tmp_path: Path) -> None:
    symbols = _extractor(tmp_path).extract(_hunk_diff("@@ -33 +33 @@"))

    assert [symbol.name for symbol in symbols] == ["CalculateShipping"]


def test_hunk_spanning_several_declarations_emits_each(tmp_path: Path) -> None:
    symbols = _extractor(tmp_path).extract(_hunk_diff("@@ -16,20 +16,20 @@"))

    assert [symbol.name for symbol in symbols] == ["Order", "CalculateShipping", "Total"]


def test_interface_and_alias_changes_are_not_reported(tmp_path: Path) -> None:
    extractor = _extractor(tmp_path)

    assert extractor.extract(_hunk_diff("@@ -20 +20 @@")) == []
    assert extractor.extract(_hunk_diff("@@ -23 +23 @@")) == []


def test_missing_history_leaves_old_code_empty(tmp_path: Path) -> None:
    symbols = _extractor(tmp_path, with_history=False).extract(_hunk_diff("@@ -26 +26 @@"))

    assert [symbol.name for symbol in symbols] == ["CalculateShipping"]
    assert symbols[0].old_code == ""
    assert symbols[0].new_code.startswith("func CalculateShipping(")


def test_parallel_extraction_matches_sequential_as_a_set(tmp_path: Path) -> None:
    current = _shipping_text()
    files = {f"pkg{index}/shipping.go": current for index in range(4)}
    provider = MappingTextProvider(current=files)
    diff = "".join(
        f"diff --git a/{path} b/{path}\n@@ -7 +7 @@\n@@ -36 +36 @@\n" for path in files
    )
    source = default_config(tmp_path).source

    sequential = SymbolExtractor(provider, source).extract(diff)
    parallel = SymbolExtractor(provider, source, max_workers=3).extract(diff)

    assert len(sequential) == 12
    assert {symbol.key() for symbol in parallel} == {symbol.key() for symbol in sequential}
