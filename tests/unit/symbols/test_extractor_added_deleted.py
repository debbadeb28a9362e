from __future__ import annotations

from pathlib import Path

from docdrift.config import default_config
from docdrift.symbols import SymbolExtractor
from docdrift.vcs import MappingTextProvider

_CHARGE = "package billing\n\nfunc Charge(amount int) error {\n\treturn nil\n}\n"


def _shipping_text() -> str:
    return Path("tests/fixtures/go/shipping.go").read_text(encoding="utf-8")


def _added_diff(path: str) -> str:
    return "\n".join(
        [
            f"diff --git a/{path} b/{path}",
            "new file mode 100644",
            "--- /dev/null",
            f"+++ b/{path}",
            "@@ -0,0 +1,5 @@",
            "+package billing",
        ]
    )


def test_added_file_with_one_function_yields_one_added_symbol(tmp_path: Path) -> None:
    provider = MappingTextProvider(current={"billing/charge.go": _CHARGE})
    extractor = SymbolExtractor(provider, default_config(tmp_path).source)

    symbols = extractor.extract(_added_diff("billing/charge.go"))

    assert len(symbols) == 1
    (symbol,) = symbols
    assert symbol.name == "Charge"
    assert symbol.kind == "function"
    assert symbol.change_kind == "added"
    assert (symbol.start_line, symbol.end_line) == (3, 5)
    assert symbol.new_code == "func Charge(amount int) error {\n\treturn nil\n}"
    assert symbol.old_code == ""


def test_added_file_emits_every_reportable_declaration(tmp_path: Path) -> None:
    provider = MappingTextProvider(current={"shipping/shipping.go": _shipping_text()})
    extractor = SymbolExtractor(provider, default_config(tmp_path).source)

    symbols = extractor.extract(_added_diff("shipping/shipping.go"))

    assert [symbol.name for symbol in symbols] == [
        "FreeShippingThreshold",
        "StandardShippingFee",
        "ErrNegative",
        "Order",
        "CalculateShipping",
        "Total",
    ]
    assert all(symbol.change_kind == "added" and symbol.new_code for symbol in symbols)
    assert symbols[0].new_code == symbols[1].new_code


def test_deleted_file_reads_old_revision_and_fills_old_code(tmp_path: Path) -> None:
    provider = MappingTextProvider(
        revisions={"HEAD": {"shipping/shipping.go": _shipping_text()}},
    )
    extractor = SymbolExtractor(provider, default_config(tmp_path).source)
    diff = "\n".join(
        [
            "diff --git a/shipping/shipping.go b/shipping/shipping.go",
            "deleted file mode 100644",
            "--- a/shipping/shipping.go",
            "+++ /dev/null",
            "@@ -1,38 +0,0 @@",
            "-package shipping",
        ]
    )

    symbols = extractor.extract(diff)

    assert len(symbols) == 6
    assert all(symbol.change_kind == "deleted" for symbol in symbols)
    assert all(symbol.old_code and symbol.new_code == "" for symbol in symbols)
    by_name = {symbol.name: symbol for symbol in symbols}
    assert by_name["Total"].old_code.startswith("func (o *Order) Total()")
    assert by_name["Total"].code() == by_name["Total"].old_code


def test_non_source_files_in_diff_are_ignored(tmp_path: Path) -> None:
    provider = MappingTextProvider(current={"billing/charge_test.go": _CHARGE})
    extractor = SymbolExtractor(provider, default_config(tmp_path).source)
    diff = _added_diff("billing/charge_test.go") + "\n" + _added_diff("README.md")

    result = extractor.extract_with_diagnostics(diff)

    assert result.symbols == ()
    assert result.skips == ()
    assert result.files_considered == 0
