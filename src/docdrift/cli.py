"""Command-line entrypoint: ``docdrift symbols|scan|check|bindings``."""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from docdrift.config import (
    MATCH_MODES,
    CliOverrides,
    DriftConfig,
    apply_cli_overrides,
    load_effective_config,
)
from docdrift.diff.parser import MalformedDiffError
from docdrift.docs.bindings import CodeBinding, extract_bindings, scan_binding_paths
from docdrift.docs.godoc import scan_go_doc_paths
from docdrift.docs.scanner import scan_doc_paths
from docdrift.engine import BindingReport, CheckOptions, DriftEngine, DriftReport
from docdrift.judge.base import SemanticJudge
from docdrift.judge.chat import judge_from_config
from docdrift.logging.audit import JsonlAuditLogger
from docdrift.symbols.extractor import SymbolExtractor
from docdrift.vcs.base import NoRepositoryError
from docdrift.vcs.git import GitCommandError, GitTextProvider

EXIT_OK = 0
EXIT_DRIFT = 1
EXIT_INPUT_ERROR = 2

LISTING_FORMATS = ("json", "text")
REPORT_FORMATS = ("json", "text", "github")


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser with one subcommand per pipeline entrypoint."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--repo-root", required=False, default=".")
    common.add_argument("--data-dir", required=False, default=None)

    listing_output = argparse.ArgumentParser(add_help=False)
    listing_output.add_argument("--format", choices=LISTING_FORMATS, default="json")

    report_output = argparse.ArgumentParser(add_help=False)
    report_output.add_argument("--format", choices=REPORT_FORMATS, default="json")

    diff_source = argparse.ArgumentParser(add_help=False)
    diff_source.add_argument("--base", required=False, default=None)
    diff_source.add_argument("--diff-file", required=False, default=None)
    diff_source.add_argument("--old-revision", required=False, default=None)
    diff_source.add_argument("--max-workers", type=int, required=False, default=None)

    docs = argparse.ArgumentParser(add_help=False)
    docs.add_argument("--docs", action="append", required=False, default=None)
    docs.add_argument("--godoc", action="store_true", default=None)

    judging = argparse.ArgumentParser(add_help=False)
    judging.add_argument("--skip-judge", action="store_true")
    judging.add_argument("--fail-on-drift", action="store_true")
    judging.add_argument("--no-audit", action="store_true")

    parser = argparse.ArgumentParser(prog="docdrift")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser(
        "symbols", parents=[common, listing_output, diff_source], help="list changed symbols"
    )
    commands.add_parser(
        "scan", parents=[common, listing_output, docs], help="list documentation segments"
    )
    check = commands.add_parser(
        "check",
        parents=[common, report_output, diff_source, docs, judging],
        help="match changes against docs",
    )
    check.add_argument("--mode", choices=MATCH_MODES, required=False, default=None)
    check.add_argument("--min-confidence", type=float, required=False, default=None)
    bindings = commands.add_parser(
        "bindings",
        parents=[common, report_output, docs, judging],
        help="check explicitly bound documentation blocks",
    )
    bindings.add_argument("doc_files", nargs="*")
    return parser


def main(
    argv: list[str] | None = None,
    *,
    judge: SemanticJudge | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Entrypoint for the docdrift command line."""
    in_stream = stdin or sys.stdin
    out_stream = stdout or sys.stdout
    err_stream = stderr or sys.stderr
    args = build_arg_parser().parse_args(argv)
    try:
        config = load_effective_config(Path(args.repo_root), _overrides(args))
        if args.command == "scan":
            return _run_scan(config, args, out_stream)
        if args.command == "bindings":
            return _run_bindings(config, args, judge, out_stream)
        provider = GitTextProvider(config.repo_root)
        diff_text = _read_diff(args, provider, in_stream)
        config = _resolve_old_revision(config, args, provider)
        if args.command == "symbols":
            return _run_symbols(config, provider, diff_text, args, out_stream)
        return _run_check(config, provider, diff_text, args, judge, out_stream)
    except (ValueError, OSError, NoRepositoryError, GitCommandError) as error:
        # MalformedDiffError is a ValueError.
        label = "malformed diff" if isinstance(error, MalformedDiffError) else "error"
        err_stream.write(f"docdrift: {label}: {error}\n")
        return EXIT_INPUT_ERROR


def _overrides(args: argparse.Namespace) -> CliOverrides:
    docs = getattr(args, "docs", None)
    return CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        docs_include=tuple(docs) if docs else None,
        godoc=getattr(args, "godoc", None),
        mode=getattr(args, "mode", None),
        min_confidence=getattr(args, "min_confidence", None),
        max_workers=getattr(args, "max_workers", None),
        old_revision=getattr(args, "old_revision", None),
    )


def _read_diff(args: argparse.Namespace, provider: GitTextProvider, stdin: TextIO) -> str:
    if args.diff_file == "-":
        return stdin.read()
    if args.diff_file is not None:
        return Path(args.diff_file).read_text(encoding="utf-8")
    if args.base is not None:
        return provider.get_diff(args.base)
    return provider.get_uncommitted_diff()


def _resolve_old_revision(
    config: DriftConfig, args: argparse.Namespace, provider: GitTextProvider
) -> DriftConfig:
    # A branch diff compares against the fork point, so pre-change text lives there.
    if args.base is None or args.diff_file is not None or args.old_revision is not None:
        return config
    return apply_cli_overrides(config, CliOverrides(old_revision=provider.merge_base(args.base)))


def _run_scan(config: DriftConfig, args: argparse.Namespace, out: TextIO) -> int:
    segments = scan_doc_paths(config.repo_root, config.docs.include, config.docs.exclude_globs)
    if config.docs.godoc:
        segments.extend(scan_go_doc_paths(config.repo_root, config.source))
    if args.format == "json":
        payload = [
            {
                "file": segment.file,
                "heading": segment.heading,
                "level": segment.level,
                "start_line": segment.start_line,
                "end_line": segment.end_line,
            }
            for segment in segments
        ]
        _write_json(out, {"segments": payload})
        return EXIT_OK
    for segment in segments:
        heading = segment.heading or "(preamble)"
        out.write(
            f"{segment.file}:{segment.start_line}-{segment.end_line} "
            f"{'#' * segment.level or '-'} {heading}\n"
        )
    return EXIT_OK


def _run_symbols(
    config: DriftConfig,
    provider: GitTextProvider,
    diff_text: str,
    args: argparse.Namespace,
    out: TextIO,
) -> int:
    extractor = SymbolExtractor(provider, config.source, max_workers=config.extract.max_workers)
    result = extractor.extract_with_diagnostics(diff_text)
    if args.format == "json":
        _write_json(
            out,
            {
                "symbols": [
                    {
                        "file": symbol.file,
                        "name": symbol.name,
                        "kind": symbol.kind,
                        "change_kind": symbol.change_kind,
                        "start_line": symbol.start_line,
                        "end_line": symbol.end_line,
                    }
                    for symbol in result.symbols
                ],
                "skipped_files": [
                    {"path": skip.path, "reason": skip.reason} for skip in result.skips
                ],
            },
        )
        return EXIT_OK
    for symbol in result.symbols:
        out.write(
            f"{symbol.file}:{symbol.start_line}-{symbol.end_line} "
            f"{symbol.change_kind} {symbol.kind} {symbol.name}\n"
        )
    for skip in result.skips:
        out.write(f"skipped {skip.path}: {skip.reason}\n")
    return EXIT_OK


def _run_check(
    config: DriftConfig,
    provider: GitTextProvider,
    diff_text: str,
    args: argparse.Namespace,
    judge: SemanticJudge | None,
    out: TextIO,
) -> int:
    audit = None if args.no_audit else JsonlAuditLogger.for_data_dir(config.data_dir)
    with _active_judge(config, args, judge) as active:
        engine = DriftEngine(config, provider, judge=active, audit_logger=audit)
        report = engine.check_from_diff(diff_text, CheckOptions(use_judge=not args.skip_judge))
    if args.format == "json":
        _write_json(out, report.to_dict())
    elif args.format == "github":
        _write_github_report(out, report)
    else:
        _write_text_report(out, report)
    if args.fail_on_drift and report.has_drift:
        return EXIT_DRIFT
    return EXIT_OK


def _run_bindings(
    config: DriftConfig,
    args: argparse.Namespace,
    judge: SemanticJudge | None,
    out: TextIO,
) -> int:
    bindings = _collect_bindings(config, args.doc_files)
    audit = None if args.no_audit else JsonlAuditLogger.for_data_dir(config.data_dir)
    provider = GitTextProvider(config.repo_root)
    with _active_judge(config, args, judge) as active:
        engine = DriftEngine(config, provider, judge=active, audit_logger=audit)
        report = engine.check_bindings(bindings, CheckOptions(use_judge=not args.skip_judge))
    if args.format == "json":
        _write_json(out, report.to_dict())
    elif args.format == "github":
        _write_github_bindings(out, report)
    else:
        _write_text_bindings(out, report)
    if args.fail_on_drift and report.has_drift:
        return EXIT_DRIFT
    return EXIT_OK


def _collect_bindings(config: DriftConfig, doc_files: list[str]) -> list[CodeBinding]:
    if not doc_files:
        return scan_binding_paths(config.repo_root, config.docs.include, config.docs.exclude_globs)
    bindings: list[CodeBinding] = []
    for doc_file in doc_files:
        path = Path(doc_file)
        if not path.is_absolute():
            path = config.repo_root / path
        text = path.read_text(encoding="utf-8")
        bindings.extend(extract_bindings(text, doc_file))
    return bindings


@contextmanager
def _active_judge(
    config: DriftConfig, args: argparse.Namespace, judge: SemanticJudge | None
) -> Iterator[SemanticJudge | None]:
    if judge is not None or args.skip_judge:
        yield judge
        return
    configured = judge_from_config(config.judge, os.environ)
    try:
        yield configured
    finally:
        if configured is not None:
            configured.close()


def _write_json(out: TextIO, payload: dict[str, object]) -> None:
    out.write(json.dumps(payload, sort_keys=True, indent=2))
    out.write("\n")


def _write_text_report(out: TextIO, report: DriftReport) -> None:
    out.write(
        f"symbols={report.total_symbols} segments={report.total_segments} "
        f"pairs={report.relevant_pairs} inconsistent={report.inconsistent} "
        f"mode={report.mode} elapsed_ms={report.elapsed_ms}\n"
    )
    for result in report.results:
        status = "DRIFT" if result.is_drift else "ok"
        out.write(
            f"[{status}] {result.symbol.file}:{result.symbol.name} -> "
            f"{result.segment.file}:{result.segment.start_line} "
            f"({result.confidence:.2f}) {result.reason}\n"
        )
        if result.suggestion:
            out.write(f"    suggestion: {result.suggestion}\n")
    for skip in report.skipped_files:
        out.write(f"skipped {skip.path}: {skip.reason}\n")


def _write_text_bindings(out: TextIO, report: BindingReport) -> None:
    out.write(
        f"bindings={report.total_bindings} consistent={report.consistent} "
        f"inconsistent={report.inconsistent} errors={report.errors} "
        f"elapsed_ms={report.elapsed_ms}\n"
    )
    for result in report.results:
        status = "DRIFT" if result.is_drift else "ok"
        binding = result.binding
        out.write(
            f"[{status}] {binding.doc_file}:{binding.doc_line} -> "
            f"{binding.code_file}:{binding.symbol} ({result.confidence:.2f}) {result.reason}\n"
        )
        if result.suggestion:
            out.write(f"    suggestion: {result.suggestion}\n")


def _write_github_report(out: TextIO, report: DriftReport) -> None:
    for result in report.results:
        if result.is_drift:
            _write_annotation(
                out,
                result.segment.file,
                result.segment.start_line,
                f"Documentation drift: {result.symbol.name}",
                result.reason,
            )
    _write_summary_annotation(out, report.inconsistent)


def _write_github_bindings(out: TextIO, report: BindingReport) -> None:
    for result in report.results:
        if result.is_drift:
            _write_annotation(
                out,
                result.binding.doc_file,
                result.binding.doc_line,
                f"Documentation drift: {result.binding.symbol}",
                result.reason,
            )
    _write_summary_annotation(out, report.inconsistent)


def _write_annotation(out: TextIO, file: str, line: int, title: str, message: str) -> None:
    out.write(
        f"::error file={_workflow_property(file)},line={line},"
        f"title={_workflow_property(title)}::{_workflow_data(message)}\n"
    )


def _write_summary_annotation(out: TextIO, inconsistent: int) -> None:
    if inconsistent:
        out.write(f"::error::Found {inconsistent} documentation inconsistencies\n")
    else:
        out.write("::notice::Documentation is consistent with the code\n")


def _workflow_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _workflow_property(value: str) -> str:
    return _workflow_data(value).replace(":", "%3A").replace(",", "%2C")


if __name__ == "__main__":
    raise SystemExit(main())
