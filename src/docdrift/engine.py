"""Drift check pipeline: diff -> changed symbols -> doc segments -> matches -> verdicts."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from docdrift.adapters.base import Declaration, FunctionDecl, SourceParseError
from docdrift.adapters.runtime import build_source_adapter
from docdrift.config import MATCH_MODES, DriftConfig
from docdrift.diff.parser import MalformedDiffError
from docdrift.docs.bindings import CodeBinding
from docdrift.docs.godoc import scan_go_doc_paths
from docdrift.docs.models import DocSegment
from docdrift.docs.scanner import scan_doc_paths
from docdrift.judge.base import AnalyzeRequest, JudgeError, SemanticJudge
from docdrift.logging.audit import JsonlAuditLogger, new_run_id
from docdrift.matching.matcher import broad_match, group_by_symbol, quick_match, reduce_results
from docdrift.matching.models import RelevanceResult
from docdrift.symbols.extractor import SymbolExtractor
from docdrift.symbols.models import ChangedSymbol, ExtractionSkip
from docdrift.vcs.base import SourceTextProvider

JUDGE_CONFIRMED_REASON = "judge confirmed relevant"
JUDGE_UNAVAILABLE_REASON = "judge unavailable, broad match score kept"
JUDGE_FAILED_PREFIX = "judge check failed: "
JUDGE_SKIPPED_SUFFIX = "judge skipped"


@dataclass(slots=True, frozen=True)
class CheckOptions:
    """Per-run switches layered over the loaded config."""

    mode: str | None = None
    use_judge: bool = True
    doc_patterns: tuple[str, ...] | None = None
    should_stop: Callable[[], bool] | None = None


@dataclass(slots=True, frozen=True)
class CheckResult:
    """Final verdict for one (symbol, segment) pair."""

    symbol: ChangedSymbol
    segment: DocSegment
    related: bool
    consistent: bool
    confidence: float
    match_confidence: float
    match_reason: str
    reason: str
    suggestion: str = ""

    @property
    def is_drift(self) -> bool:
        """Return True when the segment describes the symbol incorrectly."""
        return self.related and not self.consistent

    def to_dict(self) -> dict[str, object]:
        """Return serializable representation."""
        return {
            "symbol": {
                "file": self.symbol.file,
                "name": self.symbol.name,
                "kind": self.symbol.kind,
                "change_kind": self.symbol.change_kind,
                "start_line": self.symbol.start_line,
                "end_line": self.symbol.end_line,
            },
            "segment": {
                "file": self.segment.file,
                "heading": self.segment.heading,
                "level": self.segment.level,
                "start_line": self.segment.start_line,
                "end_line": self.segment.end_line,
            },
            "related": self.related,
            "consistent": self.consistent,
            "confidence": round(self.confidence, 4),
            "match_confidence": round(self.match_confidence, 4),
            "match_reason": self.match_reason,
            "reason": self.reason,
            "suggestion": self.suggestion,
        }


@dataclass(slots=True, frozen=True)
class DriftReport:
    """Outcome of one drift check run."""

    run_id: str
    mode: str
    total_symbols: int
    total_segments: int
    relevant_pairs: int
    inconsistent: int
    results: tuple[CheckResult, ...]
    skipped_files: tuple[ExtractionSkip, ...]
    elapsed_ms: int

    @property
    def has_drift(self) -> bool:
        """Return True when any result is related but inconsistent."""
        return self.inconsistent > 0

    def to_dict(self) -> dict[str, object]:
        """Return serializable representation."""
        return {
            "run_id": self.run_id,
            "mode": self.mode,
            "total_symbols": self.total_symbols,
            "total_segments": self.total_segments,
            "relevant_pairs": self.relevant_pairs,
            "inconsistent": self.inconsistent,
            "results": [result.to_dict() for result in self.results],
            "skipped_files": [
                {"path": skip.path, "reason": skip.reason} for skip in self.skipped_files
            ],
            "elapsed_ms": self.elapsed_ms,
        }


@dataclass(slots=True, frozen=True)
class BindingResult:
    """Verdict for one explicit binding; ``code_line`` is 0 when the symbol is missing."""

    binding: CodeBinding
    found: bool
    consistent: bool
    confidence: float
    reason: str
    suggestion: str = ""
    code_line: int = 0

    @property
    def is_drift(self) -> bool:
        """Return True when the bound documentation no longer matches."""
        return not self.consistent

    def to_dict(self) -> dict[str, object]:
        """Return serializable representation."""
        return {
            "doc_file": self.binding.doc_file,
            "doc_line": self.binding.doc_line,
            "code_file": self.binding.code_file,
            "kind": self.binding.kind,
            "symbol": self.binding.symbol,
            "found": self.found,
            "code_line": self.code_line,
            "consistent": self.consistent,
            "confidence": round(self.confidence, 4),
            "reason": self.reason,
            "suggestion": self.suggestion,
        }


@dataclass(slots=True, frozen=True)
class BindingReport:
    """Outcome of checking every explicit binding."""

    run_id: str
    total_bindings: int
    consistent: int
    inconsistent: int
    errors: int
    results: tuple[BindingResult, ...]
    elapsed_ms: int

    @property
    def has_drift(self) -> bool:
        return self.inconsistent > 0

    def to_dict(self) -> dict[str, object]:
        """Return serializable representation."""
        return {
            "run_id": self.run_id,
            "total_bindings": self.total_bindings,
            "consistent": self.consistent,
            "inconsistent": self.inconsistent,
            "errors": self.errors,
            "results": [result.to_dict() for result in self.results],
            "elapsed_ms": self.elapsed_ms,
        }


class DriftEngine:
    """Run the drift check pipeline against one repository."""

    def __init__(
        self,
        config: DriftConfig,
        provider: SourceTextProvider,
        judge: SemanticJudge | None = None,
        audit_logger: JsonlAuditLogger | None = None,
    ) -> None:
        self._config = config
        self._provider = provider
        self._judge = judge
        self._audit = audit_logger

    def check_from_diff(
        self,
        diff_text: str,
        options: CheckOptions | None = None,
        segments: list[DocSegment] | None = None,
    ) -> DriftReport:
        """Check documentation against the symbols changed by diff_text.

        ``segments`` replaces documentation discovery when given. Raises
        MalformedDiffError when the diff cannot be scanned at all.
        """
        opts = options or CheckOptions()
        mode = opts.mode or self._config.matching.mode
        if mode not in MATCH_MODES:
            raise ValueError(f"Unknown match mode: {mode}")
        judge = self._judge if opts.use_judge else None
        run_id = new_run_id()
        started = time.perf_counter()

        extractor = SymbolExtractor(
            self._provider,
            self._config.source,
            max_workers=self._config.extract.max_workers,
        )
        try:
            extraction = extractor.extract_with_diagnostics(diff_text, opts.should_stop)
        except MalformedDiffError as error:
            self._log(run_id, "extract", {"reason": error.reason}, ok=False, error_code="bad_diff")
            raise
        symbols = list(extraction.symbols)
        self._log(
            run_id,
            "extract",
            {
                "files_considered": extraction.files_considered,
                "symbols": len(symbols),
                "skipped": len(extraction.skips),
            },
        )
        for skip in extraction.skips:
            self._log(
                run_id,
                "skip",
                {"path": skip.path, "reason": skip.reason},
                ok=False,
                error_code="file_skipped",
            )

        if not symbols:
            return self._finish(run_id, mode, started, 0, [], [], extraction.skips)

        if segments is None:
            segments = scan_doc_paths(
                self._config.repo_root,
                opts.doc_patterns or self._config.docs.include,
                self._config.docs.exclude_globs,
            )
            if self._config.docs.godoc:
                segments = segments + scan_go_doc_paths(
                    self._config.repo_root, self._config.source
                )
        self._log(run_id, "scan", {"segments": len(segments)})

        if mode == "broad":
            candidates = broad_match(symbols, segments)
        else:
            candidates = quick_match(symbols, segments)
        candidates = reduce_results(candidates, self._config.matching.reduce_policy)
        candidates = [
            candidate
            for candidate in candidates
            if candidate.confidence >= self._config.matching.min_confidence
        ]
        self._log(run_id, "match", {"mode": mode, "candidates": len(candidates)})

        if judge is not None and mode == "broad":
            candidates = self._confirm_relevance(run_id, judge, candidates)

        results = [self._check_pair(run_id, judge, candidate) for candidate in candidates]
        return self._finish(
            run_id, mode, started, len(symbols), segments, results, extraction.skips
        )

    def check_bindings(
        self,
        bindings: list[CodeBinding],
        options: CheckOptions | None = None,
    ) -> BindingReport:
        """Check each bound documentation block against its named declaration.

        A binding whose file cannot be read or parsed, or whose judge call
        fails, counts as an error and produces no result.
        """
        opts = options or CheckOptions()
        judge = self._judge if opts.use_judge else None
        run_id = new_run_id()
        started = time.perf_counter()
        adapter = build_source_adapter(self._config.source)
        results: list[BindingResult] = []
        errors = 0

        for binding in bindings:
            if opts.should_stop is not None and opts.should_stop():
                break
            try:
                text = self._provider.read_working_file(binding.code_file)
                declaration = _find_bound_declaration(
                    adapter.parse(binding.code_file, text), binding
                )
                results.append(self._check_binding(judge, binding, declaration))
            except (OSError, SourceParseError, JudgeError) as error:
                errors += 1
                self._log(
                    run_id,
                    "binding",
                    {
                        "doc_file": binding.doc_file,
                        "code_file": binding.code_file,
                        "symbol": binding.symbol,
                        "reason": str(error),
                    },
                    ok=False,
                    error_code="binding_failed",
                )

        consistent = sum(1 for result in results if result.consistent)
        report = BindingReport(
            run_id=run_id,
            total_bindings=len(bindings),
            consistent=consistent,
            inconsistent=len(results) - consistent,
            errors=errors,
            results=tuple(results),
            elapsed_ms=int((time.perf_counter() - started) * 1000),
        )
        self._log(
            run_id,
            "bindings",
            {
                "bindings": report.total_bindings,
                "consistent": report.consistent,
                "inconsistent": report.inconsistent,
                "errors": report.errors,
                "elapsed_ms": report.elapsed_ms,
            },
        )
        return report

    def _check_binding(
        self,
        judge: SemanticJudge | None,
        binding: CodeBinding,
        declaration: Declaration | None,
    ) -> BindingResult:
        if declaration is None:
            return BindingResult(
                binding=binding,
                found=False,
                consistent=False,
                confidence=1.0,
                reason=f"symbol {binding.symbol} not found in file {binding.code_file}",
            )
        if judge is None:
            return BindingResult(
                binding=binding,
                found=True,
                consistent=True,
                confidence=1.0,
                reason=JUDGE_SKIPPED_SUFFIX,
                code_line=declaration.start_line,
            )
        verdict = judge.analyze(
            AnalyzeRequest(
                doc_content=binding.content,
                code_content=declaration.code,
                symbol_name=binding.symbol,
                file_path=binding.code_file,
                symbol_kind=binding.kind,
                doc_file=binding.doc_file,
            )
        )
        return BindingResult(
            binding=binding,
            found=True,
            consistent=verdict.consistent,
            confidence=verdict.confidence,
            reason=verdict.reason,
            suggestion=verdict.suggestion,
            code_line=declaration.start_line,
        )

    def _confirm_relevance(
        self,
        run_id: str,
        judge: SemanticJudge,
        candidates: list[RelevanceResult],
    ) -> list[RelevanceResult]:
        confirmed: list[RelevanceResult] = []
        for group in group_by_symbol(candidates).values():
            symbol = group[0].symbol
            try:
                indices = judge.check_relevance_batch(symbol, [item.segment for item in group])
            except JudgeError as error:
                self._log(
                    run_id,
                    "judge",
                    {"symbol": symbol.name, "candidates": len(group), "reason": str(error)},
                    ok=False,
                    error_code="judge_unavailable",
                )
                confirmed.extend(_with_note(item, JUDGE_UNAVAILABLE_REASON) for item in group)
                continue
            kept = [index for index in indices if 0 <= index < len(group)]
            self._log(
                run_id,
                "judge",
                {"symbol": symbol.name, "candidates": len(group), "relevant": len(kept)},
            )
            confirmed.extend(_with_note(group[index], JUDGE_CONFIRMED_REASON) for index in kept)
        return confirmed

    def _check_pair(
        self,
        run_id: str,
        judge: SemanticJudge | None,
        candidate: RelevanceResult,
    ) -> CheckResult:
        if judge is None:
            return CheckResult(
                symbol=candidate.symbol,
                segment=candidate.segment,
                related=True,
                consistent=True,
                confidence=candidate.confidence,
                match_confidence=candidate.confidence,
                match_reason=candidate.reason,
                reason=f"{candidate.reason}; {JUDGE_SKIPPED_SUFFIX}",
            )
        try:
            verdict = judge.analyze(AnalyzeRequest.from_pair(candidate.symbol, candidate.segment))
        except JudgeError as error:
            self._log(
                run_id,
                "check",
                {"symbol": candidate.symbol.name, "file": candidate.segment.file},
                ok=False,
                error_code="judge_failed",
            )
            return CheckResult(
                symbol=candidate.symbol,
                segment=candidate.segment,
                related=True,
                consistent=True,
                confidence=candidate.confidence,
                match_confidence=candidate.confidence,
                match_reason=candidate.reason,
                reason=f"{JUDGE_FAILED_PREFIX}{error}",
            )
        return CheckResult(
            symbol=candidate.symbol,
            segment=candidate.segment,
            related=verdict.related,
            consistent=verdict.consistent,
            confidence=verdict.confidence,
            match_confidence=candidate.confidence,
            match_reason=candidate.reason,
            reason=verdict.reason,
            suggestion=verdict.suggestion,
        )

    def _finish(
        self,
        run_id: str,
        mode: str,
        started: float,
        total_symbols: int,
        segments: list[DocSegment],
        results: list[CheckResult],
        skips: tuple[ExtractionSkip, ...],
    ) -> DriftReport:
        report = DriftReport(
            run_id=run_id,
            mode=mode,
            total_symbols=total_symbols,
            total_segments=len(segments),
            relevant_pairs=len(results),
            inconsistent=sum(1 for result in results if result.is_drift),
            results=tuple(results),
            skipped_files=skips,
            elapsed_ms=int((time.perf_counter() - started) * 1000),
        )
        self._log(
            run_id,
            "check",
            {
                "mode": mode,
                "symbols": report.total_symbols,
                "segments": report.total_segments,
                "relevant_pairs": report.relevant_pairs,
                "inconsistent": report.inconsistent,
                "elapsed_ms": report.elapsed_ms,
            },
        )
        return report

    def _log(
        self,
        run_id: str,
        stage: str,
        metadata: dict[str, object],
        *,
        ok: bool = True,
        error_code: str | None = None,
    ) -> None:
        if self._audit is None:
            return
        self._audit.record(run_id, stage, metadata, ok=ok, error_code=error_code)


def _with_note(result: RelevanceResult, note: str) -> RelevanceResult:
    return RelevanceResult(
        symbol=result.symbol,
        segment=result.segment,
        confidence=result.confidence,
        reason=f"{result.reason}; {note}",
    )


def _find_bound_declaration(
    declarations: list[Declaration], binding: CodeBinding
) -> Declaration | None:
    matches = [
        declaration
        for declaration in declarations
        if declaration.kind == binding.kind and binding.symbol in declaration.names
    ]
    # A plain function wins over a method of the same name.
    for declaration in matches:
        if not isinstance(declaration, FunctionDecl) or declaration.receiver is None:
            return declaration
    return matches[0] if matches else None
