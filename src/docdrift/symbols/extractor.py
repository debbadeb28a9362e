"""Map diff hunks onto top-level declarations to find changed symbols."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor

from docdrift.adapters.base import (
    Declaration,
    FunctionDecl,
    LanguageAdapter,
    SourceParseError,
    is_reportable,
)
from docdrift.adapters.runtime import build_source_adapter
from docdrift.config import SourceConfig
from docdrift.diff.models import CHANGE_ADDED, CHANGE_DELETED, ChangeKind, FileChange
from docdrift.diff.parser import (
    DEFAULT_DIFF_PATTERNS,
    DiffPatterns,
    filter_source_changes,
    parse_diff,
)
from docdrift.symbols.models import ChangedSymbol, ExtractionResult, ExtractionSkip
from docdrift.vcs.base import RevisionNotFoundError, SourceTextProvider

_FileOutcome = tuple[list[ChangedSymbol], ExtractionSkip | None]


class SymbolExtractor:
    """Turn a unified diff into ChangedSymbol records.

    Each file is handled independently: a file whose text cannot be read or
    parsed is skipped and reported in ``ExtractionResult.skips`` while the
    remaining files are still processed.
    """

    def __init__(
        self,
        provider: SourceTextProvider,
        source: SourceConfig,
        *,
        adapter: LanguageAdapter | None = None,
        max_workers: int = 1,
        patterns: DiffPatterns = DEFAULT_DIFF_PATTERNS,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._provider = provider
        self._source = source
        self._adapter = adapter or build_source_adapter(source)
        self._max_workers = max_workers
        self._patterns = patterns

    def extract(
        self,
        diff_text: str,
        should_stop: Callable[[], bool] | None = None,
    ) -> list[ChangedSymbol]:
        """Return changed symbols for every parseable source file in the diff."""
        return list(self.extract_with_diagnostics(diff_text, should_stop).symbols)

    def extract_with_diagnostics(
        self,
        diff_text: str,
        should_stop: Callable[[], bool] | None = None,
    ) -> ExtractionResult:
        """Like extract, also reporting the files that were skipped."""
        changes = parse_diff(diff_text, self._patterns)
        return self.extract_from_changes(filter_source_changes(changes, self._source), should_stop)

    def extract_from_changes(
        self,
        changes: list[FileChange],
        should_stop: Callable[[], bool] | None = None,
    ) -> ExtractionResult:
        """Extract symbols from already parsed and filtered file changes."""
        if self._max_workers == 1 or len(changes) < 2:
            outcomes = self._run_sequential(changes, should_stop)
        else:
            outcomes = self._run_parallel(changes, should_stop)

        symbols: list[ChangedSymbol] = []
        skips: list[ExtractionSkip] = []
        for file_symbols, skip in outcomes:
            symbols.extend(file_symbols)
            if skip is not None:
                skips.append(skip)
        return ExtractionResult(
            symbols=tuple(symbols),
            skips=tuple(skips),
            files_considered=len(outcomes),
        )

    def _run_sequential(
        self,
        changes: list[FileChange],
        should_stop: Callable[[], bool] | None,
    ) -> list[_FileOutcome]:
        outcomes: list[_FileOutcome] = []
        for change in changes:
            if should_stop is not None and should_stop():
                break
            outcomes.append(self._extract_file(change))
        return outcomes

    def _run_parallel(
        self,
        changes: list[FileChange],
        should_stop: Callable[[], bool] | None,
    ) -> list[_FileOutcome]:
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = []
            for change in changes:
                if should_stop is not None and should_stop():
                    break
                futures.append(pool.submit(self._extract_file, change))
            return [future.result() for future in futures]

    def _extract_file(self, change: FileChange) -> _FileOutcome:
        path = change.old_path if change.change_kind == CHANGE_DELETED else change.new_path
        try:
            if change.change_kind == CHANGE_ADDED:
                text = self._provider.read_working_file(path)
                return self._all_symbols(path, text, CHANGE_ADDED), None
            if change.change_kind == CHANGE_DELETED:
                text = self._provider.get_file_at_revision(path, self._source.old_revision)
                return self._all_symbols(path, text, CHANGE_DELETED), None
            return self._modified_symbols(change), None
        except (SourceParseError, RevisionNotFoundError, OSError) as error:
            return [], ExtractionSkip(path=path, reason=str(error))

    def _all_symbols(self, path: str, text: str, change_kind: ChangeKind) -> list[ChangedSymbol]:
        symbols: list[ChangedSymbol] = []
        for declaration in self._adapter.parse(path, text):
            if not is_reportable(declaration):
                continue
            for name in declaration.names:
                symbols.append(
                    _symbol(
                        path,
                        name,
                        declaration,
                        change_kind,
                        old_code=declaration.code if change_kind == CHANGE_DELETED else "",
                        new_code=declaration.code if change_kind == CHANGE_ADDED else "",
                    )
                )
        return symbols

    def _modified_symbols(self, change: FileChange) -> list[ChangedSymbol]:
        text = self._provider.read_working_file(change.new_path)
        declarations = self._adapter.parse(change.new_path, text)
        touched = change.touched_new_lines()
        overlapping = [
            declaration
            for declaration in declarations
            if is_reportable(declaration) and _overlaps(declaration, touched)
        ]
        if not overlapping:
            return []

        old_declarations = self._old_declarations(change.old_path)
        symbols: list[ChangedSymbol] = []
        for declaration in overlapping:
            for name in declaration.names:
                symbols.append(
                    _symbol(
                        change.new_path,
                        name,
                        declaration,
                        change.change_kind,
                        old_code=lookup_old_code(old_declarations, declaration, name),
                        new_code=declaration.code,
                    )
                )
        return symbols

    def _old_declarations(self, path: str) -> list[Declaration]:
        try:
            text = self._provider.get_file_at_revision(path, self._source.old_revision)
            return self._adapter.parse(path, text)
        except (RevisionNotFoundError, SourceParseError, OSError):
            return []


def lookup_old_code(
    old_declarations: Iterable[Declaration],
    declaration: Declaration,
    name: str,
) -> str:
    """Return the pre-change code for name, or an empty string when absent.

    Methods prefer a counterpart with the same receiver type.
    """
    candidates = [
        old
        for old in old_declarations
        if old.kind == declaration.kind and name in old.names and is_reportable(old)
    ]
    if not candidates:
        return ""
    if isinstance(declaration, FunctionDecl):
        for old in candidates:
            if isinstance(old, FunctionDecl) and old.receiver == declaration.receiver:
                return old.code
    return candidates[0].code


def _overlaps(declaration: Declaration, touched: frozenset[int]) -> bool:
    return not touched.isdisjoint(range(declaration.start_line, declaration.end_line + 1))


def _symbol(
    path: str,
    name: str,
    declaration: Declaration,
    change_kind: ChangeKind,
    *,
    old_code: str,
    new_code: str,
) -> ChangedSymbol:
    return ChangedSymbol(
        file=path,
        name=name,
        kind=declaration.kind,
        change_kind=change_kind,
        start_line=declaration.start_line,
        end_line=declaration.end_line,
        old_code=old_code,
        new_code=new_code,
    )
