"""Lexical Go adapter producing top-level declarations with line spans."""

from __future__ import annotations

import re

from docdrift.adapters.base import (
    ConstGroup,
    Declaration,
    FunctionDecl,
    SourceParseError,
    TypeDecl,
    VarGroup,
    declaration_sort_key,
)
from docdrift.adapters.lexical import GO_LEXICAL_RULES, bracket_delta, mask_source, scan_brackets

_IDENT = r"[^\W\d]\w*"
_NAME_LIST = rf"{_IDENT}(?:\s*,\s*{_IDENT})*"

_PACKAGE_RE = re.compile(rf"^\s*package\s+({_IDENT})\b")
_FUNC_RE = re.compile(rf"^\s*func\s*(?:\(([^)]*)\)\s*)?({_IDENT})")
_TYPE_PARAMS = rf"\[\s*{_NAME_LIST}\s+[^\]]+\]"
_TYPE_SPEC = rf"({_IDENT})\s*(?:{_TYPE_PARAMS})?\s*(=)?\s*([A-Za-z_]+)?"
_TYPE_RE = re.compile(rf"^\s*type\s+{_TYPE_SPEC}")
_TYPE_GROUP_RE = re.compile(r"^\s*type\s*\(")
_TYPE_ENTRY_RE = re.compile(rf"^\s*{_TYPE_SPEC}")
_CONST_VAR_SINGLE_RE = re.compile(rf"^\s*(const|var)\s+({_NAME_LIST})")
_CONST_VAR_GROUP_RE = re.compile(r"^\s*(const|var)\s*\(")
_GROUP_ENTRY_RE = re.compile(rf"^\s*({_NAME_LIST})")
_STATEMENT_END_CHARS = frozenset("_\"'`)]}")


class GoDeclarationAdapter:
    """Deterministic lexical declaration parser for Go source files."""

    name = "go"

    def supports_path(self, path: str) -> bool:
        """Return True when path is a Go source file."""
        return path.endswith(".go")

    def parse(self, path: str, text: str) -> list[Declaration]:
        """Extract package-level funcs, methods, types, and const/var groups."""
        masked_result = mask_source(text, GO_LEXICAL_RULES)
        if masked_result.unterminated is not None:
            raise SourceParseError(
                path,
                f"unterminated {masked_result.unterminated.replace('_', ' ')}",
                masked_result.unterminated_line,
            )
        brackets = scan_brackets(masked_result.text)
        if not brackets.balanced:
            raise SourceParseError(path, "unbalanced brackets", brackets.first_problem_line)

        lines = masked_result.text.split("\n")
        source_lines = [line.rstrip("\r") for line in text.split("\n")]
        depth_before = _line_depths(lines)
        if not any(
            depth == 0 and _PACKAGE_RE.match(line) for line, depth in zip(lines, depth_before)
        ):
            raise SourceParseError(path, "missing package clause")

        declarations: list[Declaration] = []
        index = 0
        while index < len(lines):
            line = lines[index]
            if depth_before[index] != 0 or not line.strip():
                index += 1
                continue

            func_match = _FUNC_RE.match(line)
            if func_match is not None:
                receiver, name = func_match.groups()
                end = _statement_end(lines, index)
                declarations.append(
                    FunctionDecl(
                        name=name,
                        receiver=_parse_receiver_type(receiver) if receiver is not None else None,
                        start_line=index + 1,
                        end_line=end + 1,
                        code=_code(source_lines, index, end),
                    )
                )
                index = end + 1
                continue

            if _TYPE_GROUP_RE.match(line):
                group_end = _statement_end(lines, index)
                for entry_start, entry_end in _group_entries(lines, index, group_end):
                    entry = _TYPE_ENTRY_RE.match(lines[entry_start])
                    if entry is None:
                        continue
                    declarations.append(
                        _type_decl(entry, entry_start, entry_end, source_lines)
                    )
                index = group_end + 1
                continue

            type_match = _TYPE_RE.match(line)
            if type_match is not None:
                end = _statement_end(lines, index)
                declarations.append(_type_decl(type_match, index, end, source_lines))
                index = end + 1
                continue

            group_start = _CONST_VAR_GROUP_RE.match(line)
            if group_start is not None:
                group_end = _statement_end(lines, index)
                names: list[str] = []
                for entry_start, _ in _group_entries(lines, index, group_end):
                    entry = _GROUP_ENTRY_RE.match(lines[entry_start])
                    if entry is not None:
                        names.extend(_split_names(entry.group(1)))
                if names:
                    declarations.append(
                        _value_group(group_start.group(1), names, index, group_end, source_lines)
                    )
                index = group_end + 1
                continue

            single = _CONST_VAR_SINGLE_RE.match(line)
            if single is not None:
                end = _statement_end(lines, index)
                names = _split_names(single.group(2))
                if names:
                    declarations.append(
                        _value_group(single.group(1), names, index, end, source_lines)
                    )
                index = end + 1
                continue

            index += 1

        return sorted(declarations, key=declaration_sort_key)


def _line_depths(lines: list[str]) -> list[int]:
    depths: list[int] = []
    depth = 0
    for line in lines:
        depths.append(depth)
        depth += bracket_delta(line)
    return depths


def _ends_statement(masked_line: str) -> bool:
    stripped = masked_line.rstrip()
    if not stripped:
        return False
    if stripped.endswith(("++", "--")):
        return True
    last = stripped[-1]
    return last.isalnum() or last in _STATEMENT_END_CHARS


def _statement_end(lines: list[str], start_index: int, limit: int | None = None) -> int:
    """Return the index of the line where the statement starting at start_index ends."""
    stop = len(lines) if limit is None else limit
    depth = 0
    for index in range(start_index, stop):
        depth += bracket_delta(lines[index])
        if depth < 0:
            return max(start_index, index - 1)
        if depth == 0 and _ends_statement(lines[index]):
            return index
    return max(start_index, stop - 1)


def _group_entries(lines: list[str], group_start: int, group_end: int) -> list[tuple[int, int]]:
    entries: list[tuple[int, int]] = []
    index = group_start + 1
    while index < group_end:
        if not lines[index].strip():
            index += 1
            continue
        end = _statement_end(lines, index, limit=group_end)
        entries.append((index, end))
        index = end + 1
    return entries


def _split_names(raw: str) -> list[str]:
    return [name.strip() for name in raw.split(",") if name.strip() and name.strip() != "_"]


def _code(source_lines: list[str], start_index: int, end_index: int) -> str:
    return "\n".join(source_lines[start_index : end_index + 1])


def _type_decl(
    match: re.Match[str], start_index: int, end_index: int, source_lines: list[str]
) -> TypeDecl:
    name, alias, shape = match.groups()
    if alias is not None:
        resolved_shape = "alias"
    else:
        resolved_shape = shape or "other"
    return TypeDecl(
        name=name,
        shape=resolved_shape,
        start_line=start_index + 1,
        end_line=end_index + 1,
        code=_code(source_lines, start_index, end_index),
    )


def _value_group(
    keyword: str,
    names: list[str],
    start_index: int,
    end_index: int,
    source_lines: list[str],
) -> ConstGroup | VarGroup:
    group_type = ConstGroup if keyword == "const" else VarGroup
    return group_type(
        names=tuple(names),
        start_line=start_index + 1,
        end_line=end_index + 1,
        code=_code(source_lines, start_index, end_index),
    )


def _parse_receiver_type(receiver: str) -> str | None:
    stripped = receiver.split("[", 1)[0].strip()
    if not stripped:
        return None
    type_part = stripped.split()[-1].lstrip("*")
    return type_part or None
