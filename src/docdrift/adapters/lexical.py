"""Deterministic lexical scanning helpers for the declaration parser."""

from __future__ import annotations

from dataclasses import dataclass

_BRACKET_PAIRS = {")": "(", "]": "[", "}": "{"}


@dataclass(slots=True, frozen=True)
class LexicalRules:
    """Configurable lexical markers used while masking non-code text."""

    line_comment_prefixes: tuple[str, ...] = ("//",)
    block_comment_pairs: tuple[tuple[str, str], ...] = (("/*", "*/"),)
    string_delimiters: tuple[str, ...] = ('"', "'")
    raw_string_delimiters: tuple[str, ...] = ("`",)
    escape_char: str = "\\"


GO_LEXICAL_RULES = LexicalRules()


@dataclass(slots=True, frozen=True)
class MaskResult:
    """Masked text plus any construct left open at end of input."""

    text: str
    unterminated: str | None
    unterminated_line: int | None


@dataclass(slots=True, frozen=True)
class BracketScanResult:
    """Result of deterministic bracket scanning."""

    unmatched_closing: int
    unclosed_opening: int
    first_problem_line: int | None

    @property
    def balanced(self) -> bool:
        return self.first_problem_line is None


def mask_source(text: str, rules: LexicalRules | None = None) -> MaskResult:
    """Mask comments and string bodies while preserving line count and offsets."""
    active_rules = rules or GO_LEXICAL_RULES
    line_prefixes = _longest_first(active_rules.line_comment_prefixes)
    block_pairs = tuple(
        sorted(
            ((start, end) for start, end in active_rules.block_comment_pairs if start and end),
            key=lambda pair: len(pair[0]),
            reverse=True,
        )
    )
    string_delimiters = _longest_first(active_rules.string_delimiters)
    raw_delimiters = _longest_first(active_rules.raw_string_delimiters)

    chars = list(text)
    length = len(text)
    index = 0
    line = 1
    state: tuple[str, str] | None = None
    state_line = 1

    while index < length:
        char = text[index]
        if state is None:
            line_marker = _match_any(text, index, line_prefixes)
            if line_marker is not None:
                _blank(chars, index, len(line_marker))
                state = ("line_comment", line_marker)
                state_line = line
                index += len(line_marker)
                continue

            block_marker = _match_block_start(text, index, block_pairs)
            if block_marker is not None:
                start_marker, end_marker = block_marker
                _blank(chars, index, len(start_marker))
                state = ("block_comment", end_marker)
                state_line = line
                index += len(start_marker)
                continue

            raw_marker = _match_any(text, index, raw_delimiters)
            if raw_marker is not None:
                state = ("raw_string", raw_marker)
                state_line = line
                index += len(raw_marker)
                continue

            string_marker = _match_any(text, index, string_delimiters)
            if string_marker is not None:
                state = ("string", string_marker)
                state_line = line
                index += len(string_marker)
                continue

            if char == "\n":
                line += 1
            index += 1
            continue

        mode, marker = state
        if mode == "line_comment":
            if char == "\n":
                state = None
                line += 1
            else:
                chars[index] = " "
            index += 1
            continue

        closes = text.startswith(marker, index)
        if mode == "string" and closes:
            closes = not _is_escaped(text, index, marker, active_rules.escape_char)
        if mode == "string" and char == "\n" and not closes:
            # Interpreted strings cannot span lines; report the open literal.
            break
        if closes:
            if mode == "block_comment":
                _blank(chars, index, len(marker))
            state = None
            index += len(marker)
            continue
        if char == "\n":
            line += 1
        else:
            chars[index] = " "
        index += 1

    unterminated: str | None = None
    unterminated_line: int | None = None
    if state is not None and state[0] != "line_comment":
        unterminated = state[0]
        unterminated_line = state_line
    return MaskResult(
        text="".join(chars),
        unterminated=unterminated,
        unterminated_line=unterminated_line,
    )


def mask_comments_and_strings(text: str, rules: LexicalRules | None = None) -> str:
    """Mask comments and strings; see mask_source for unterminated detection."""
    return mask_source(text, rules).text


def scan_brackets(masked_text: str) -> BracketScanResult:
    """Check ``()``, ``[]`` and ``{}`` pairing, reporting the first problem line."""
    stack: list[tuple[str, int]] = []
    line = 1
    unmatched_closing = 0
    first_problem_line: int | None = None

    for char in masked_text:
        if char in "([{":
            stack.append((char, line))
        elif char in _BRACKET_PAIRS:
            if not stack or stack[-1][0] != _BRACKET_PAIRS[char]:
                unmatched_closing += 1
                if first_problem_line is None:
                    first_problem_line = line
            else:
                stack.pop()
        elif char == "\n":
            line += 1

    if stack and first_problem_line is None:
        first_problem_line = stack[0][1]
    return BracketScanResult(
        unmatched_closing=unmatched_closing,
        unclosed_opening=len(stack),
        first_problem_line=first_problem_line,
    )


def bracket_delta(line: str) -> int:
    """Return net bracket depth change contributed by one masked line."""
    delta = 0
    for char in line:
        if char in "([{":
            delta += 1
        elif char in _BRACKET_PAIRS:
            delta -= 1
    return delta


def _longest_first(markers: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(sorted((marker for marker in markers if marker), key=len, reverse=True))


def _blank(chars: list[str], index: int, count: int) -> None:
    for offset in range(count):
        chars[index + offset] = " "


def _match_any(text: str, index: int, markers: tuple[str, ...]) -> str | None:
    for marker in markers:
        if text.startswith(marker, index):
            return marker
    return None


def _match_block_start(
    text: str,
    index: int,
    pairs: tuple[tuple[str, str], ...],
) -> tuple[str, str] | None:
    for start, end in pairs:
        if text.startswith(start, index):
            return start, end
    return None


def _is_escaped(text: str, index: int, marker: str, escape_char: str) -> bool:
    if len(marker) > 1:
        return False
    backslashes = 0
    cursor = index - 1
    while cursor >= 0 and text[cursor] == escape_char:
        backslashes += 1
        cursor -= 1
    return backslashes % 2 == 1
