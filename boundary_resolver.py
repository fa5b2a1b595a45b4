"""
Recover the function that encloses an anchor by balancing braces.

The anchor is the tail statement of the function, so the first unmatched
`}` after it closes the function body. Walking back from there to the
matching `{` gives the body start, and `function NAME()` must sit right
before it.

Brace counting assumes no unbalanced `{`/`}` inside string, template or
regex literals within the scanned region. `BraceScanner` is the only place
that assumption lives.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from anchor_locator import IDENT, AnchorMatch
from patch_errors import BoundaryNotFoundError, BracketMismatchError

FUNCTION_HEADER = re.compile(rf"function ({IDENT})\(\)\Z")
HEADER_LOOKBEHIND = 100


@dataclass(frozen=True)
class FunctionRecord:
    name: str
    start: int
    end: int
    body_start: int
    code: str


class BraceScanner:
    def __init__(self, open_char: str = "{", close_char: str = "}") -> None:
        self.open_char = open_char
        self.close_char = close_char

    def find_closing(self, source: str, pos: int) -> int:
        """Index of the first close char at depth zero, scanning from pos."""
        depth = 0
        for index in range(pos, len(source)):
            char = source[index]
            if char == self.open_char:
                depth += 1
            elif char == self.close_char:
                if depth == 0:
                    return index
                depth -= 1
        raise BoundaryNotFoundError("Could not find function closing brace after return statement")

    def find_opening(self, source: str, close_pos: int) -> int:
        """Index of the open char that matches the close char at close_pos."""
        count = 1
        pos = close_pos - 1
        while pos >= 0:
            char = source[pos]
            if char == self.close_char:
                count += 1
            elif char == self.open_char:
                count -= 1
                if count == 0:
                    return pos
            pos -= 1
        raise BracketMismatchError("Bracket mismatch: could not find function start")


def match_function_header(source: str, body_start: int) -> re.Match[str]:
    window_start = max(0, body_start - HEADER_LOOKBEHIND)
    match = FUNCTION_HEADER.search(source, window_start, body_start)
    if not match:
        raise BoundaryNotFoundError("Could not find function declaration before opening brace")
    return match


def resolve_function(source: str, anchor: AnchorMatch, scanner: BraceScanner | None = None) -> FunctionRecord:
    scanner = scanner or BraceScanner()
    close_pos = scanner.find_closing(source, anchor.end)
    body_start = scanner.find_opening(source, close_pos)
    header = match_function_header(source, body_start)

    start = header.start()
    end = close_pos + 1
    if not (start < anchor.start and anchor.end <= end):
        raise BoundaryNotFoundError(
            f"Resolved function {header.group(1)} ({start}-{end}) does not contain the anchor"
        )
    code = source[start:end]
    # Always balanced for BraceScanner itself; guards replacement scanners.
    if brace_balance(code, scanner.open_char, scanner.close_char) != 0:
        raise BracketMismatchError(f"Function {header.group(1)} has unbalanced braces")
    return FunctionRecord(
        name=header.group(1),
        start=start,
        end=end,
        body_start=body_start,
        code=code,
    )


def brace_balance(text: str, open_char: str = "{", close_char: str = "}") -> int:
    return text.count(open_char) - text.count(close_char)
