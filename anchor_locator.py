"""
Find the LSP manager factory by the object it returns.

Minified identifiers change from build to build, but the property names of
the returned object and their order stay put:

    return{initialize:G,shutdown:Z,getServerForFile:Y,...,isFileOpen:W}
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from patch_errors import AnchorNotFoundError

# Minified names: G, $foo, _bar, foo123 ...
IDENT = r"[$\w]+"

ANCHOR_FIELDS = (
    "initialize",
    "shutdown",
    "getServerForFile",
    "ensureServerStarted",
    "sendRequest",
    "getAllServers",
    "openFile",
    "changeFile",
    "saveFile",
    "closeFile",
    "isFileOpen",
)


@dataclass(frozen=True)
class AnchorMatch:
    text: str
    start: int
    end: int


def build_anchor_pattern(fields: tuple[str, ...] = ANCHOR_FIELDS) -> re.Pattern[str]:
    pairs = r"\s*,\s*".join(rf"{re.escape(name)}\s*:\s*{IDENT}" for name in fields)
    return re.compile(rf"return\s*\{{\s*{pairs}\s*\}}")


ANCHOR_PATTERN = build_anchor_pattern()


def locate_anchor(source: str, pattern: re.Pattern[str] = ANCHOR_PATTERN) -> AnchorMatch:
    match = pattern.search(source)
    if not match:
        raise AnchorNotFoundError("Could not find LSP function return statement")
    return AnchorMatch(text=match.group(0), start=match.start(), end=match.end())


def scan_anchors(source: str, pattern: re.Pattern[str] = ANCHOR_PATTERN) -> tuple[AnchorMatch, int]:
    """First anchor and the total number of matches, in a single pass."""
    first = None
    total = 0
    for match in pattern.finditer(source):
        if first is None:
            first = AnchorMatch(text=match.group(0), start=match.start(), end=match.end())
        total += 1
    if first is None:
        raise AnchorNotFoundError("Could not find LSP function return statement")
    return first, total
