"""
Rewrite the legacy file URI construction inside the LSP function.

    old: `file://${path.resolve(file)}`
    new: pathToFileURL(path.resolve(file)).href

Both names come from the AliasMap of the same file, never from constants.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

import console_output as out
from alias_extractor import REQUIRED_ROLES, ROLE_PATH_MODULE, ROLE_URL_CONVERTER, AliasMap, UriShape
from anchor_locator import IDENT
from boundary_resolver import FunctionRecord
from diff_reporter import show_diff
from patch_errors import PatchError

STATUS_PATCHED = "patched"
STATUS_ALREADY_PATCHED = "already-patched"
STATUS_UNRECOGNIZED = "unrecognized"
STATUS_MISSING_ALIASES = "missing-aliases"
STATUS_NO_OCCURRENCES = "no-occurrences"

IDENT_CHAR = re.compile(r"[$\w]")

DiffReporter = Callable[[str, str, int, int, str], None]


@dataclass(frozen=True)
class PatchOperation:
    range_start: int
    range_end: int
    old_text: str
    new_text: str
    file_var: str


@dataclass(frozen=True)
class PatchResult:
    content: str
    status: str
    operations: list[PatchOperation] = field(default_factory=list)

    @property
    def applied(self) -> int:
        return len(self.operations) if self.status == STATUS_PATCHED else 0

    @property
    def changed(self) -> bool:
        return self.applied > 0


def legacy_uri_pattern(path_alias: str) -> re.Pattern[str]:
    return re.compile(rf"`file:\/\/\$\{{{re.escape(path_alias)}\.resolve\(({IDENT})\)\}}`")


def plan_patches(function: FunctionRecord, aliases: AliasMap) -> list[PatchOperation]:
    path_alias = aliases.get(ROLE_PATH_MODULE)
    converter = aliases.get(ROLE_URL_CONVERTER)
    if not path_alias or not converter:
        return []

    operations = []
    for match in legacy_uri_pattern(path_alias).finditer(function.code):
        file_var = match.group(1)
        new_text = f"{converter}({path_alias}.resolve({file_var})).href"
        # return`file://...` must not become returnq(...)
        if match.start() > 0 and IDENT_CHAR.match(function.code, match.start() - 1):
            new_text = " " + new_text
        operations.append(
            PatchOperation(
                range_start=function.start + match.start(),
                range_end=function.start + match.end(),
                old_text=match.group(0),
                new_text=new_text,
                file_var=file_var,
            )
        )
    return operations


def compose_function(function: FunctionRecord, operations: list[PatchOperation]) -> str:
    """Apply operations to the function's reference text in position order."""
    pieces = []
    cursor = 0
    for op in sorted(operations, key=lambda item: item.range_start):
        local_start = op.range_start - function.start
        local_end = op.range_end - function.start
        if local_start < cursor or function.code[local_start:local_end] != op.old_text:
            raise PatchError(f"Stale or overlapping patch operation at {op.range_start}")
        pieces.append(function.code[cursor:local_start])
        pieces.append(op.new_text)
        cursor = local_end
    pieces.append(function.code[cursor:])
    return "".join(pieces)


def apply_patches(
    source: str,
    function: FunctionRecord,
    aliases: AliasMap,
    reporter: DiffReporter = show_diff,
) -> PatchResult:
    if aliases.shape is UriShape.TARGET:
        out.ok("No patching needed (already fixed)")
        return PatchResult(content=source, status=STATUS_ALREADY_PATCHED)
    if aliases.shape is UriShape.UNRECOGNIZED:
        out.warn("No patching done (unknown URI construction pattern)")
        return PatchResult(content=source, status=STATUS_UNRECOGNIZED)

    if aliases.missing_roles():
        out.fail("Cannot apply patches: Missing required variables")
        for role in REQUIRED_ROLES:
            print(f"  {role}: {aliases.get(role) or 'NOT FOUND'}")
        return PatchResult(content=source, status=STATUS_MISSING_ALIASES)

    operations = plan_patches(function, aliases)
    if not operations:
        out.warn("No old URI constructions found")
        return PatchResult(content=source, status=STATUS_NO_OCCURRENCES)

    out.dim(f"Found {len(operations)} old URI construction(s)")
    for op in operations:
        reporter(
            f"Fix URI construction (file variable: {op.file_var})",
            source,
            op.range_start,
            op.range_end,
            op.new_text,
        )

    patched_function = compose_function(function, operations)
    content = source[:function.start] + patched_function + source[function.end:]
    out.ok(f"Patched {len(operations)} URI construction(s)")
    return PatchResult(content=content, status=STATUS_PATCHED, operations=operations)

