#!/usr/bin/env python3
"""
LSP fix for a minified CLI bundle, located by anchor instead of by name.

The LSP manager factory is found through its stable return statement, its
boundaries are recovered by brace matching, and the aliases it uses are read
from the file itself before the file URI construction is rewritten:

    `file://${path.resolve(file)}`  ->  pathToFileURL(path.resolve(file)).href

A backup is written to a `backups` directory next to the target before any
change and copied back if anything fails.
"""

from __future__ import annotations

import argparse
import functools
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import console_output as out
from alias_extractor import ROLE_PATH_MODULE, ROLE_URL_CONVERTER, UriShape, extract_aliases
from anchor_locator import scan_anchors
from backup_manager import create_backup, default_backup_dir, rollback
from boundary_resolver import resolve_function
from diff_reporter import CONTEXT_CHARS, show_diff
from patch_errors import ArgumentError, PatchIOError, TargetFileNotFoundError
from patch_planner import PatchResult, apply_patches

BACKUP_DIR_ENV = "LSP_FIX_BACKUP_DIR"
USAGE_EXAMPLE = "apply-lsp-fix /path/to/node_modules/<cli-package>/cli.js"

SHAPE_MESSAGES = {
    UriShape.LEGACY: "Found old URI construction pattern (needs patching)",
    UriShape.TARGET: "Found new URI construction pattern (already patched)",
}


@dataclass(frozen=True)
class FixConfig:
    target: Path
    backup_dir: Path
    dry_run: bool = False
    context_chars: int = CONTEXT_CHARS


class FixArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with 1 like every other fatal condition."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = FixArgumentParser(
        prog="apply-lsp-fix",
        description="Rewrite the LSP file URI construction in a minified CLI bundle",
    )
    parser.add_argument("target", nargs="?", help="Path to the bundled cli.js")
    parser.add_argument(
        "--backup-dir",
        default=os.getenv(BACKUP_DIR_ENV, ""),
        help="Where backups are written (default: <target dir>/backups)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Show what would change without writing")
    parser.add_argument(
        "--context",
        type=int,
        default=CONTEXT_CHARS,
        help="Characters of context shown around each change",
    )
    return parser


def load_config(args: argparse.Namespace) -> FixConfig:
    if not args.target:
        raise ArgumentError("CLI file path is required")
    target = Path(args.target).expanduser()
    backup_dir = Path(args.backup_dir).expanduser() if args.backup_dir else default_backup_dir(target)
    return FixConfig(
        target=target,
        backup_dir=backup_dir,
        dry_run=args.dry_run,
        context_chars=max(0, args.context),
    )


def read_source(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise PatchIOError(f"Could not read {path}: {exc}") from exc


def write_source(path: Path, content: str) -> None:
    try:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
    except OSError as exc:
        raise PatchIOError(f"Could not write {path}: {exc}") from exc


def patch_source(source: str, config: FixConfig) -> PatchResult:
    out.step(2, "Locating LSP function using return statement anchor...")
    anchor, total = scan_anchors(source)
    out.ok(f"Found return statement at position {anchor.start}")
    extra = total - 1
    if extra > 0:
        out.warn(f"{extra} more return statement(s) match the anchor; using the first")

    out.dim("Using bracket matching to find function boundaries...")
    function = resolve_function(source, anchor)
    out.dim(f"Function ends at position {function.end - 1}")
    out.ok(f"Found LSP function: {out.bold(function.name)}")
    out.dim(f"Range: {function.start} - {function.end} ({function.end - function.start} chars)")

    out.step(3, "Extracting variable names from LSP function...")
    aliases = extract_aliases(source, function)
    if aliases.get(ROLE_URL_CONVERTER):
        out.ok(f"pathToFileURL alias: {out.bold(aliases.get(ROLE_URL_CONVERTER))}")
    if aliases.get(ROLE_PATH_MODULE):
        out.ok(f"path module alias: {out.bold(aliases.get(ROLE_PATH_MODULE))}")
    if aliases.shape in SHAPE_MESSAGES:
        out.info(SHAPE_MESSAGES[aliases.shape])
    else:
        out.warn("Unknown URI construction pattern")

    out.step(4, "Applying patches...")
    reporter = functools.partial(show_diff, context=config.context_chars)
    result = apply_patches(source, function, aliases, reporter=reporter)
    print(f"\n{out.bold(f'Summary: {result.applied} patch(es) applied')}")
    return result


def run(config: FixConfig) -> int:
    backup = None
    try:
        if not config.target.exists():
            raise TargetFileNotFoundError(f"CLI file not found: {config.target}")
        out.dim(f"Target: {config.target}\n")

        if config.dry_run:
            out.step(1, "Dry run, skipping backup")
        else:
            out.step(1, "Creating backup...")
            backup = create_backup(config.target, config.backup_dir)
            out.ok(f"Backup created: {backup}")
        print()

        source = read_source(config.target)
        out.ok(f"File loaded ({len(source)} chars)\n")

        result = patch_source(source, config)

        out.step(5, "Saving changes...")
        if config.dry_run:
            out.info("Dry run, no files written")
        elif not result.changed:
            out.ok(f"No changes to write, {config.target} left untouched")
        else:
            write_source(config.target, result.content)
            out.ok(f"Changes saved to {config.target}")
    except Exception as exc:
        out.fail(f"Error: {exc}")
        if backup is not None and backup.exists():
            print(f"{out.bold('⟳')} Rolling back changes...")
            if rollback(backup, config.target):
                out.ok("Rollback successful\n")
        return 1

    print(f"\n{out.bold('✓ LSP fix applied successfully!')}")
    out.dim("You may need to restart the CLI for changes to take effect.\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    out.enable_colors()
    parser = build_parser()
    args = parser.parse_args(argv)
    out.banner("LSP Fix - Anchor-Based Version")

    try:
        config = load_config(args)
    except ArgumentError as exc:
        out.fail(f"Error: {exc}")
        parser.print_usage(sys.stderr)
        print(f"Example: {USAGE_EXAMPLE}", file=sys.stderr)
        return 1

    return run(config)


if __name__ == "__main__":
    raise SystemExit(main())
