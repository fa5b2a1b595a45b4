"""
Snapshot the target bundle before it is touched and put it back on failure.

Backups live in a `backups` directory next to the target and are never
removed automatically.
"""

from __future__ import annotations

import datetime as dt
import shutil
from pathlib import Path

import console_output as out
from patch_errors import PatchIOError

BACKUP_DIR_NAME = "backups"


def default_backup_dir(target: Path) -> Path:
    return target.parent / BACKUP_DIR_NAME


def backup_stamp() -> str:
    now = dt.datetime.now(dt.timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S-%f")[:-3] + "Z"


def create_backup(target: Path, backup_dir: Path) -> Path:
    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
        stem = f"{target.stem}-{backup_stamp()}"
        backup = backup_dir / f"{stem}{target.suffix}"
        counter = 1
        while backup.exists():
            backup = backup_dir / f"{stem}-{counter}{target.suffix}"
            counter += 1
        shutil.copy2(target, backup)
    except OSError as exc:
        raise PatchIOError(f"Could not create backup of {target}: {exc}") from exc
    return backup


def rollback(backup: Path, target: Path) -> bool:
    """Copy the backup over the target. Reports, never raises."""
    try:
        shutil.copy2(backup, target)
    except OSError as exc:
        out.fail(f"Rollback failed: {exc}")
        out.info(f"Manual restore needed from: {backup}")
        return False
    return True
