"""Fatal conditions that abort a patch run and trigger a rollback."""

from __future__ import annotations


class PatchError(Exception):
    """Base class for every error that should end the run with exit code 1."""


class ArgumentError(PatchError):
    pass


class TargetFileNotFoundError(PatchError):
    pass


class PatchIOError(PatchError):
    """Backup creation, read or final write failed."""


class AnchorNotFoundError(PatchError):
    pass


class BoundaryNotFoundError(PatchError):
    """The text around the anchor does not look like the expected function."""


class BracketMismatchError(BoundaryNotFoundError):
    pass
