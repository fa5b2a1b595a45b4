import contextlib
import io
import tempfile
import unittest
from pathlib import Path

from backup_manager import BACKUP_DIR_NAME, create_backup, default_backup_dir, rollback
from patch_errors import PatchIOError


class BackupManagerTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.target = self.root / "cli.js"
        self.target.write_bytes(b"#!/usr/bin/env node\r\nfunction Z9(){}\n")

    def tearDown(self):
        self._tmp.cleanup()

    def test_backup_dir_sits_next_to_target(self):
        self.assertEqual(default_backup_dir(self.target), self.root / BACKUP_DIR_NAME)

    def test_backup_is_an_exact_copy(self):
        backup = create_backup(self.target, default_backup_dir(self.target))
        self.assertEqual(backup.parent, self.root / "backups")
        self.assertTrue(backup.name.startswith("cli-"))
        self.assertEqual(backup.suffix, ".js")
        self.assertEqual(backup.read_bytes(), self.target.read_bytes())

    def test_consecutive_backups_do_not_overwrite_each_other(self):
        backup_dir = default_backup_dir(self.target)
        first = create_backup(self.target, backup_dir)
        second = create_backup(self.target, backup_dir)
        self.assertNotEqual(first, second)
        self.assertEqual(len(list(backup_dir.iterdir())), 2)

    def test_missing_target_raises_io_error(self):
        with self.assertRaises(PatchIOError):
            create_backup(self.root / "missing.js", self.root / "backups")

    def test_rollback_restores_original_bytes(self):
        original = self.target.read_bytes()
        backup = create_backup(self.target, default_backup_dir(self.target))
        self.target.write_bytes(b"broken")

        self.assertTrue(rollback(backup, self.target))
        self.assertEqual(self.target.read_bytes(), original)

    def test_failed_rollback_is_reported_not_raised(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), contextlib.redirect_stdout(io.StringIO()):
            restored = rollback(self.root / "backups" / "gone.js", self.target)
        self.assertFalse(restored)
        self.assertIn("Rollback failed", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
