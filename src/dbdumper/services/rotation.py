"""Retention handling for dump files on the host."""

import os
import time
from typing import Callable, List

from dbdumper.constants import BACKUP_EXTENSION, DEFAULT_RETENTION_DAYS
from dbdumper.errors import DumperError
from dbdumper.errors_catalog import actionable_error

SECONDS_PER_DAY = 24 * 60 * 60


class RotationService:
    """Deletes dump files older than the retention window."""

    def __init__(
        self,
        logger,
        console,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        clock: Callable[[], float] = time.time,
    ):
        self.logger = logger
        self.console = console
        self.retention_days = retention_days
        self.clock = clock

    def _is_expired(self, entry: os.DirEntry, cutoff: float) -> bool:
        if not entry.name.endswith(BACKUP_EXTENSION):
            return False
        if not entry.is_file(follow_symlinks=False):
            return False
        return entry.stat(follow_symlinks=False).st_mtime < cutoff

    def rotate(self, directory: str) -> List[str]:
        """Remove expired ``*.sql`` files from the top level of ``directory``.

        Returns the basenames of the files actually deleted, sorted.
        Subdirectories are never visited.
        """
        cutoff = self.clock() - self.retention_days * SECONDS_PER_DAY
        rotated: List[str] = []

        try:
            with os.scandir(directory) as entries:
                expired = [entry for entry in entries if self._is_expired(entry, cutoff)]
        except OSError as exc:
            raise DumperError(
                actionable_error("rotation_failed", path=directory, detail=str(exc))
            ) from exc

        for entry in expired:
            try:
                os.remove(entry.path)
            except OSError as exc:
                self.logger.warning("Could not remove %s: %s", entry.path, exc)
                continue
            rotated.append(entry.name)

        rotated.sort()
        if rotated:
            for name in rotated:
                self.console.print(f"rotated backup '{name}'")
        else:
            self.console.print("no backups to rotate")
        return rotated
