"""Filesystem helpers for dbdumper."""

import logging
import os
import sys


class FileSystemService:
    """Encapsulates file side effects on the host."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def set_permissions(self, path: str, mode: int) -> bool:
        if sys.platform == "win32":
            return False

        try:
            os.chmod(path, mode)
        except OSError as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)
            return False
        self.logger.debug("Set mode %o on %s", mode, path)
        return True
