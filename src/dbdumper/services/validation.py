"""Host precondition checks for dbdumper."""

import os
from typing import Callable, Optional

from dbdumper.errors import PreconditionError
from dbdumper.errors_catalog import actionable_error


def _effective_uid() -> Optional[int]:
    geteuid = getattr(os, "geteuid", None)
    if geteuid is None:
        return None
    return geteuid()


class ValidationService:
    """Checks that must pass before any container is touched."""

    def __init__(self, geteuid: Callable[[], Optional[int]] = _effective_uid):
        self.geteuid = geteuid

    def ensure_privileges(self):
        if self.geteuid() != 0:
            raise PreconditionError(actionable_error("not_root"))

    def ensure_runtime(self, docker_runtime_service):
        if not docker_runtime_service.is_available():
            raise PreconditionError(
                actionable_error("docker_not_found", binary=docker_runtime_service.docker_bin)
            )
