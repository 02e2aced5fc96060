"""Subprocess execution service for dbdumper."""

import subprocess
from typing import Iterable, List, Optional

from dbdumper.errors import DumperError


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger, default_timeout: Optional[float] = None):
        self.logger = logger
        self.default_timeout = default_timeout

    @staticmethod
    def _mask(cmd: List[str], secrets: Iterable[str]) -> str:
        cmd_str = " ".join(cmd)
        for secret in secrets:
            if secret:
                cmd_str = cmd_str.replace(secret, "****")
        return cmd_str

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        timeout: Optional[float] = None,
        secrets: Optional[Iterable[str]] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = self._mask(cmd, secrets or [])
        self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                timeout=effective_timeout,
            )
        except FileNotFoundError as exc:
            raise DumperError(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise DumperError(f"Command timed out after {effective_timeout}s: {cmd_str}") from exc
        except Exception as exc:
            raise DumperError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise DumperError(message)

        self.logger.debug(message)
        return result
