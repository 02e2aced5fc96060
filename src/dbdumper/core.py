import logging
import os
import subprocess
import time
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from rich.console import Console
from rich.markup import escape

from .constants import (
    BACKUP_EXTENSION,
    BACKUP_FILE_MODE,
    BACKUP_MOUNT,
    BACKUP_TIMESTAMP_FORMAT,
    DEFAULT_DOCKER_BINARY,
    DEFAULT_RETENTION_DAYS,
    EXIT_FATAL,
    EXIT_OK,
    EXIT_STRICT_FAILURE,
)
from .errors import ClassificationError, DumperError, PreconditionError, RuntimeQueryError
from .errors_catalog import actionable_error
from .models import ContainerResult, RunReport
from .services.classifier import classify, resolve_credentials
from .services.command_runner import CommandRunner
from .services.docker_runtime import DockerRuntimeService
from .services.dump import DumpService
from .services.filesystem import FileSystemService
from .services.rotation import RotationService
from .services.validation import ValidationService

console = Console(soft_wrap=True, highlight=False)
error_console = Console(stderr=True, soft_wrap=True, highlight=False)
logger = logging.getLogger("dbdumper")


class DbDumper:
    def __init__(
        self,
        containers: Iterable[str],
        retention_days: int = DEFAULT_RETENTION_DAYS,
        backup_path_overrides: Optional[Dict[str, str]] = None,
        dump_timeout: Optional[float] = None,
        strict: bool = False,
        docker_bin: str = DEFAULT_DOCKER_BINARY,
    ):
        self.containers: List[str] = list(containers)
        if not self.containers:
            raise DumperError(
                "No containers configured. Pass --container or set `containers` in the config file."
            )
        if retention_days < 1:
            raise DumperError("Retention must be at least one day.")

        self.retention_days = retention_days
        self.backup_path_overrides = dict(backup_path_overrides or {})
        self.dump_timeout = dump_timeout
        self.strict = strict
        self.docker_bin = docker_bin
        self.report: Optional[RunReport] = None

        self.command_runner = CommandRunner(logger=logger)
        self.validation_service = ValidationService()
        self.filesystem_service = FileSystemService(logger=logger)
        self.docker_runtime_service = DockerRuntimeService(logger=logger, docker_bin=docker_bin)
        self.dump_service = DumpService(
            logger=logger,
            console=console,
            error_console=error_console,
            docker_bin=docker_bin,
            timeout=dump_timeout,
        )
        self.rotation_service = RotationService(
            logger=logger,
            console=console,
            retention_days=retention_days,
        )

    def _run_cmd(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        timeout: Optional[float] = None,
        secrets: Optional[Iterable[str]] = None,
    ) -> subprocess.CompletedProcess:
        return self.command_runner.run(
            cmd,
            check=check,
            capture_output=capture_output,
            timeout=timeout,
            secrets=secrets,
        )

    def _report_error(self, result: ContainerResult, status: str, message: str) -> ContainerResult:
        result.status = status
        result.error = message
        error_console.print(f"[bold red]ERROR:[/bold red] {escape(message)}")
        logger.debug("Container %s finished with status %s", result.name, status)
        return result

    def _backup_name(self, container: str) -> str:
        timestamp = datetime.now().strftime(BACKUP_TIMESTAMP_FORMAT)
        return f"{container}_{timestamp}{BACKUP_EXTENSION}"

    def resolve_backup_path(self, container: str) -> str:
        override = self.backup_path_overrides.get(container)
        if override:
            logger.debug("Using configured backup path %s for %s", override, container)
            return str(override)
        return self.docker_runtime_service.get_backup_path(container, self._run_cmd)

    def secure_backup_file(self, backup_path: str, backup_name: str, expected: bool = True):
        host_file = os.path.join(backup_path, backup_name)
        if os.path.exists(host_file):
            self.filesystem_service.set_permissions(host_file, BACKUP_FILE_MODE)
        elif expected:
            logger.warning(
                "Backup %s is not visible on the host, permissions left unchanged.", host_file
            )

    def dump_container_database(self, result: ContainerResult, backup_path: str) -> ContainerResult:
        container = result.name
        env = self.docker_runtime_service.get_env_vars(container, self._run_cmd)

        try:
            engine = classify(env)
        except ClassificationError:
            return self._report_error(
                result,
                "undetermined",
                actionable_error("engine_undetermined", name=container),
            )

        result.engine = engine
        logger.debug("Container %s runs %s", container, engine.value)
        username, password = resolve_credentials(engine, env)
        backup_name = self._backup_name(container)

        dumped = self.dump_service.dump(
            container,
            engine,
            username,
            password,
            backup_name,
            self._run_cmd,
        )
        # a failed dump may still leave a partial file behind
        self.secure_backup_file(backup_path, backup_name, expected=dumped)
        if not dumped:
            result.status = "dump_failed"
            result.error = actionable_error("dump_failed", output=backup_name)
            return result

        result.backup_file = backup_name
        result.status = "dumped"
        return result

    def process_container(self, container: str) -> ContainerResult:
        """Runs one container through lookup, dump and rotation.

        Failures never propagate; they are reported and recorded on the
        returned result so the remaining containers still get processed.
        """
        result = ContainerResult(name=container)

        try:
            if not self.docker_runtime_service.container_exists(container, self._run_cmd):
                return self._report_error(
                    result,
                    "not_found",
                    actionable_error("container_not_found", name=container),
                )
            console.print(f"found container '{container}'")

            console.print(f"dumping container '{container}' database")
            backup_path = self.resolve_backup_path(container)
            if not backup_path:
                return self._report_error(
                    result,
                    "no_mount",
                    actionable_error("mount_not_found", name=container, mount=BACKUP_MOUNT),
                )

            self.dump_container_database(result, backup_path)
            if result.status != "dumped":
                return result

            console.print("rotating backups")
            result.rotated = self.rotation_service.rotate(backup_path)
            result.status = "success"
            return result

        except RuntimeQueryError as exc:
            return self._report_error(result, "runtime_error", str(exc))
        except DumperError as exc:
            return self._report_error(result, "failed", str(exc))
        except Exception as exc:
            logger.exception("Unexpected error while processing %s", container)
            return self._report_error(result, "failed", f"unexpected error: {exc}")

    def check_preconditions(self):
        self.validation_service.ensure_privileges()
        self.validation_service.ensure_runtime(self.docker_runtime_service)

    def run(self) -> int:
        start_time = time.monotonic()
        console.print(f"starting dbdumper on {datetime.now():%Y-%m-%d %H:%M:%S}\n")

        try:
            self.check_preconditions()
        except PreconditionError as exc:
            error_console.print(f"[bold red]FATAL ERROR:[/bold red] {escape(str(exc))}")
            logger.debug("Aborting before any container was processed.")
            return EXIT_FATAL

        report = RunReport()
        self.report = report
        try:
            for container in self.containers:
                report.results.append(self.process_container(container))
                console.print()
        except KeyboardInterrupt:
            error_console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            return EXIT_FATAL
        finally:
            report.elapsed_ms = int((time.monotonic() - start_time) * 1000)

        console.print(f"finished in {report.elapsed_ms} ms")

        failed = report.failed
        if failed:
            logger.info(
                "%s of %s container(s) were not backed up: %s",
                len(failed),
                len(report.results),
                ", ".join(result.name for result in failed),
            )
            if self.strict:
                return EXIT_STRICT_FAILURE
        return EXIT_OK
