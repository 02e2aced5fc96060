"""Docker runtime introspection for dbdumper."""

import json
import shutil
from typing import Callable, Dict, List

from dbdumper.constants import BACKUP_MOUNT, DEFAULT_DOCKER_BINARY
from dbdumper.errors import RuntimeQueryError
from dbdumper.errors_catalog import actionable_error


class DockerRuntimeService:
    """Read-only queries against the docker CLI."""

    def __init__(self, logger, docker_bin: str = DEFAULT_DOCKER_BINARY, which=shutil.which):
        self.logger = logger
        self.docker_bin = docker_bin
        self.which = which

    def is_available(self) -> bool:
        return self.which(self.docker_bin) is not None

    def _query(self, name: str, args: List[str], run_cmd: Callable) -> str:
        result = run_cmd([self.docker_bin] + args, check=False, capture_output=True)
        if result.returncode != 0:
            detail = (result.stderr or "").strip() or f"exit status {result.returncode}"
            raise RuntimeQueryError(
                actionable_error("runtime_query_failed", name=name, detail=detail)
            )
        return result.stdout or ""

    def _inspect_json(self, name: str, template: str, run_cmd: Callable):
        output = self._query(name, ["inspect", "--format", template, name], run_cmd)
        try:
            return json.loads(output.strip() or "null")
        except json.JSONDecodeError as exc:
            raise RuntimeQueryError(
                f"container runtime returned invalid data for container '{name}': {exc}"
            ) from exc

    def container_exists(self, name: str, run_cmd: Callable) -> bool:
        output = self._query(
            name,
            ["ps", "--filter", f"name={name}", "--format", "{{.Names}}"],
            run_cmd,
        )
        # the name filter matches substrings, so "db" would also find "db-old"
        return any(line.strip() == name for line in output.splitlines())

    def get_env_vars(self, name: str, run_cmd: Callable) -> Dict[str, str]:
        entries = self._inspect_json(name, "{{json .Config.Env}}", run_cmd) or []

        env: Dict[str, str] = {}
        for entry in entries:
            key, sep, value = entry.partition("=")
            if not sep or key in env:
                continue
            env[key] = value
        return env

    def get_env_var(self, name: str, key: str, run_cmd: Callable) -> str:
        return self.get_env_vars(name, run_cmd).get(key, "")

    def get_backup_path(self, name: str, run_cmd: Callable) -> str:
        mounts = self._inspect_json(name, "{{json .Mounts}}", run_cmd) or []
        for mount in mounts:
            if mount.get("Destination") == BACKUP_MOUNT:
                source = mount.get("Source") or ""
                self.logger.debug("Container %s mounts %s from %s", name, BACKUP_MOUNT, source)
                return source
        return ""
