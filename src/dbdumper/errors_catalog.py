"""Actionable error catalog for dbdumper."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "not_root": {
        "what": "need to run as root!",
        "next": "Re-run with sudo or from root's crontab.",
    },
    "docker_not_found": {
        "what": "docker engine not found: {binary}",
        "next": "Install Docker or point `--docker` at the docker executable.",
    },
    "container_not_found": {
        "what": "can't find container '{name}'!",
        "next": "Start the container or remove it from the configured container list.",
    },
    "runtime_query_failed": {
        "what": "container runtime query failed for container '{name}': {detail}",
        "next": "Check that the Docker daemon is running and reachable.",
    },
    "mount_not_found": {
        "what": "couldn't find mountpoint '{mount}' for container '{name}'",
        "next": "Bind a host directory to `{mount}` in the container definition.",
    },
    "engine_undetermined": {
        "what": "couldn't determine database type for container '{name}'",
        "next": "Set MYSQL_ROOT_PASSWORD, or POSTGRES_USER and POSTGRES_PASSWORD, on the container.",
    },
    "dump_failed": {
        "what": "failed to create backup '{output}'",
        "next": "Run the dump command manually with `docker exec` to inspect the error.",
    },
    "rotation_failed": {
        "what": "could not rotate backups in {path}: {detail}",
        "next": "Check that the backup directory exists and is readable on the host.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
