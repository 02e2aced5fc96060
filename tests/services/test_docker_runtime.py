import json
import subprocess

import pytest

from dbdumper.errors import RuntimeQueryError
from dbdumper.services.docker_runtime import DockerRuntimeService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None


def _service(**kwargs) -> DockerRuntimeService:
    return DockerRuntimeService(logger=DummyLogger(), **kwargs)


def _returning(stdout: str, returncode: int = 0, stderr: str = ""):
    calls = []

    def fake_run_cmd(cmd, check=True, capture_output=False):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)

    fake_run_cmd.calls = calls
    return fake_run_cmd


def test_container_exists_requires_exact_name_match():
    run_cmd = _returning("db1-old\ndb1\n")

    assert _service().container_exists("db1", run_cmd) is True
    assert run_cmd.calls[0][:4] == ["docker", "ps", "--filter", "name=db1"]


def test_container_exists_ignores_substring_matches():
    run_cmd = _returning("db1-old\nmy-db1\n")

    assert _service().container_exists("db1", run_cmd) is False


def test_container_exists_distinguishes_runtime_failure_from_absence():
    run_cmd = _returning("", returncode=1, stderr="Cannot connect to the Docker daemon")

    with pytest.raises(RuntimeQueryError, match="Cannot connect to the Docker daemon") as excinfo:
        _service().container_exists("db1", run_cmd)

    assert "container runtime query failed for container 'db1'" in str(excinfo.value)
    assert "Suggested action:" in str(excinfo.value)


def test_get_env_var_returns_first_exact_match():
    env = ["PATH=/usr/bin", "MYSQL_ROOT_PASSWORD=a=b", "MYSQL_ROOT_PASSWORD_FILE=/run/x"]
    run_cmd = _returning(json.dumps(env))
    service = _service()

    assert service.get_env_var("db1", "MYSQL_ROOT_PASSWORD", run_cmd) == "a=b"
    assert service.get_env_var("db1", "POSTGRES_USER", run_cmd) == ""


def test_get_env_vars_handles_containers_without_env():
    run_cmd = _returning("null\n")

    assert _service().get_env_vars("db1", run_cmd) == {}


def test_get_backup_path_reads_backup_mount_source():
    mounts = [
        {"Destination": "/var/lib/mysql", "Source": "/srv/data/db1"},
        {"Destination": "/backup", "Source": "/srv/backups/db1"},
    ]
    run_cmd = _returning(json.dumps(mounts))

    assert _service(docker_bin="/usr/bin/docker").get_backup_path("db1", run_cmd) == "/srv/backups/db1"
    assert run_cmd.calls[0] == ["/usr/bin/docker", "inspect", "--format", "{{json .Mounts}}", "db1"]


def test_get_backup_path_is_empty_without_backup_mount():
    run_cmd = _returning(json.dumps([{"Destination": "/data", "Source": "/srv/data"}]))

    assert _service().get_backup_path("db3", run_cmd) == ""


def test_invalid_inspect_output_raises_runtime_query_error():
    run_cmd = _returning("not json")

    with pytest.raises(RuntimeQueryError, match="invalid data"):
        _service().get_backup_path("db1", run_cmd)


def test_is_available_uses_which():
    assert _service(which=lambda _binary: "/usr/bin/docker").is_available() is True
    assert _service(which=lambda _binary: None).is_available() is False
