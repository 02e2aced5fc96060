import subprocess

import pytest

from dbdumper.errors import DumperError
from dbdumper.models import Engine
from dbdumper.services.dump import DumpService


class DummyLogger:
    def error(self, *_args, **_kwargs):
        return None


class RecordingConsole:
    def __init__(self):
        self.lines = []

    def print(self, *args, **_kwargs):
        self.lines.append(" ".join(str(arg) for arg in args))


def _service(**kwargs):
    console = RecordingConsole()
    error_console = RecordingConsole()
    service = DumpService(
        logger=DummyLogger(),
        console=console,
        error_console=error_console,
        **kwargs,
    )
    return service, console, error_console


def test_build_mysql_command_dumps_all_databases_to_backup_mount():
    service, _, _ = _service()

    cmd = service.build_dump_command("db1", Engine.MYSQL, "root", "secret", "x.sql")

    assert cmd == [
        "docker",
        "exec",
        "db1",
        "mysqldump",
        "-u",
        "root",
        "--password=secret",
        "--all-databases",
        "-r",
        "/backup/x.sql",
    ]


def test_build_postgres_command_uses_connection_uri():
    service, _, _ = _service()

    cmd = service.build_dump_command("db2", "postgres", "app", "pw", "x.sql")

    assert cmd[:4] == ["docker", "exec", "db2", "pg_dumpall"]
    assert "--dbname=postgres://app:pw@localhost" in cmd
    assert cmd[-2:] == ["-f", "/backup/x.sql"]


def test_build_command_does_not_go_through_a_shell():
    service, _, _ = _service()

    cmd = service.build_dump_command("db1", Engine.MYSQL, "root", "s3cr$t; rm -rf /", "x.sql")

    assert "sh" not in cmd
    assert "--password=s3cr$t; rm -rf /" in cmd


@pytest.mark.parametrize("engine", ["mongodb", Engine.UNDETERMINED, ""])
def test_build_command_rejects_unknown_engine(engine):
    service, _, _ = _service()

    with pytest.raises(DumperError, match="invalid database type"):
        service.build_dump_command("db1", engine, "root", "secret", "x.sql")


def test_dump_with_unknown_engine_never_calls_runtime():
    service, _, error_console = _service()
    calls = []

    def fake_run_cmd(cmd, **_kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    assert service.dump("db1", "oracle", "root", "secret", "x.sql", fake_run_cmd) is False
    assert calls == []
    assert "invalid database type" in error_console.lines[0]


def test_dump_reports_created_backup_on_success():
    service, console, _ = _service(timeout=30.0)
    captured = {}

    def fake_run_cmd(cmd, check=True, capture_output=False, timeout=None, secrets=None):
        captured.update(cmd=cmd, check=check, timeout=timeout, secrets=secrets)
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    assert service.dump("db1", Engine.MYSQL, "root", "secret", "db1_1.sql", fake_run_cmd) is True
    assert console.lines == ["created backup 'db1_1.sql'"]
    assert captured["check"] is False
    assert captured["timeout"] == 30.0
    assert captured["secrets"] == ["secret"]


def test_dump_propagates_remote_exit_status_as_failure():
    service, console, error_console = _service()

    def fake_run_cmd(cmd, **_kwargs):
        return subprocess.CompletedProcess(cmd, 2, stdout="", stderr="Access denied")

    assert service.dump("db1", Engine.MYSQL, "root", "secret", "db1_1.sql", fake_run_cmd) is False
    assert console.lines == []
    assert "failed to create backup 'db1_1.sql'" in error_console.lines[0]


def test_dump_timeout_is_reported_as_failed_backup():
    service, _, error_console = _service(timeout=0.1)

    def fake_run_cmd(cmd, **_kwargs):
        raise DumperError("Command timed out after 0.1s")

    assert service.dump("db2", Engine.POSTGRES, "app", "pw", "db2_1.sql", fake_run_cmd) is False
    assert "failed to create backup 'db2_1.sql'" in error_console.lines[0]
