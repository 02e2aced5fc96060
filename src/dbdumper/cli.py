import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler

from .constants import DEFAULT_CONFIG_FILE, DEFAULT_DOCKER_BINARY, DEFAULT_RETENTION_DAYS
from .core import DbDumper, DumperError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_level=False,
            show_path=False,
        )
    ],
)


@click.command()
@click.option(
    "--container",
    "containers",
    multiple=True,
    envvar="DBDUMPER_CONTAINERS",
    help="Name of a database container to back up. Repeat for several containers.",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    envvar="DBDUMPER_CONFIG",
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option(
    "--retention-days",
    required=False,
    type=click.IntRange(min=1),
    default=None,
    envvar="DBDUMPER_RETENTION_DAYS",
    help=f"Delete dumps older than this many days (default: {DEFAULT_RETENTION_DAYS}).",
)
@click.option(
    "--dump-timeout",
    required=False,
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    envvar="DBDUMPER_DUMP_TIMEOUT",
    help="Abort a single dump after this many seconds.",
)
@click.option(
    "--strict",
    is_flag=True,
    default=None,
    help="Exit with status 2 when any container could not be backed up.",
)
@click.option(
    "--docker",
    "docker_binary",
    required=False,
    envvar="DBDUMPER_DOCKER",
    help=f"Docker executable to use (default: {DEFAULT_DOCKER_BINARY}).",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    containers,
    config,
    retention_days,
    dump_timeout,
    strict,
    docker_binary,
    verbose,
    log_file,
):
    """Dump MySQL and PostgreSQL databases running in Docker containers."""
    logger = logging.getLogger("dbdumper")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except DumperError as exc:
        raise click.ClickException(str(exc)) from exc

    containers = list(containers) or config_values.get("containers") or []
    retention_days = int(
        _resolve_option(retention_days, config_values, "retention_days", default=DEFAULT_RETENTION_DAYS)
    )
    dump_timeout = _resolve_option(dump_timeout, config_values, "dump_timeout_seconds")
    if dump_timeout is not None:
        dump_timeout = float(dump_timeout)
    strict = bool(_resolve_option(strict, config_values, "strict", default=False))
    docker_binary = str(
        _resolve_option(docker_binary, config_values, "docker_binary", default=DEFAULT_DOCKER_BINARY)
    )
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    backup_path_overrides = config_values.get("backup_path_overrides") or {}

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        dumper = DbDumper(
            containers=containers,
            retention_days=retention_days,
            backup_path_overrides=backup_path_overrides,
            dump_timeout=dump_timeout,
            strict=strict,
            docker_bin=docker_binary,
        )
    except DumperError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(dumper.run())


if __name__ == "__main__":
    main()
