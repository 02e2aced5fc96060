"""Database engine detection from container environment variables."""

from typing import Mapping, Tuple

from dbdumper.constants import (
    MYSQL_PASSWORD_VAR,
    MYSQL_USER,
    POSTGRES_PASSWORD_VAR,
    POSTGRES_USER_VAR,
)
from dbdumper.errors import ClassificationError
from dbdumper.models import Engine


def classify(env: Mapping[str, str]) -> Engine:
    """Return the engine a container runs, judged by its environment.

    MySQL is checked first, so a container that carries both MySQL and
    PostgreSQL variables is treated as MySQL.
    """
    if env.get(MYSQL_PASSWORD_VAR):
        return Engine.MYSQL
    if env.get(POSTGRES_USER_VAR) and env.get(POSTGRES_PASSWORD_VAR):
        return Engine.POSTGRES
    raise ClassificationError("could not determine database type")


def resolve_credentials(engine: Engine, env: Mapping[str, str]) -> Tuple[str, str]:
    if engine == Engine.MYSQL:
        return MYSQL_USER, env.get(MYSQL_PASSWORD_VAR, "")
    if engine == Engine.POSTGRES:
        return env.get(POSTGRES_USER_VAR, ""), env.get(POSTGRES_PASSWORD_VAR, "")
    raise ClassificationError(f"no credentials known for database type '{engine}'")
