BACKUP_MOUNT = "/backup"
BACKUP_EXTENSION = ".sql"
BACKUP_FILE_MODE = 0o600
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

DEFAULT_RETENTION_DAYS = 14
DEFAULT_DOCKER_BINARY = "docker"
DEFAULT_CONFIG_FILE = ".dbdumper.yml"

MYSQL_PASSWORD_VAR = "MYSQL_ROOT_PASSWORD"
MYSQL_USER = "root"
POSTGRES_USER_VAR = "POSTGRES_USER"
POSTGRES_PASSWORD_VAR = "POSTGRES_PASSWORD"

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_STRICT_FAILURE = 2
