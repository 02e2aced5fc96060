"""Configuration loader for dbdumper."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from dbdumper.errors import DumperError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "containers",
        "retention_days",
        "backup_path_overrides",
        "dump_timeout_seconds",
        "strict",
        "docker_binary",
        "verbose",
        "log_file",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise DumperError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise DumperError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise DumperError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise DumperError(f"Unknown configuration keys: {unknown_list}")

        # an empty key in YAML means "use the default"
        parsed = {key: value for key, value in parsed.items() if value is not None}

        containers = parsed.get("containers")
        if containers is not None:
            if isinstance(containers, str):
                containers = [containers]
            if not isinstance(containers, list) or not all(
                isinstance(name, str) and name for name in containers
            ):
                raise DumperError("`containers` must be a list of container names.")
            parsed["containers"] = containers

        overrides = parsed.get("backup_path_overrides")
        if overrides is not None and not isinstance(overrides, dict):
            raise DumperError("`backup_path_overrides` must map container names to host paths.")

        self._validate_scalars(parsed)
        return parsed

    def _validate_scalars(self, parsed: Dict[str, Any]):
        retention_days = parsed.get("retention_days")
        if retention_days is not None and (
            isinstance(retention_days, bool)
            or not isinstance(retention_days, int)
            or retention_days < 1
        ):
            raise DumperError("`retention_days` must be a whole number of days, at least 1.")

        timeout = parsed.get("dump_timeout_seconds")
        if timeout is not None and (
            isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0
        ):
            raise DumperError("`dump_timeout_seconds` must be a positive number of seconds.")

        for key in ("strict", "verbose"):
            if key in parsed and not isinstance(parsed[key], bool):
                raise DumperError(f"`{key}` must be true or false.")

        for key in ("docker_binary", "log_file"):
            if key in parsed and not (isinstance(parsed[key], str) and parsed[key]):
                raise DumperError(f"`{key}` must be a non-empty path.")
