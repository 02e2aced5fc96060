"""Shared domain models for dbdumper."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Engine(str, Enum):
    MYSQL = "mysql"
    POSTGRES = "postgres"
    UNDETERMINED = "undetermined"


@dataclass
class ContainerResult:
    """Outcome of one container's pass through the backup pipeline."""

    name: str
    status: str = "pending"
    engine: Optional[Engine] = None
    backup_file: Optional[str] = None
    rotated: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status != "success"


@dataclass
class RunReport:
    results: List[ContainerResult] = field(default_factory=list)
    elapsed_ms: int = 0

    @property
    def failed(self) -> List[ContainerResult]:
        return [result for result in self.results if result.failed]
