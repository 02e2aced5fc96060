"""
dbdumper - Dump MySQL and PostgreSQL databases running in Docker containers
"""

__version__ = "1.1.0"

from .core import DbDumper, DumperError

__all__ = ["DbDumper", "DumperError"]
