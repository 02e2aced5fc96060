"""Domain errors for dbdumper."""


class DumperError(RuntimeError):
    """Raised when a container backup cannot continue safely."""


class RuntimeQueryError(DumperError):
    """Raised when the container runtime could not be queried."""


class ClassificationError(DumperError):
    """Raised when the database engine of a container cannot be determined."""


class PreconditionError(DumperError):
    """Raised when the host is not fit to run any backup at all."""
