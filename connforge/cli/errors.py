"""CLI-specific exceptions with Rich display support."""

from typing import List, Optional


class ConnforgeCLIError(Exception):
    """Base exception for CLI operations with Rich display support."""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        self.message = message
        self.suggestions = suggestions or []
        super().__init__(message)


class JobFileNotFoundError(ConnforgeCLIError):
    """Raised when the job file given on the command line does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Job file '{path}' not found",
            ["Pass the path to a YAML job definition, e.g. jobs/load_orders.yml"],
        )


class JobValidationError(ConnforgeCLIError):
    """Raised when opt-in validation reports errors."""

    def __init__(self, job_name: str, errors: List[str]):
        self.job_name = job_name
        self.errors = errors
        super().__init__(f"Job '{job_name}' validation failed")


class InvalidVariableError(ConnforgeCLIError):
    """Raised when a ``--var`` option is not a KEY=VALUE pair."""

    def __init__(self, assignment: str):
        self.assignment = assignment
        super().__init__(
            f"Invalid variable '{assignment}'",
            ["Use --var KEY=VALUE, for example --var db_host=localhost"],
        )
