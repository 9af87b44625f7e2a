"""Errors raised by generated programs at run time."""

from connforge.exceptions import ConnforgeError


class JobRuntimeError(ConnforgeError):
    """Base class for failures inside a generated job."""


class DataSourceNotFoundError(JobRuntimeError):
    """Raised when a stage asks for a datasource alias nobody provided."""

    def __init__(self, alias: str):
        self.alias = alias
        super().__init__(f"No DataSource with alias: {alias} available!", {"alias": alias})


class DriverLoadError(JobRuntimeError):
    """Raised when a driver module cannot be imported."""

    def __init__(self, driver_class: str, reason: str = ""):
        self.driver_class = driver_class
        message = (
            f"Cannot load driver '{driver_class}'"
            if driver_class
            else "No default driver registered"
        )
        super().__init__(message, {"reason": reason})


class PasswordDecryptionError(JobRuntimeError):
    """Raised when an encrypted password cannot be decrypted."""
