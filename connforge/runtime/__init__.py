"""Runtime support imported by generated job modules."""

from .context import (
    ConnectionMetadata,
    DataSource,
    DbApiDriver,
    JobContext,
    ManagedConnection,
    SharedConnectionRegistry,
    connection_metadata,
    load_driver,
)
from .errors import (
    DataSourceNotFoundError,
    DriverLoadError,
    JobRuntimeError,
    PasswordDecryptionError,
)

__all__ = [
    "ConnectionMetadata",
    "DataSource",
    "DataSourceNotFoundError",
    "DbApiDriver",
    "DriverLoadError",
    "JobContext",
    "JobRuntimeError",
    "ManagedConnection",
    "PasswordDecryptionError",
    "SharedConnectionRegistry",
    "connection_metadata",
    "load_driver",
]
