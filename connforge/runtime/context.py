"""Runtime context for generated jobs.

Generated programs never touch process globals. Everything they share (the
environment map connection stages publish into, the datasource map, the
shared connection pool) hangs off the ``JobContext`` passed to ``run``.
"""

import importlib
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol

from connforge.runtime.errors import DriverLoadError, PasswordDecryptionError

logger = logging.getLogger(__name__)


class DataSource(Protocol):
    """Externally managed connection provider, looked up by alias."""

    def get_connection(self) -> Any:
        ...


@dataclass(frozen=True)
class ConnectionMetadata:
    """What a stage reusing a connection may report about it."""

    user_name: Optional[str]
    url: Optional[str]


class ManagedConnection:
    """DB-API connection wrapper carrying its connection metadata.

    Attribute access not handled here is delegated to the wrapped connection.
    """

    def __init__(self, raw: Any, metadata: ConnectionMetadata):
        self.raw = raw
        self.metadata = metadata
        self.closed = False
        self._autocommit: Optional[bool] = None

    @property
    def autocommit(self) -> Optional[bool]:
        if hasattr(self.raw, "autocommit") and not callable(self.raw.autocommit):
            return self.raw.autocommit
        return self._autocommit

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        self._autocommit = value
        current = getattr(self.raw, "autocommit", None)
        if callable(current):
            # Some drivers expose autocommit as a method
            current(value)
        elif hasattr(self.raw, "autocommit"):
            self.raw.autocommit = value
        else:
            logger.debug(f"Driver connection has no autocommit switch, keeping {value} locally")

    def commit(self) -> None:
        self.raw.commit()

    def rollback(self) -> None:
        self.raw.rollback()

    def close(self) -> None:
        if not self.closed:
            self.raw.close()
            self.closed = True

    def __getattr__(self, name: str) -> Any:
        if name == "raw":
            raise AttributeError(name)
        return getattr(self.raw, name)


class DbApiDriver:
    """Connects through a DB-API 2.0 module such as ``sqlite3`` or ``psycopg2``."""

    def __init__(self, name: str, module: Any):
        self.name = name
        self.module = module

    def connect(
        self, url: Optional[str], user: Optional[str] = None, password: Optional[str] = None
    ) -> ManagedConnection:
        kwargs = {}
        if user is not None:
            kwargs["user"] = user
        if password is not None:
            kwargs["password"] = password
        raw = self.module.connect(url, **kwargs) if url is not None else self.module.connect(**kwargs)
        return ManagedConnection(raw, ConnectionMetadata(user_name=user, url=url))


def load_driver(driver_class: str) -> DbApiDriver:
    """Import the DB-API module named ``driver_class``.

    Raises:
        DriverLoadError: If the module cannot be imported
    """
    try:
        module = importlib.import_module(driver_class)
    except ImportError as e:
        raise DriverLoadError(driver_class, str(e)) from e
    return DbApiDriver(driver_class, module)


def connection_metadata(conn: Any) -> Optional[ConnectionMetadata]:
    """Metadata of ``conn``, or ``None`` when the driver offers none."""
    return getattr(conn, "metadata", None)


class SharedConnectionRegistry:
    """Named connections shared between stages and threads of one job."""

    def __init__(self, driver_loader: Callable[[str], Any]):
        self._driver_loader = driver_loader
        self._connections: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._log = None
        self._label = ""

    def init_logger(self, log: Any, label: str) -> None:
        """Report pool activity through the job's logger."""
        self._log = log
        self._label = label

    def _debug(self, message: str, *args: Any) -> None:
        if self._log is not None:
            self._log.debug(f"{self._label} - {message}", *args)

    def get_db_connection(
        self,
        driver_class: str,
        url: Optional[str],
        user: Optional[str],
        password: Optional[str],
        name: str,
    ) -> Any:
        """Return the connection shared under ``name``, opening it if needed."""
        with self._lock:
            conn = self._connections.get(name)
            if conn is None or getattr(conn, "closed", False):
                self._debug("Opening the shared connection '%s'.", name)
                driver = self._driver_loader(driver_class)
                conn = driver.connect(url, user, password)
                self._connections[name] = conn
            else:
                self._debug("Reusing the shared connection '%s'.", name)
            return conn

    def names(self) -> list:
        with self._lock:
            return sorted(self._connections)

    def close_all(self) -> None:
        with self._lock:
            for name, conn in self._connections.items():
                logger.debug(f"Closing shared connection '{name}'")
                conn.close()
            self._connections.clear()


@dataclass
class JobContext:
    """Everything a generated job shares at run time.

    Attributes:
        global_map: Environment map stages publish ``conn_<cid>`` and
            ``url_<cid>`` into
        data_sources: Externally managed datasources keyed by alias
        drivers: Drivers registered by name, consulted before importing
        default_driver: Driver used when a stage names no driver class
        password_decryptor: Callable turning an encrypted password into
            plain text
    """

    global_map: Dict[str, Any] = field(default_factory=dict)
    data_sources: Dict[str, DataSource] = field(default_factory=dict)
    drivers: Dict[str, Any] = field(default_factory=dict)
    default_driver: Optional[Any] = None
    password_decryptor: Optional[Callable[[str], str]] = None
    shared_connections: SharedConnectionRegistry = field(init=False)

    def __post_init__(self):
        self.shared_connections = SharedConnectionRegistry(self.load_driver)

    def register_driver(self, driver_class: str, driver: Any) -> None:
        self.drivers[driver_class] = driver

    def register_data_source(self, alias: str, data_source: DataSource) -> None:
        self.data_sources[alias] = data_source

    def load_driver(self, driver_class: str) -> Any:
        if not driver_class:
            if self.default_driver is None:
                raise DriverLoadError("", "stage relies on a pre-registered driver")
            return self.default_driver
        if driver_class in self.drivers:
            return self.drivers[driver_class]
        driver = load_driver(driver_class)
        self.drivers[driver_class] = driver
        return driver

    def decrypt_password(self, encrypted: str) -> str:
        if self.password_decryptor is None:
            raise PasswordDecryptionError("No password decryptor configured for this job")
        return self.password_decryptor(encrypted)

    def connection(self, cid: str) -> Any:
        """Connection registered by stage ``cid``, if any."""
        return self.global_map.get(f"conn_{cid}")

    def close(self) -> None:
        self.shared_connections.close_all()
