"""Connection strategies.

A strategy supplies the driver-specific statements of a connection stage. It
is chosen once per stage by ``select_strategy`` and held for the whole
emission; the planner never re-derives it.
"""

from abc import ABC, abstractmethod
from typing import Optional

from connforge.codegen.config_view import ConfigView
from connforge.codegen.namespace import StageNamespace, allocate

EMPTY_DRIVER_CLASS = '""'


class ConnectionStrategy(ABC):
    """Driver-specific statement supplier for one stage."""

    name = "abstract"

    def __init__(self, view: ConfigView, namespace: Optional[StageNamespace] = None):
        self.view = view
        self.ns = namespace or allocate(view.cid)

    @abstractmethod
    def driver_class_name(self) -> str:
        """Driver class expression handed to the runtime."""

    @abstractmethod
    def build_url(self) -> Optional[str]:
        """Statement binding ``url_<cid>``, or ``None`` when supplied elsewhere."""

    @abstractmethod
    def emit_auto_commit(self, flag: bool) -> Optional[str]:
        """Statement setting auto-commit, or ``None`` when nothing is emitted."""

    def emit_class_load(self) -> tuple:
        ns = self.ns
        return (
            f"{ns.driver_class} = {self.driver_class_name()}",
            f"{ns.driver} = context.load_driver({ns.driver_class})",
        )

    def emit_shared_connection_acquire(self) -> tuple:
        ns = self.ns
        shared_name = self.view.get("shared_connection_name") or '""'
        return (
            f"{ns.shared_connection_name} = {shared_name}",
            f"{ns.conn} = context.shared_connections.get_db_connection("
            f"{self.driver_class_name()}, {ns.url}, {ns.db_user}, {ns.db_pwd}, "
            f"{ns.shared_connection_name})",
        )

    def emit_direct_connect(self) -> str:
        ns = self.ns
        return f"{ns.conn} = {ns.driver}.connect({ns.url}, {ns.db_user}, {ns.db_pwd})"

    def _auto_commit_statement(self, flag: bool) -> str:
        return f"{self.ns.conn}.autocommit = {flag!r}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cid={self.view.cid!r})"


class GenericStrategy(ConnectionStrategy):
    """Relies on a driver the runtime already has registered."""

    name = "generic"

    def driver_class_name(self) -> str:
        return EMPTY_DRIVER_CLASS

    def build_url(self) -> Optional[str]:
        url = self.view.get("url")
        if not url.strip():
            return None
        return f"{self.ns.url} = {url}"

    def emit_auto_commit(self, flag: bool) -> Optional[str]:
        return self._auto_commit_statement(flag)


class DriverSpecifiedStrategy(ConnectionStrategy):
    """Loads an explicitly configured driver and builds the URL from config."""

    name = "driver_specified"

    @property
    def driver_jar(self) -> str:
        return self.view.get("driver_jar")

    def driver_class_name(self) -> str:
        return self.view.get("driver_class")

    def build_url(self) -> Optional[str]:
        return f"{self.ns.url} = {self.view.get('url')}"

    def emit_auto_commit(self, flag: bool) -> Optional[str]:
        # Without the transaction flag the connection keeps the driver default
        if not self.view.flag("use_transaction"):
            return None
        return self._auto_commit_statement(flag)


def select_strategy(
    view: ConfigView, namespace: Optional[StageNamespace] = None
) -> ConnectionStrategy:
    """Pick the strategy for a stage from its populated driver fields."""
    if view.is_blank("driver_jar") and view.is_blank("driver_class"):
        return GenericStrategy(view, namespace)
    return DriverSpecifiedStrategy(view, namespace)
