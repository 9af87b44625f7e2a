"""Lifecycle instrumentation for generated connection code.

Every operation here writes into an ``EmissionPlan``. Log statements are only
emitted when the pipeline has structured logging enabled; with logging off the
operations emit their effect statements and nothing else. Begin and end
messages always come in pairs around the effect they bracket.

Runtime values (URL, user name, counters) are passed to the generated
``log`` call as expressions, never resolved here.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

from connforge.codegen.config_view import ConfigView
from connforge.codegen.namespace import StageNamespace, allocate
from connforge.codegen.sink import EmissionPlan

# Component families whose drivers expose no usable connection metadata
METADATA_LESS_FAMILIES = ("impala", "hive")

# Output components whose drivers report unknown counts for bulk inserts
BULK_INSERT_FAMILIES = ("mysqloutput",)


class BatchMode(Enum):
    """How the caller wants ``execute_batch`` results handled."""

    FIRE_AND_FORGET = 1
    COUNTED = 2


def _normalize(name: str) -> str:
    return name.lower().replace("_", "").replace("-", "")


def is_metadata_less(component: str) -> bool:
    name = _normalize(component)
    if name.startswith("t") and name[1:].startswith(METADATA_LESS_FAMILIES):
        return True
    return name.startswith(METADATA_LESS_FAMILIES)


def is_bulk_insert(view: ConfigView) -> bool:
    """MySQL-family output stage inserting in batches."""
    component = _normalize(view.component)
    return view.get("data_action").strip() == "INSERT" and any(
        family in component for family in BULK_INSERT_FAMILIES
    )


def log_call(level: str, message: str, *args: str) -> str:
    """Render a ``log.<level>(...)`` statement with lazy %-style arguments."""
    rendered = [repr(message)] + list(args)
    return f"log.{level}({', '.join(rendered)})"


class LifecycleInstrumentation:
    """Emits instrumented lifecycle operations for one stage."""

    def __init__(
        self,
        view: ConfigView,
        plan: EmissionPlan,
        namespace: Optional[StageNamespace] = None,
    ):
        self.view = view
        self.plan = plan
        self.ns = namespace or allocate(view.cid)
        self.label = view.cid

    @property
    def enabled(self) -> bool:
        return self.view.log_enabled

    @property
    def connection_label(self) -> str:
        """Quoted name of the reused connection, with a trailing space."""
        use_existing = self.view.get("use_existing_connection").strip().lower()
        if use_existing not in ("", "true"):
            return ""
        connection = self.view.get("connection").strip()
        return f"'{connection}' " if connection else ""

    @property
    def data_action(self) -> str:
        return self.view.get("data_action").strip()

    # Primitive log statements

    def log(self, level: str, message: str, *args: str) -> None:
        if self.enabled:
            self.plan.emit(log_call(level, f"{self.label} - {message}", *args))

    def debug(self, message: str, *args: str) -> None:
        self.log("debug", message, *args)

    def log_error(self, level: str = "error", exception: str = "e") -> None:
        self.log(level, "%s", exception)

    @contextmanager
    def bracket(
        self, begin: str, end: str, begin_args: tuple = (), end_args: tuple = ()
    ) -> Iterator[None]:
        """Emit ``begin`` and ``end`` messages around the enclosed statements."""
        self.debug(begin, *begin_args)
        yield
        self.debug(end, *end_args)

    # Connection

    def driver_class(self) -> None:
        self.debug("Driver ClassName: %s.", self.ns.driver_class)

    def connect_begin(self) -> None:
        self.debug(
            "Connection attempt to '%s' with the username '%s'.",
            self.ns.url,
            self.ns.db_user,
        )

    def connect_begin_no_user(self) -> None:
        self.debug("Connection attempt to '%s'.", self.ns.url)

    def connect_end(self) -> None:
        self.debug("Connection to '%s' has succeeded.", self.ns.url)

    def connect(self, statement: str) -> None:
        """Emit ``statement`` bracketed by the connection attempt messages."""
        if self.view.is_blank("user"):
            self.connect_begin_no_user()
        else:
            self.connect_begin()
        self.plan.emit(statement)
        self.connect_end()

    def init_shared_logger(self) -> None:
        if self.enabled:
            self.plan.emit(f'context.shared_connections.init_logger(log, "{self.view.cid}")')

    def use_existing_connection(self) -> None:
        """Diagnostic for a connection handed over by an earlier stage."""
        if not self.enabled:
            return
        ns = self.ns
        with self.plan.block(f"if {ns.conn} is not None:"):
            self.plan.emit(f"{ns.metadata} = connection_metadata({ns.conn})")
            with self.plan.block(f"if {ns.metadata} is not None:"):
                if is_metadata_less(self.view.component):
                    self.debug(f"Uses an existing connection {self.connection_label}.")
                else:
                    self.debug(
                        "Uses an existing connection with username '%s'. "
                        "Connection URL: %s.",
                        f"{ns.metadata}.user_name",
                        f"{ns.metadata}.url",
                    )

    # Transactions

    def auto_commit(self, flag: bool, statement: str) -> None:
        self.debug(f"Connection is set auto commit to '{flag!r}'.")
        self.plan.emit(statement)

    def commit(self) -> None:
        conn = self.connection_label
        if self.data_action:
            begin, begin_args = (
                f"Connection {conn}starting to commit %s records.",
                (self.ns.commit_counter,),
            )
        else:
            begin, begin_args = f"Connection {conn}starting to commit.", ()
        with self.bracket(begin, f"Connection {conn}commit has succeeded.", begin_args):
            self.plan.emit(f"{self.ns.conn}.commit()")

    def rollback(self) -> None:
        conn = self.connection_label
        with self.bracket(
            f"Connection {conn}starting to rollback.",
            f"Connection {conn}rollback has succeeded.",
        ):
            self.plan.emit(f"{self.ns.conn}.rollback()")

    def close(self) -> None:
        conn = self.connection_label
        with self.bracket(
            f"Closing the connection {conn}to the database.",
            f"Connection {conn}to the database closed.",
        ):
            self.plan.emit(f"{self.ns.conn}.close()")

    # Queries and counters

    def query(self) -> None:
        expression = self.view.get("query").replace("\n", " ").replace("\r", " ")
        self.debug("Executing the query: '%s'.", expression or '""')

    def retrieve_records_count(self) -> None:
        self.debug("Retrieved records count: %s .", self.ns.nb_line)

    def start_retrieve_data_info(self) -> None:
        self.debug("Retrieving records from the datasource.")

    def retrieved_data_number_info(self) -> None:
        self.retrieve_records_count()

    def retrieved_data_number_from_global_map(self) -> None:
        self.debug(
            "Retrieved records count: %s .",
            f'global_map.get("{self.view.cid}_NB_LINE")',
        )

    def write_data_finish_info(self) -> None:
        self.debug("Written records count: %s .", self.ns.nb_line)

    def debug_retrieve_data(self, has_increased: bool = True) -> None:
        record = self.ns.nb_line if has_increased else f"{self.ns.nb_line} + 1"
        self.debug("Retrieving the record %s.", record)

    def debug_write_data(self) -> None:
        self.debug("Writing the record %s to the file.", self.ns.nb_line)

    def log_current_row_number_info(self) -> None:
        self.debug("Processing the record %s.", self.ns.nb_line)

    def log_data_count_info(self) -> None:
        self.debug("Processed records count: %s .", self.ns.nb_line)

    # Batches

    @property
    def logs_batch(self) -> bool:
        batch_size = self.view.get("batch_size").strip()
        return (
            self.view.flag("use_batch_size")
            and batch_size != ""
            and batch_size != "0"
        )

    def execute_batch(self, mode: BatchMode) -> None:
        """Execute the stage's queued statements as one batch.

        In counted mode the per-statement result codes are summed into
        ``count_sum_<cid>``; negative "unknown" codes count as zero, and a
        bulk insert counts each statement as exactly one row.
        """
        ns = self.ns
        action = self.data_action
        if self.logs_batch:
            self.debug(f"Executing the {action} batch.")
        if mode is BatchMode.FIRE_AND_FORGET:
            self.plan.emit(f"{ns.stmt}.execute_batch()")
        else:
            if is_bulk_insert(self.view):
                increment = "1"
            else:
                increment = f"0 if {ns.count_each} < 0 else {ns.count_each}"
            self.plan.emit(f"{ns.count_sum} = 0")
            with self.plan.block(f"for {ns.count_each} in {ns.stmt}.execute_batch():"):
                self.plan.emit(f"{ns.count_sum} += {increment}")
        if self.logs_batch:
            self.debug(f"The {action} batch execution has succeeded.")
