"""Connection acquisition planner.

The planner drives one connection stage through an explicit state machine.
Each acquisition mode owns a fixed route through the states; entering a state
emits that state's statements into the stage's emission plan. Routes are
linear: no backtracking, no retries, nothing already emitted is withdrawn.

    DIRECT: INIT -> DRIVER_LOADED -> URL_BUILT -> CONNECTED
                 -> AUTO_COMMIT_SET -> REGISTERED -> DONE
    SHARED: INIT -> URL_BUILT -> CONNECTED
                 -> AUTO_COMMIT_SET -> REGISTERED -> DONE
    ALIAS:  INIT -> REGISTERED -> AUTO_COMMIT_SET -> DONE

Alias-backed connections are established outside the generated program, so
the alias route skips driver loading and URL building, and publishes the
connection as soon as it has been looked up.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from connforge.codegen.config_view import ConfigView
from connforge.codegen.credentials import CredentialResolver
from connforge.codegen.instrumentation import LifecycleInstrumentation
from connforge.codegen.namespace import StageNamespace, allocate
from connforge.codegen.registration import emit_registration
from connforge.codegen.sink import CodeSink, EmissionPlan
from connforge.codegen.strategies import ConnectionStrategy, select_strategy
from connforge.exceptions import PlannerStateError
from connforge.logging import get_logger

logger = get_logger(__name__)


class PlannerState(Enum):
    INIT = "init"
    URL_BUILT = "url_built"
    DRIVER_LOADED = "driver_loaded"
    CONNECTED = "connected"
    AUTO_COMMIT_SET = "auto_commit_set"
    REGISTERED = "registered"
    DONE = "done"


class AcquisitionMode(Enum):
    SHARED = "shared"
    ALIAS = "alias"
    DIRECT = "direct"


ROUTES: Dict[AcquisitionMode, Tuple[PlannerState, ...]] = {
    AcquisitionMode.DIRECT: (
        PlannerState.INIT,
        PlannerState.DRIVER_LOADED,
        PlannerState.URL_BUILT,
        PlannerState.CONNECTED,
        PlannerState.AUTO_COMMIT_SET,
        PlannerState.REGISTERED,
        PlannerState.DONE,
    ),
    AcquisitionMode.SHARED: (
        PlannerState.INIT,
        PlannerState.URL_BUILT,
        PlannerState.CONNECTED,
        PlannerState.AUTO_COMMIT_SET,
        PlannerState.REGISTERED,
        PlannerState.DONE,
    ),
    AcquisitionMode.ALIAS: (
        PlannerState.INIT,
        PlannerState.REGISTERED,
        PlannerState.AUTO_COMMIT_SET,
        PlannerState.DONE,
    ),
}


def select_mode(view: ConfigView) -> AcquisitionMode:
    """Shared connection wins over a datasource alias; otherwise connect directly."""
    if view.flag("use_shared_connection"):
        return AcquisitionMode.SHARED
    if view.flag("specify_datasource_alias"):
        return AcquisitionMode.ALIAS
    return AcquisitionMode.DIRECT


class ConnectionPlanner:
    """Plans and emits the connection code of a single stage."""

    def __init__(
        self,
        view: ConfigView,
        strategy: Optional[ConnectionStrategy] = None,
        namespace: Optional[StageNamespace] = None,
    ):
        self.view = view
        self.ns = namespace or allocate(view.cid)
        self.strategy = strategy or select_strategy(view, self.ns)
        self.mode = select_mode(view)
        self.plan = EmissionPlan(view.cid, view.component)
        self.instrumentation = LifecycleInstrumentation(view, self.plan, self.ns)
        self.credentials = CredentialResolver(view, self.ns)
        self.state: Optional[PlannerState] = None
        self.history: List[PlannerState] = []
        self._sink = CodeSink()
        self._handlers: Dict[PlannerState, Callable[[], None]] = {
            PlannerState.INIT: self._enter_init,
            PlannerState.DRIVER_LOADED: self._enter_driver_loaded,
            PlannerState.URL_BUILT: self._enter_url_built,
            PlannerState.CONNECTED: self._enter_connected,
            PlannerState.AUTO_COMMIT_SET: self._enter_auto_commit_set,
            PlannerState.REGISTERED: self._enter_registered,
            PlannerState.DONE: self._enter_done,
        }

    @property
    def route(self) -> Tuple[PlannerState, ...]:
        return ROUTES[self.mode]

    def advance(self, target: PlannerState) -> None:
        """Move to ``target`` and emit its statements.

        Raises:
            PlannerStateError: If ``target`` is not the next state on this
                mode's route
        """
        position = len(self.history)
        expected = self.route[position] if position < len(self.route) else None
        if target is not expected:
            current = self.state.value if self.state else "start"
            raise PlannerStateError(self.view.cid, self.mode.value, current, target.value)
        self.state = target
        self.history.append(target)
        self._handlers[target]()

    def run(self, sink: Optional[CodeSink] = None) -> EmissionPlan:
        """Walk the whole route, flushing the finished plan into ``sink``."""
        logger.debug(
            f"Planning stage {self.view.cid}: mode={self.mode.value}, "
            f"strategy={self.strategy.name}"
        )
        if sink is not None:
            self._sink = sink
        for state in self.route:
            self.advance(state)
        return self.plan

    # State handlers

    def _enter_init(self) -> None:
        self.plan.emit(f"{self.ns.conn} = None", f"{self.ns.url} = None")

    def _enter_driver_loaded(self) -> None:
        self.plan.emit_all(self.strategy.emit_class_load())
        self.instrumentation.driver_class()

    def _enter_url_built(self) -> None:
        url_statement = self.strategy.build_url()
        if url_statement:
            self.plan.emit(url_statement)
        self.plan.emit_all(self.credentials.statements())

    def _enter_connected(self) -> None:
        if self.mode is AcquisitionMode.SHARED:
            self.instrumentation.init_shared_logger()
            self.plan.emit_all(self.strategy.emit_shared_connection_acquire())
        else:
            self.instrumentation.connect(self.strategy.emit_direct_connect())
        if self.view.flag("use_existing_connection"):
            self.instrumentation.use_existing_connection()

    def _enter_auto_commit_set(self) -> None:
        flag = self.view.flag("auto_commit")
        statement = self.strategy.emit_auto_commit(flag)
        if statement is None:
            return
        with self.plan.block(f"if {self.ns.conn} is not None:"):
            self.instrumentation.auto_commit(flag, statement)

    def _enter_registered(self) -> None:
        if self.mode is AcquisitionMode.ALIAS:
            self._emit_alias_lookup()
        emit_registration(self.plan, self.ns)

    def _enter_done(self) -> None:
        self.plan.flush(self._sink)

    def _emit_alias_lookup(self) -> None:
        ns = self.ns
        alias = self.view.get("datasource_alias").strip() or '""'
        self.plan.emit(
            f"{ns.data_sources} = context.data_sources",
            f"{ns.ds_alias} = {alias}",
        )
        with self.plan.block(f"if {ns.data_sources}.get({ns.ds_alias}) is None:"):
            self.plan.emit(f"raise DataSourceNotFoundError({ns.ds_alias})")
        self.plan.emit(f"{ns.conn} = {ns.data_sources}[{ns.ds_alias}].get_connection()")


def plan_connection(view: ConfigView, sink: Optional[CodeSink] = None) -> EmissionPlan:
    """Emit the connection code of one stage and return its flushed plan."""
    return ConnectionPlanner(view).run(sink)
