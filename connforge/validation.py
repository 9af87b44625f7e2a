"""Opt-in configuration checks for job definitions.

The generator never calls into this module: it emits whatever it is given and
misconfigurations surface when the generated program runs. These checks
exist for the ``validate`` command, to catch the common mistakes earlier.
"""

from dataclasses import dataclass, field
from typing import List

from connforge.codegen.config_view import ConfigView
from connforge.codegen.planner import AcquisitionMode, select_mode
from connforge.codegen.strategies import DriverSpecifiedStrategy, select_strategy
from connforge.config.models import CONNECTION, JobDefinition
from connforge.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of job validation."""

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def __bool__(self) -> bool:
        """Returns True if validation passed."""
        return self.is_valid


def _validate_connection_stage(view: ConfigView, result: ValidationResult) -> None:
    cid = view.cid
    mode = select_mode(view)

    if mode is AcquisitionMode.SHARED and view.is_blank("shared_connection_name"):
        result.add_error(f"{cid}: shared connection enabled without 'shared_connection_name'")
    if mode is AcquisitionMode.ALIAS and view.is_blank("datasource_alias"):
        result.add_error(f"{cid}: datasource alias enabled without 'datasource_alias'")
    if view.flag("use_shared_connection") and view.flag("specify_datasource_alias"):
        result.add_warning(f"{cid}: datasource alias is ignored when a shared connection is used")

    if mode is AcquisitionMode.ALIAS:
        return

    strategy = select_strategy(view)
    if isinstance(strategy, DriverSpecifiedStrategy):
        if view.is_blank("driver_class"):
            result.add_error(f"{cid}: 'driver_jar' is set but 'driver_class' is missing")
        if view.is_blank("url"):
            result.add_error(f"{cid}: driver specified without 'url'")
        if not view.flag("use_transaction") and view.flag("auto_commit"):
            result.add_warning(
                f"{cid}: 'auto_commit' has no effect while 'use_transaction' is false"
            )
    else:
        result.add_warning(
            f"{cid}: no driver configured, the runtime default driver will be used"
        )


def validate_job(job: JobDefinition) -> ValidationResult:
    """Check ``job`` for configurations that would generate broken code."""
    result = ValidationResult()
    connection_cids = set()

    for stage in job.stages:
        view = ConfigView(stage, job.globals)
        if stage.kind == CONNECTION:
            _validate_connection_stage(view, result)
            connection_cids.add(stage.cid)
            continue

        connection = view.get("connection").strip()
        if not connection:
            result.add_error(f"{stage.cid}: {stage.kind} stage without 'connection'")
        elif connection not in connection_cids:
            result.add_error(
                f"{stage.cid}: connection '{connection}' is not registered by an earlier stage"
            )

    if not job.stages:
        result.add_warning(f"Job '{job.name}' has no stages")

    logger.debug(
        f"Validated job '{job.name}': {len(result.errors)} errors, "
        f"{len(result.warnings)} warnings"
    )
    return result
