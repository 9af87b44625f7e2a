"""Code generation engine for database connection stages.

Each module handles one concern of a stage's emission:

- config_view: read-only parameter lookup
- namespace: cid-suffixed identifier allocation
- strategies: driver-specific statements (generic or driver specified)
- credentials: user and password bindings
- instrumentation: structured-log wrapped lifecycle operations
- planner: acquisition state machine for connection stages
- registration: shared environment map publication
- sink: emission plans and the ordered code sink
- generator: stage kind dispatch and whole-job generation
"""

from .config_view import ConfigView
from .credentials import CredentialResolver, PasswordMode
from .generator import (
    STAGE_GENERATORS,
    JobGenerator,
    generate_job,
    generate_stage_code,
)
from .instrumentation import BatchMode, LifecycleInstrumentation
from .namespace import StageNamespace, allocate
from .planner import (
    AcquisitionMode,
    ConnectionPlanner,
    PlannerState,
    plan_connection,
    select_mode,
)
from .sink import CodeSink, EmissionPlan, Fragment
from .strategies import (
    ConnectionStrategy,
    DriverSpecifiedStrategy,
    GenericStrategy,
    select_strategy,
)

__all__ = [
    "AcquisitionMode",
    "BatchMode",
    "CodeSink",
    "ConfigView",
    "ConnectionPlanner",
    "ConnectionStrategy",
    "CredentialResolver",
    "DriverSpecifiedStrategy",
    "EmissionPlan",
    "Fragment",
    "GenericStrategy",
    "JobGenerator",
    "LifecycleInstrumentation",
    "PasswordMode",
    "PlannerState",
    "STAGE_GENERATORS",
    "StageNamespace",
    "allocate",
    "generate_job",
    "generate_stage_code",
    "plan_connection",
    "select_mode",
    "select_strategy",
]
