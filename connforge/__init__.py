"""connforge - code generator for database connection pipeline stages."""

__version__ = "0.1.0"
__package_name__ = "connforge"

from .exceptions import (
    ConnforgeError,
    EmissionPlanClosedError,
    JobConfigError,
    PlannerStateError,
    UnknownStageKindError,
)

__all__ = [
    "ConnforgeError",
    "EmissionPlanClosedError",
    "JobConfigError",
    "PlannerStateError",
    "UnknownStageKindError",
]
