"""Job definition models and loading."""

from .loader import load_job, load_job_from_dict
from .models import (
    CLOSE,
    COMMIT,
    CONNECTION,
    ROLLBACK,
    STAGE_KINDS,
    JobDefinition,
    PipelineGlobals,
    StageConfig,
)

__all__ = [
    "CLOSE",
    "COMMIT",
    "CONNECTION",
    "ROLLBACK",
    "STAGE_KINDS",
    "JobDefinition",
    "PipelineGlobals",
    "StageConfig",
    "load_job",
    "load_job_from_dict",
]
