"""Loading job definitions from YAML files.

A job file looks like::

    job: load_orders
    globals:
      log_enabled: true
    variables:
      db_host: localhost
    stages:
      - cid: tJDBCConnection_1
        component: tJDBCConnection
        params:
          driver_class: '"org.postgresql.Driver"'
          url: '"jdbc:postgresql://${db_host}:5432/orders"'
          user: '"etl"'
          password: '"secret"'
      - cid: tJDBCCommit_1
        kind: commit
        params:
          connection: tJDBCConnection_1
          close: true
"""

import os
from typing import Any, Dict, List, Mapping, Optional

import yaml

from connforge.config.models import STAGE_KINDS, JobDefinition, PipelineGlobals, StageConfig
from connforge.config.variables import merge_sources, substitute_any
from connforge.exceptions import JobConfigError
from connforge.logging import get_logger

logger = get_logger(__name__)


def _read_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise JobConfigError("Job file not found", path=path)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            content = yaml.safe_load(handle)
    except yaml.YAMLError as e:
        raise JobConfigError("Job file is not valid YAML", path=path, details=[str(e)]) from e

    if content is None:
        raise JobConfigError("Job file is empty", path=path)
    if not isinstance(content, dict):
        raise JobConfigError("Job file must contain a mapping at the top level", path=path)
    return content


def load_job_from_dict(
    data: Dict[str, Any],
    variables: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    source_path: Optional[str] = None,
) -> JobDefinition:
    """Build a job definition from an already parsed mapping.

    Args:
        data: Parsed job document
        variables: Overrides taking priority over the file's variables
        environ: Environment to resolve variables from (defaults to os.environ)
        source_path: Path the document came from, for error messages

    Returns:
        JobDefinition with variables substituted and stages in file order

    Raises:
        JobConfigError: If the document is not shaped like a job or a cid
            repeats
    """
    file_vars = data.get("variables") or {}
    if not isinstance(file_vars, dict):
        raise JobConfigError("'variables' must be a mapping", path=source_path)

    resolved_vars = merge_sources(file_vars, variables, environ)
    document = substitute_any(
        {key: value for key, value in data.items() if key != "variables"},
        resolved_vars,
    )

    name = str(document.get("job") or "").strip()
    if not name:
        if source_path:
            name = os.path.splitext(os.path.basename(source_path))[0]
        else:
            raise JobConfigError("Job is missing required 'job' name")

    raw_stages = document.get("stages") or []
    if not isinstance(raw_stages, list):
        raise JobConfigError("'stages' must be a list", path=source_path)

    stages: List[StageConfig] = []
    seen = set()
    for index, raw_stage in enumerate(raw_stages):
        try:
            stage = StageConfig.from_dict(raw_stage)
        except ValueError as e:
            raise JobConfigError(
                f"Invalid stage at position {index + 1}", path=source_path, details=[str(e)]
            ) from e
        if stage.kind not in STAGE_KINDS:
            raise JobConfigError(
                f"Unknown stage kind '{stage.kind}'",
                path=source_path,
                stage=stage.cid,
                details=[f"Known kinds: {', '.join(STAGE_KINDS)}"],
            )
        if not stage.cid.isidentifier():
            raise JobConfigError(
                "Stage cid must be a valid Python identifier",
                path=source_path,
                stage=stage.cid,
            )
        # Generated variable names are only collision free for unique cids
        if stage.cid in seen:
            raise JobConfigError("Duplicate stage cid", path=source_path, stage=stage.cid)
        seen.add(stage.cid)
        stages.append(stage)

    globals_data = document.get("globals") or {}
    if not isinstance(globals_data, dict):
        raise JobConfigError("'globals' must be a mapping", path=source_path)

    logger.debug(f"Loaded job '{name}' with {len(stages)} stages")
    return JobDefinition(
        name=name,
        stages=tuple(stages),
        globals=PipelineGlobals.from_dict(globals_data),
        source_path=source_path,
    )


def load_job(
    path: str,
    variables: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> JobDefinition:
    """Load a job definition from a YAML file."""
    data = _read_yaml(path)
    return load_job_from_dict(data, variables=variables, environ=environ, source_path=path)
