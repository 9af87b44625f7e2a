"""Declarative job and stage models.

These are immutable snapshots handed to the code generator. Parameter values
are target-code expressions exactly as the pipeline editor bound them, so a
literal URL is stored with its quotes: ``'"jdbc:example://host/db"'``.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

CONNECTION = "connection"
COMMIT = "commit"
ROLLBACK = "rollback"
CLOSE = "close"

STAGE_KINDS = (CONNECTION, COMMIT, ROLLBACK, CLOSE)

# Values the editor fills in for declared-but-untouched connection parameters
COMPONENT_DEFAULTS: Dict[str, Dict[str, Any]] = {
    CONNECTION: {"use_transaction": True, "auto_commit": False},
    COMMIT: {"close": False},
    ROLLBACK: {"close": False},
    CLOSE: {},
}


def _freeze(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class StageConfig:
    """Snapshot of one pipeline stage's declared parameters."""

    cid: str
    params: Mapping[str, Any] = field(default_factory=dict)
    encrypted: Mapping[str, str] = field(default_factory=dict)
    kind: str = CONNECTION
    component: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", _freeze(self.params))
        object.__setattr__(self, "encrypted", _freeze(self.encrypted))

    @property
    def component_name(self) -> str:
        """Component family name, falling back to the instance id."""
        return self.component or self.cid

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StageConfig":
        """Create a StageConfig from a stage dictionary.

        Args:
            data: Stage dictionary with ``cid`` and optional ``kind``,
                ``component``, ``params`` and ``encrypted`` entries

        Returns:
            StageConfig instance with component defaults applied

        Raises:
            ValueError: If the dictionary is not shaped like a stage
        """
        if not isinstance(data, dict):
            raise ValueError("Stage configuration must be a dictionary")

        cid = data.get("cid")
        if not cid or not isinstance(cid, str):
            raise ValueError("Stage is missing required 'cid' field")

        kind = str(data.get("kind", CONNECTION)).lower()
        params = data.get("params") or {}
        if not isinstance(params, dict):
            raise ValueError(f"Stage '{cid}' params must be a dictionary")
        encrypted = data.get("encrypted") or {}
        if not isinstance(encrypted, dict):
            raise ValueError(f"Stage '{cid}' encrypted must be a dictionary")

        merged = {**COMPONENT_DEFAULTS.get(kind, {}), **params}
        return cls(
            cid=cid,
            params=merged,
            encrypted={key: str(value) for key, value in encrypted.items()},
            kind=kind,
            component=str(data.get("component", "") or ""),
        )


@dataclass(frozen=True)
class PipelineGlobals:
    """Pipeline-wide parameters visible to every stage."""

    log_enabled: bool = False
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", _freeze(self.extra))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PipelineGlobals":
        data = dict(data or {})
        log_enabled = data.pop("log_enabled", False)
        if isinstance(log_enabled, str):
            log_enabled = log_enabled.strip().lower() == "true"
        return cls(log_enabled=bool(log_enabled), extra=data)


@dataclass(frozen=True)
class JobDefinition:
    """An ordered set of stages compiled into one generated program."""

    name: str
    stages: Tuple[StageConfig, ...] = ()
    globals: PipelineGlobals = field(default_factory=PipelineGlobals)
    source_path: Optional[str] = None

    @property
    def cids(self) -> Tuple[str, ...]:
        return tuple(stage.cid for stage in self.stages)
