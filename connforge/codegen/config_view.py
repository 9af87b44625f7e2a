"""Read-only lookup over a stage's parameters and the pipeline globals."""

from typing import Any, Mapping, Optional

from connforge.config.models import PipelineGlobals, StageConfig


class ConfigView:
    """Flat key -> value/boolean lookup used by every emitter component.

    Missing keys read as blank strings or ``False``; nothing here raises for
    an absent parameter.
    """

    def __init__(self, stage: StageConfig, pipeline: Optional[PipelineGlobals] = None):
        self.stage = stage
        self.pipeline = pipeline or PipelineGlobals()

    @classmethod
    def from_mapping(
        cls,
        cid: str,
        params: Optional[Mapping[str, Any]] = None,
        log_enabled: bool = False,
        encrypted: Optional[Mapping[str, str]] = None,
        component: str = "",
        kind: str = "connection",
    ) -> "ConfigView":
        """Build a view straight from raw parameters, without editor defaults."""
        stage = StageConfig(
            cid=cid,
            params=params or {},
            encrypted=encrypted or {},
            kind=kind,
            component=component,
        )
        return cls(stage, PipelineGlobals(log_enabled=log_enabled))

    @property
    def cid(self) -> str:
        return self.stage.cid

    @property
    def component(self) -> str:
        return self.stage.component_name

    @property
    def log_enabled(self) -> bool:
        return self.pipeline.log_enabled

    def get(self, key: str) -> str:
        """Return the parameter as a string, ``""`` when missing."""
        value = self.stage.params.get(key)
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def flag(self, key: str) -> bool:
        """Return ``True`` only for an explicit true value."""
        value = self.stage.params.get(key)
        if isinstance(value, bool):
            return value
        return self.get(key).strip().lower() == "true"

    def is_blank(self, key: str) -> bool:
        return not self.get(key).strip()

    def can_encrypt(self, key: str) -> bool:
        """Whether ``key`` is a field stored in encrypted form."""
        return key in self.stage.encrypted

    def encrypted_value(self, key: str) -> str:
        return self.stage.encrypted.get(key, "")

    def __contains__(self, key: str) -> bool:
        return key in self.stage.params

    def __repr__(self) -> str:
        return f"ConfigView(cid={self.cid!r}, log_enabled={self.log_enabled})"
