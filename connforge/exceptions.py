"""Error hierarchy for the code generation engine.

Emission itself performs no configuration validation, so these errors only
signal broken engine invariants (a planner leaving its route, a plan appended
to after flush) or problems loading job definitions.
"""

from typing import Any, Dict, List, Optional


class ConnforgeError(Exception):
    """Base class for all connforge errors.

    Provides consistent error formatting and context management.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context information."""
        formatted = self.message

        if self.context:
            context_parts = []
            for key, value in self.context.items():
                if isinstance(value, (list, tuple)) and len(value) > 0:
                    context_parts.append(f"{key}: {', '.join(map(str, value))}")
                elif value:
                    context_parts.append(f"{key}: {value}")

            if context_parts:
                formatted += "\n\nContext:\n  - " + "\n  - ".join(context_parts)

        return formatted


class PlannerStateError(ConnforgeError):
    """Raised when the acquisition planner attempts a transition off its route."""

    def __init__(self, cid: str, mode: str, current: str, requested: str):
        self.cid = cid
        self.mode = mode
        self.current = current
        self.requested = requested
        super().__init__(
            f"Illegal planner transition {current} -> {requested}",
            {"stage": cid, "mode": mode},
        )


class EmissionPlanClosedError(ConnforgeError):
    """Raised when a statement is appended to an already flushed plan."""

    def __init__(self, cid: str):
        self.cid = cid
        super().__init__(
            "Emission plan has already been flushed", {"stage": cid}
        )


class UnknownStageKindError(ConnforgeError):
    """Raised when no generator is registered for a stage kind."""

    def __init__(self, cid: str, kind: str, known_kinds: List[str]):
        self.cid = cid
        self.kind = kind
        self.known_kinds = known_kinds
        super().__init__(
            f"Unknown stage kind '{kind}'",
            {"stage": cid, "known_kinds": known_kinds},
        )


class JobConfigError(ConnforgeError):
    """Raised when a job definition cannot be loaded.

    This is the configuration subsystem failing, not the emitter: the emitter
    accepts whatever configuration it is given.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        stage: Optional[str] = None,
        details: Optional[List[str]] = None,
    ):
        self.path = path
        self.stage = stage
        self.details = details or []
        context: Dict[str, Any] = {}
        if path:
            context["file"] = path
        if stage:
            context["stage"] = stage
        if details:
            context["details"] = details
        super().__init__(message, context)
