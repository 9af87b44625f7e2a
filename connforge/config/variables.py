"""Variable substitution for job definition files.

Job files may reference ``${NAME}`` or ``${NAME|default}`` anywhere in a
string value. Values come from, in increasing priority, the environment, the
file's own ``variables`` section and explicit overrides (``--var`` on the
command line).
"""

import os
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple

from connforge.logging import get_logger

logger = get_logger(__name__)


class VariableExpression(NamedTuple):
    """Parsed variable expression."""

    variable_name: str
    default_value: Optional[str]
    original_match: str
    span: Tuple[int, int]


@dataclass
class ParseResult:
    """Result of variable parsing."""

    expressions: List[VariableExpression]
    has_variables: bool


class VariableParser:
    """Single place where ``${...}`` references are recognised."""

    VARIABLE_PATTERN = re.compile(r"\$\{([^}|]+)(?:\|([^}]+))?\}")

    @classmethod
    def parse_expression(cls, match: re.Match) -> VariableExpression:
        var_name = match.group(1).strip()
        default = match.group(2).strip() if match.group(2) else None

        if default and cls._is_quoted(default):
            default = default[1:-1]

        return VariableExpression(
            variable_name=var_name,
            default_value=default,
            original_match=match.group(0),
            span=match.span(),
        )

    @classmethod
    def find_variables(cls, text: str) -> ParseResult:
        if not text:
            return ParseResult(expressions=[], has_variables=False)

        expressions = [
            cls.parse_expression(match)
            for match in cls.VARIABLE_PATTERN.finditer(text)
        ]
        expressions = [expr for expr in expressions if expr.variable_name]
        return ParseResult(expressions=expressions, has_variables=bool(expressions))

    @classmethod
    def _is_quoted(cls, value: str) -> bool:
        return (value.startswith('"') and value.endswith('"')) or (
            value.startswith("'") and value.endswith("'")
        )


def merge_sources(
    file_vars: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Merge variable sources, later sources winning."""
    merged: Dict[str, Any] = dict(os.environ if environ is None else environ)
    merged.update(file_vars or {})
    merged.update(overrides or {})
    return merged


def substitute_text(text: str, variables: Mapping[str, Any]) -> str:
    """Replace every ``${...}`` in ``text``.

    Unresolved references without a default are left untouched and logged.
    """
    result = VariableParser.find_variables(text)
    if not result.has_variables:
        return text

    # Replace right to left so earlier spans stay valid
    for expr in reversed(result.expressions):
        if expr.variable_name in variables:
            value = str(variables[expr.variable_name])
        elif expr.default_value is not None:
            value = expr.default_value
        else:
            logger.warning(f"Variable '{expr.variable_name}' is not defined")
            continue
        start, end = expr.span
        text = text[:start] + value + text[end:]
    return text


def substitute_any(value: Any, variables: Mapping[str, Any]) -> Any:
    """Substitute recursively through dicts, lists and strings."""
    if isinstance(value, str):
        return substitute_text(value, variables)
    if isinstance(value, dict):
        return {key: substitute_any(item, variables) for key, item in value.items()}
    if isinstance(value, list):
        return [substitute_any(item, variables) for item in value]
    return value


def parse_assignments(assignments: List[str]) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` pairs given on the command line.

    Raises:
        ValueError: If an assignment has no ``=``
    """
    parsed = {}
    for assignment in assignments:
        if "=" not in assignment:
            raise ValueError(f"Invalid variable assignment '{assignment}', expected KEY=VALUE")
        key, value = assignment.split("=", 1)
        parsed[key.strip()] = value
    return parsed
