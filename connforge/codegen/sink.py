"""Emission plans and the ordered code sink.

An ``EmissionPlan`` collects one stage's statements in order. It is append
only and is flushed to the ``CodeSink`` exactly once, after which it refuses
further statements. The sink keeps flushed fragments in arrival order and
renders them, optionally wrapped in the job module template.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from connforge.exceptions import EmissionPlanClosedError
from connforge.logging import get_logger

logger = get_logger(__name__)

INDENT = "    "

MODULE_TEMPLATE = '''"""Generated by connforge for job '{job_name}'."""
import logging

from connforge.runtime import DataSourceNotFoundError, JobContext, connection_metadata

log = logging.getLogger("connforge.job.{job_name}")


def run(context: JobContext) -> None:
    global_map = context.global_map
{body}
'''


class EmissionPlan:
    """Ordered, append-only statement list for one stage."""

    def __init__(self, cid: str, component: str = ""):
        self.cid = cid
        self.component = component or cid
        self._lines: List[Tuple[int, str]] = []
        self._depth = 0
        self._closed = False

    def emit(self, *statements: str) -> None:
        """Append statements at the current block depth."""
        if self._closed:
            raise EmissionPlanClosedError(self.cid)
        for statement in statements:
            self._lines.append((self._depth, statement))

    def emit_all(self, statements: Iterable[str]) -> None:
        self.emit(*statements)

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        """Emit ``header`` and indent everything emitted inside the block."""
        self.emit(header)
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def lines(self) -> Tuple[str, ...]:
        """Statements rendered with their block indentation."""
        return tuple(
            (INDENT * depth + text) if text else "" for depth, text in self._lines
        )

    def flush(self, sink: "CodeSink") -> None:
        """Hand the complete plan to ``sink`` and close it."""
        if self._closed:
            raise EmissionPlanClosedError(self.cid)
        self._closed = True
        sink.write(Fragment(self.cid, self.component, self.lines))
        logger.debug(f"Flushed {len(self._lines)} statements for stage {self.cid}")

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)


@dataclass(frozen=True)
class Fragment:
    """One stage's flushed output."""

    cid: str
    component: str
    lines: Tuple[str, ...]

    def render(self, depth: int = 0) -> str:
        prefix = INDENT * depth
        header = f"{prefix}# {self.cid} ({self.component})"
        body = [(prefix + line) if line else "" for line in self.lines]
        return "\n".join([header] + body)


class CodeSink:
    """Ordered destination of flushed emission plans."""

    def __init__(self):
        self._fragments: List[Fragment] = []

    def write(self, fragment: Fragment) -> None:
        self._fragments.append(fragment)

    @property
    def fragments(self) -> Tuple[Fragment, ...]:
        return tuple(self._fragments)

    def statements(self) -> List[str]:
        """All statement lines in emission order, fragment headers excluded."""
        return [line for fragment in self._fragments for line in fragment.lines]

    def render(self, depth: int = 0) -> str:
        """Render every fragment, separated by blank lines."""
        return "\n\n".join(fragment.render(depth) for fragment in self._fragments)

    def render_module(self, job_name: str) -> str:
        """Render the fragments as the body of the job's ``run`` function."""
        body = self.render(depth=1) if self._fragments else INDENT + "pass"
        return MODULE_TEMPLATE.format(job_name=job_name, body=body)

    def __len__(self) -> int:
        return len(self._fragments)
