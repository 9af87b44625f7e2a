"""Stage and job level code generation entry points.

A job is generated by running each stage's generator, strictly in declared
order, against one shared ``CodeSink``. Stages never see each other's plans;
the only coupling between them is the ``conn_<cid>`` key a connection stage
registers and a transactional stage looks up at run time.
"""

from typing import Callable, Dict, Optional

from connforge.codegen.config_view import ConfigView
from connforge.codegen.instrumentation import LifecycleInstrumentation
from connforge.codegen.namespace import allocate
from connforge.codegen.planner import ConnectionPlanner
from connforge.codegen.registration import lookup_statement
from connforge.codegen.sink import CodeSink, EmissionPlan
from connforge.config.models import (
    CLOSE,
    COMMIT,
    CONNECTION,
    ROLLBACK,
    JobDefinition,
    PipelineGlobals,
    StageConfig,
)
from connforge.exceptions import UnknownStageKindError
from connforge.logging import get_logger

logger = get_logger(__name__)

StageGeneratorFn = Callable[[ConfigView, CodeSink], EmissionPlan]


def generate_connection(view: ConfigView, sink: CodeSink) -> EmissionPlan:
    return ConnectionPlanner(view).run(sink)


def _generate_transaction(view: ConfigView, sink: CodeSink, operation: str) -> EmissionPlan:
    ns = allocate(view.cid)
    plan = EmissionPlan(view.cid, view.component)
    instrumentation = LifecycleInstrumentation(view, plan, ns)

    connection = view.get("connection").strip()
    plan.emit(lookup_statement(ns, connection))
    instrumentation.use_existing_connection()
    with plan.block(f"if {ns.conn} is not None:"):
        if operation == "commit" and instrumentation.data_action:
            plan.emit(f'{ns.commit_counter} = global_map.get("{connection}_NB_LINE", 0)')
        getattr(instrumentation, operation)()
        if operation != "close" and view.flag("close"):
            instrumentation.close()

    plan.flush(sink)
    return plan


def generate_commit(view: ConfigView, sink: CodeSink) -> EmissionPlan:
    return _generate_transaction(view, sink, "commit")


def generate_rollback(view: ConfigView, sink: CodeSink) -> EmissionPlan:
    return _generate_transaction(view, sink, "rollback")


def generate_close(view: ConfigView, sink: CodeSink) -> EmissionPlan:
    return _generate_transaction(view, sink, "close")


STAGE_GENERATORS: Dict[str, StageGeneratorFn] = {
    CONNECTION: generate_connection,
    COMMIT: generate_commit,
    ROLLBACK: generate_rollback,
    CLOSE: generate_close,
}


class JobGenerator:
    """Generates the Python module implementing a whole job."""

    def __init__(self, generators: Optional[Dict[str, StageGeneratorFn]] = None):
        self.generators = dict(generators or STAGE_GENERATORS)

    def generate_stage(
        self,
        stage: StageConfig,
        sink: CodeSink,
        pipeline: Optional[PipelineGlobals] = None,
    ) -> EmissionPlan:
        generator = self.generators.get(stage.kind)
        if generator is None:
            raise UnknownStageKindError(stage.cid, stage.kind, sorted(self.generators))
        return generator(ConfigView(stage, pipeline), sink)

    def generate_sink(self, job: JobDefinition) -> CodeSink:
        """Run every stage of ``job`` in order into a fresh sink."""
        sink = CodeSink()
        for stage in job.stages:
            plan = self.generate_stage(stage, sink, job.globals)
            logger.debug(f"Stage {stage.cid} ({stage.kind}) emitted {len(plan)} statements")
        logger.debug(f"Job '{job.name}' generated {len(sink)} stage fragments")
        return sink

    def generate(self, job: JobDefinition) -> str:
        """Render ``job`` as a complete Python module."""
        return self.generate_sink(job).render_module(job.name)


def generate_stage_code(stage: StageConfig, pipeline: Optional[PipelineGlobals] = None) -> str:
    """Generate the statements of a single stage as text."""
    sink = CodeSink()
    JobGenerator().generate_stage(stage, sink, pipeline)
    return "\n".join(sink.statements())


def generate_job(job: JobDefinition) -> str:
    return JobGenerator().generate(job)
