"""Tests for shared environment map registration."""

from connforge.codegen.namespace import allocate
from connforge.codegen.registration import (
    emit_registration,
    lookup_statement,
    registration_statements,
)
from connforge.codegen.sink import EmissionPlan


def test_registration_publishes_connection_and_url():
    statements = registration_statements(allocate("c1"))

    assert statements[:2] == (
        'global_map["conn_c1"] = conn_c1',
        'global_map["url_c1"] = url_c1',
    )


def test_credentials_are_never_published():
    """User and password only appear as commented-out entries."""
    statements = registration_statements(allocate("c1"))

    for statement in statements:
        if "user_c1" in statement or "pass_c1" in statement:
            assert statement.startswith("# ")


def test_emit_registration_appends_to_plan():
    plan = EmissionPlan("c1")
    plan.emit("conn_c1 = None")
    emit_registration(plan, allocate("c1"))

    assert len(plan) == 5
    assert plan.lines[1] == 'global_map["conn_c1"] = conn_c1'


def test_lookup_reads_the_other_stage_key():
    assert (
        lookup_statement(allocate("tJDBCCommit_1"), "tJDBCConnection_1")
        == 'conn_tJDBCCommit_1 = global_map.get("conn_tJDBCConnection_1")'
    )
