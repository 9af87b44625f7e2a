"""Integration tests executing generated job modules against a fake runtime."""

import logging
import sqlite3

import pytest

from connforge.codegen.generator import generate_job
from connforge.codegen.instrumentation import BatchMode, LifecycleInstrumentation
from connforge.codegen.sink import EmissionPlan
from connforge.config.loader import load_job_from_dict
from connforge.runtime import DataSourceNotFoundError, DbApiDriver, JobContext

from conftest import FakeDataSource, FakeDriver


def _run(document, context):
    job = load_job_from_dict(document, environ={})
    code = generate_job(job)
    namespace = {}
    exec(compile(code, f"{job.name}.py", "exec"), namespace)
    namespace["run"](context)
    return code


def _document(*stages, log_enabled=False):
    return {"job": "it", "globals": {"log_enabled": log_enabled}, "stages": list(stages)}


@pytest.fixture
def context(fake_driver):
    context = JobContext(default_driver=FakeDriver())
    context.register_driver("org.example.Driver", fake_driver)
    return context


DIRECT_STAGE = {
    "cid": "c1",
    "component": "tJDBCConnection",
    "params": {
        "driver_class": '"org.example.Driver"',
        "url": '"jdbc:example://host/orders"',
        "user": '"etl"',
        "password": '"secret"',
    },
}


@pytest.mark.parametrize("log_enabled", [False, True])
def test_direct_connection_is_registered(context, fake_driver, log_enabled):
    _run(_document(DIRECT_STAGE, log_enabled=log_enabled), context)

    (conn,) = fake_driver.connections
    assert context.global_map["conn_c1"] is conn
    assert context.global_map["url_c1"] == "jdbc:example://host/orders"
    assert (conn.url, conn.user, conn.password) == ("jdbc:example://host/orders", "etl", "secret")
    assert conn.autocommit is False
    assert "user_c1" not in context.global_map
    assert "pass_c1" not in context.global_map


@pytest.mark.parametrize("log_enabled", [False, True])
def test_commit_stage_uses_registered_connection(context, fake_driver, log_enabled):
    commit = {"cid": "k1", "kind": "commit", "params": {"connection": "c1", "close": True}}
    _run(_document(DIRECT_STAGE, commit, log_enabled=log_enabled), context)

    (conn,) = fake_driver.connections
    assert conn.calls == ["commit", "close"]
    assert conn.closed


def test_rollback_then_close(context, fake_driver):
    rollback = {"cid": "r1", "kind": "rollback", "params": {"connection": "c1"}}
    close = {"cid": "x1", "kind": "close", "params": {"connection": "c1"}}
    _run(_document(DIRECT_STAGE, rollback, close), context)

    assert fake_driver.connections[0].calls == ["rollback", "close"]


def test_transaction_stage_without_registered_connection_does_nothing(context):
    commit = {"cid": "k1", "kind": "commit", "params": {"connection": "c9"}}
    _run(_document(commit, log_enabled=True), context)

    assert context.global_map == {}


def test_generic_connection_uses_default_driver(context):
    _run(_document({"cid": "g1", "params": {"user": '"u"'}}), context)

    (conn,) = context.default_driver.connections
    assert context.global_map["conn_g1"] is conn
    assert context.global_map["url_g1"] is None
    assert conn.user == "u"
    assert conn.password is None
    assert conn.autocommit is False


def test_generic_connection_passes_configured_url():
    context = JobContext(default_driver=DbApiDriver("sqlite3", sqlite3))
    _run(_document({"cid": "g1", "params": {"url": '":memory:"'}}), context)

    conn = context.connection("g1")
    assert context.global_map["url_g1"] == ":memory:"
    assert conn.metadata.url == ":memory:"
    assert conn.execute("SELECT 1").fetchone() == (1,)


def test_encrypted_password_is_decrypted(fake_driver):
    context = JobContext(password_decryptor=lambda value: value.replace("enc:", ""))
    context.register_driver("org.example.Driver", fake_driver)
    stage = dict(DIRECT_STAGE, encrypted={"password": '"enc:hunter2"'})
    _run(_document(stage), context)

    assert fake_driver.connections[0].password == "hunter2"


def test_shared_connection_is_reused_across_stages(context, fake_driver):
    def shared(cid):
        params = dict(DIRECT_STAGE["params"])
        params.update(use_shared_connection=True, shared_connection_name='"pool"')
        return {"cid": cid, "params": params}

    _run(_document(shared("s1"), shared("s2"), log_enabled=True), context)

    assert len(fake_driver.connections) == 1
    assert context.global_map["conn_s1"] is context.global_map["conn_s2"]
    assert context.shared_connections.names() == ["pool"]


def test_alias_connection(context):
    data_source = FakeDataSource()
    context.register_data_source("orders_ds", data_source)
    stage = {
        "cid": "a1",
        "params": {"specify_datasource_alias": True, "datasource_alias": '"orders_ds"'},
    }
    _run(_document(stage, log_enabled=True), context)

    assert context.global_map["conn_a1"] is data_source.connection
    assert data_source.connection.autocommit is False


def test_missing_alias_raises(context):
    stage = {
        "cid": "a1",
        "params": {"specify_datasource_alias": True, "datasource_alias": '"missing_ds"'},
    }

    with pytest.raises(DataSourceNotFoundError) as exc_info:
        _run(_document(stage), context)
    assert exc_info.value.alias == "missing_ds"
    assert "conn_a1" not in context.global_map


class FakeStatement:
    def __init__(self, codes):
        self.codes = codes

    def execute_batch(self):
        return list(self.codes)


def _execute_batch(make_view, **params):
    view = make_view(cid="c1", **params)
    plan = EmissionPlan("c1")
    LifecycleInstrumentation(view, plan).execute_batch(BatchMode.COUNTED)
    namespace = {"stmt_c1": FakeStatement([2, -2, 3])}
    exec("\n".join(plan.lines), namespace)
    return namespace["count_sum_c1"]


def test_counted_batch_ignores_unknown_codes(make_view):
    assert _execute_batch(make_view, data_action="UPDATE") == 5


def test_counted_bulk_insert_counts_statements(make_view):
    assert _execute_batch(make_view, component="tMysqlOutput", data_action="INSERT") == 3



def test_sqlite_job_end_to_end():
    """A real DB-API driver loaded by module name."""
    connection = {
        "cid": "c1",
        "params": {"driver_class": '"sqlite3"', "url": '":memory:"'},
    }
    commit = {"cid": "k1", "kind": "commit", "params": {"connection": "c1", "close": True}}
    context = JobContext()
    _run(_document(connection, commit, log_enabled=True), context)

    conn = context.connection("c1")
    assert conn.metadata.url == ":memory:"
    assert conn.closed


@pytest.mark.parametrize("log_enabled", [False, True])
def test_commit_with_data_action_reports_line_count(context, fake_driver, caplog, log_enabled):
    commit = {
        "cid": "k1",
        "kind": "commit",
        "params": {"connection": "c1", "data_action": "INSERT"},
    }
    context.global_map["c1_NB_LINE"] = 42
    with caplog.at_level(logging.DEBUG, logger="connforge.job.it"):
        _run(_document(DIRECT_STAGE, commit, log_enabled=log_enabled), context)

    assert fake_driver.connections[0].calls == ["commit"]
    expected = "k1 - Connection 'c1' starting to commit 42 records."
    assert (expected in caplog.messages) is log_enabled


def test_logged_sqlite_commit_with_data_action(caplog):
    connection = {
        "cid": "c1",
        "params": {"driver_class": '"sqlite3"', "url": '":memory:"'},
    }
    commit = {
        "cid": "k1",
        "kind": "commit",
        "params": {"connection": "c1", "data_action": "INSERT"},
    }
    context = JobContext()

    with caplog.at_level(logging.DEBUG, logger="connforge.job.it"):
        _run(_document(connection, commit, log_enabled=True), context)

    assert "k1 - Connection 'c1' starting to commit 0 records." in caplog.messages
