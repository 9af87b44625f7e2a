"""Tests for stage-scoped identifier allocation."""

from connforge.codegen.namespace import StageNamespace, allocate, connection_key


def test_names_carry_cid_suffix():
    ns = allocate("tJDBCConnection_1")

    assert ns.conn == "conn_tJDBCConnection_1"
    assert ns.url == "url_tJDBCConnection_1"
    assert ns.db_pwd == "db_pwd_tJDBCConnection_1"
    assert ns.decrypted_password == "decrypted_password_tJDBCConnection_1"
    for name in ns.all_names():
        assert name.endswith("_tJDBCConnection_1")


def test_allocation_is_deterministic():
    assert allocate("c1") == allocate("c1")
    assert allocate("c1").all_names() == StageNamespace("c1").all_names()


def test_distinct_cids_never_share_a_name():
    """Two stages in one job can never collide on a generated local."""
    first = set(allocate("tJDBCConnection_1").all_names())
    second = set(allocate("tJDBCConnection_2").all_names())

    assert first.isdisjoint(second)


def test_names_within_a_stage_are_unique():
    names = allocate("c1").all_names()
    assert len(names) == len(set(names))


def test_registration_keys():
    ns = allocate("c1")

    assert ns.conn_key == "conn_c1"
    assert ns.url_key == "url_c1"
    assert ns.user_key == "user_c1"
    assert ns.pass_key == "pass_c1"
    assert connection_key("c1") == ns.conn_key
