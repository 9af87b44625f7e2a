"""Pytest configuration for connforge tests."""

import os
import tempfile
from typing import Any, Dict, Generator, List, Optional

import pytest
import yaml

from connforge.codegen.config_view import ConfigView
from connforge.runtime.context import ConnectionMetadata


class FakeConnection:
    """DB-API style connection recording every call made on it."""

    def __init__(self, url=None, user=None, password=None):
        self.url = url
        self.user = user
        self.password = password
        self.metadata = ConnectionMetadata(user_name=user, url=url)
        self.autocommit = None
        self.closed = False
        self.calls: List[str] = []

    def commit(self):
        self.calls.append("commit")

    def rollback(self):
        self.calls.append("rollback")

    def close(self):
        self.calls.append("close")
        self.closed = True


class FakeDriver:
    """Driver handing out ``FakeConnection`` objects."""

    def __init__(self):
        self.connections: List[FakeConnection] = []

    def connect(self, url, user=None, password=None):
        conn = FakeConnection(url, user, password)
        self.connections.append(conn)
        return conn


class FakeDataSource:
    def __init__(self, connection: Optional[FakeConnection] = None):
        self.connection = connection or FakeConnection(url="jndi:orders")

    def get_connection(self):
        return self.connection


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield tmp_dir


@pytest.fixture
def make_view():
    """Factory for views built straight from raw parameters."""

    def _make(
        cid: str = "tJDBCConnection_1",
        log_enabled: bool = False,
        encrypted: Optional[Dict[str, str]] = None,
        component: str = "",
        kind: str = "connection",
        **params: Any,
    ) -> ConfigView:
        return ConfigView.from_mapping(
            cid,
            params,
            log_enabled=log_enabled,
            encrypted=encrypted,
            component=component,
            kind=kind,
        )

    return _make


@pytest.fixture
def write_job(temp_dir):
    """Write a job document to a YAML file and return its path."""

    def _write(document: Dict[str, Any], name: str = "job.yml") -> str:
        path = os.path.join(temp_dir, name)
        with open(path, "w") as f:
            yaml.dump(document, f)
        return path

    return _write


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def sample_job_document() -> Dict[str, Any]:
    """Connection stage followed by a commit that closes it."""
    return {
        "job": "load_orders",
        "globals": {"log_enabled": True},
        "variables": {"db_host": "localhost"},
        "stages": [
            {
                "cid": "tJDBCConnection_1",
                "component": "tJDBCConnection",
                "params": {
                    "driver_class": '"org.example.Driver"',
                    "url": '"jdbc:example://${db_host}/orders"',
                    "user": '"etl"',
                    "password": '"secret"',
                },
            },
            {
                "cid": "tJDBCCommit_1",
                "kind": "commit",
                "component": "tJDBCCommit",
                "params": {"connection": "tJDBCConnection_1", "close": True},
            },
        ],
    }
