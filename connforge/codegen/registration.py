"""Publication of a stage's connection into the shared environment map."""

from typing import Tuple

from connforge.codegen.namespace import StageNamespace, connection_key
from connforge.codegen.sink import EmissionPlan


def registration_statements(ns: StageNamespace) -> Tuple[str, ...]:
    """Statements publishing ``conn_<cid>`` and ``url_<cid>``.

    User and password are listed as commented-out entries only: they are
    available to the stage but deliberately not published.
    """
    return (
        f'global_map["{ns.conn_key}"] = {ns.conn}',
        f'global_map["{ns.url_key}"] = {ns.url}',
        f'# global_map["{ns.user_key}"] = {ns.db_user}',
        f'# global_map["{ns.pass_key}"] = {ns.db_pwd}',
    )


def emit_registration(plan: EmissionPlan, ns: StageNamespace) -> None:
    plan.emit_all(registration_statements(ns))


def lookup_statement(ns: StageNamespace, connection_cid: str) -> str:
    """Bind this stage's connection from the one registered by ``connection_cid``."""
    return f'{ns.conn} = global_map.get("{connection_key(connection_cid)}")'
