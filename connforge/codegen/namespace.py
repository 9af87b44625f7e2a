"""Stage-scoped identifier allocation.

Every local a stage's generated code introduces carries the stage's ``cid``
as suffix. Uniqueness of the cid itself is the caller's guarantee; no table of
issued names is kept.
"""

from dataclasses import dataclass

CONN_KEY_PREFIX = "conn_"
URL_KEY_PREFIX = "url_"


@dataclass(frozen=True)
class StageNamespace:
    """Generated variable names for one stage."""

    cid: str

    def _name(self, prefix: str) -> str:
        return f"{prefix}_{self.cid}"

    @property
    def conn(self) -> str:
        return self._name("conn")

    @property
    def url(self) -> str:
        return self._name("url")

    @property
    def driver_class(self) -> str:
        return self._name("driver_class")

    @property
    def driver(self) -> str:
        return self._name("driver")

    @property
    def db_user(self) -> str:
        return self._name("db_user")

    @property
    def db_pwd(self) -> str:
        return self._name("db_pwd")

    @property
    def decrypted_password(self) -> str:
        return self._name("decrypted_password")

    @property
    def shared_connection_name(self) -> str:
        return self._name("shared_connection_name")

    @property
    def data_sources(self) -> str:
        return self._name("data_sources")

    @property
    def ds_alias(self) -> str:
        return self._name("ds_alias")

    @property
    def stmt(self) -> str:
        return self._name("stmt")

    @property
    def count_sum(self) -> str:
        return self._name("count_sum")

    @property
    def count_each(self) -> str:
        return self._name("count_each")

    @property
    def nb_line(self) -> str:
        return self._name("nb_line")

    @property
    def commit_counter(self) -> str:
        return self._name("commit_counter")

    @property
    def metadata(self) -> str:
        return self._name("metadata")

    @property
    def conn_key(self) -> str:
        """Shared-map key under which the connection is published."""
        return CONN_KEY_PREFIX + self.cid

    @property
    def url_key(self) -> str:
        return URL_KEY_PREFIX + self.cid

    @property
    def user_key(self) -> str:
        return "user_" + self.cid

    @property
    def pass_key(self) -> str:
        return "pass_" + self.cid

    def all_names(self) -> tuple:
        """Every local variable name this stage may introduce."""
        return (
            self.conn,
            self.url,
            self.driver_class,
            self.driver,
            self.db_user,
            self.db_pwd,
            self.decrypted_password,
            self.shared_connection_name,
            self.data_sources,
            self.ds_alias,
            self.stmt,
            self.count_sum,
            self.count_each,
            self.nb_line,
            self.commit_counter,
            self.metadata,
        )


def allocate(cid: str) -> StageNamespace:
    """Allocate the namespace for the stage identified by ``cid``."""
    return StageNamespace(cid)


def connection_key(cid: str) -> str:
    """Shared-map key of the connection registered by stage ``cid``."""
    return CONN_KEY_PREFIX + cid
