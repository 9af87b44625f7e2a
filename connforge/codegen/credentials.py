"""Credential resolution for connection stages."""

from enum import Enum
from typing import Optional, Tuple

from connforge.codegen.config_view import ConfigView
from connforge.codegen.namespace import StageNamespace, allocate

PASSWORD_FIELD = "password"
USER_FIELD = "user"


class PasswordMode(Enum):
    ABSENT = "absent"
    PLAIN = "plain"
    ENCRYPTED = "encrypted"


class CredentialResolver:
    """Decides how the password variable is bound and emits the bindings.

    Exactly one of the three password branches fires per stage, and
    ``db_pwd_<cid>`` is bound exactly once.
    """

    def __init__(
        self,
        view: ConfigView,
        namespace: Optional[StageNamespace] = None,
        field: str = PASSWORD_FIELD,
    ):
        self.view = view
        self.ns = namespace or allocate(view.cid)
        self.field = field

    def mode(self) -> PasswordMode:
        if self.view.is_blank(self.field):
            return PasswordMode.ABSENT
        if self.view.can_encrypt(self.field):
            return PasswordMode.ENCRYPTED
        return PasswordMode.PLAIN

    def user_binding(self) -> str:
        user = self.view.get(USER_FIELD)
        return f"{self.ns.db_user} = {user if user.strip() else 'None'}"

    def password_bindings(self) -> Tuple[str, ...]:
        ns = self.ns
        mode = self.mode()
        if mode is PasswordMode.ABSENT:
            return (f"{ns.db_pwd} = None",)
        if mode is PasswordMode.ENCRYPTED:
            source = f"context.decrypt_password({self.view.encrypted_value(self.field)})"
        else:
            source = self.view.get(self.field)
        return (
            f"{ns.decrypted_password} = {source}",
            f"{ns.db_pwd} = {ns.decrypted_password}",
        )

    def statements(self) -> Tuple[str, ...]:
        """User binding followed by the password bindings."""
        return (self.user_binding(),) + self.password_bindings()
