"""Role assignment for new accounts."""

from auth.types import Role


class RolePolicy:
    """
    Decides the role of a newly created account from its email.

    An explicit allow-list wins. Otherwise, when the legacy rule is enabled,
    an email whose local part is 'admin' or that contains 'admin' anywhere
    is an administrator.
    """

    def __init__(self, admin_emails: list[str] | None = None, legacy_email_match: bool = True):
        self._admin_emails = {e.strip().lower() for e in (admin_emails or []) if e.strip()}
        self._legacy_email_match = legacy_email_match

    def role_for(self, email: str) -> Role:
        email = email.strip().lower()
        if email in self._admin_emails:
            return Role.ADMIN
        if self._legacy_email_match:
            local_part = email.split("@", 1)[0]
            if local_part == "admin" or "admin" in email:
                return Role.ADMIN
        return Role.USER
