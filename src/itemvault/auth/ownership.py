"""Ownership guard — per-account scoping for every record operation.

Learn: There is exactly one place that decides whether an identity may
touch a record. Create stamps the owner, list filters by owner, and
get/update/delete re-fetch the record and compare owners before doing
anything. Routes never build their own owner checks.
"""

from typing import Any

from itemvault.auth.jwt import Identity
from itemvault.errors import ForbiddenError, NotFoundError


class OwnershipGuard:
    """Binds record access to one authenticated identity.

    Works with any model that has an ``owner_id`` column.
    """

    def __init__(self, identity: Identity):
        self.identity = identity

    @property
    def owner_id(self):
        return self.identity.account_id

    def stamp(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Return create fields with the owner forced to this identity."""
        stamped = {k: v for k, v in fields.items() if k not in ("owner", "owner_id")}
        stamped["owner_id"] = self.owner_id
        return stamped

    def scope(self, stmt, model):
        """Restrict a SELECT to rows owned by this identity."""
        return stmt.where(model.owner_id == self.owner_id)

    def check(self, record, kind: str = "Item"):
        """Return the record if this identity owns it.

        Raises NotFoundError if there is no record, ForbiddenError if it
        belongs to someone else.
        """
        if record is None:
            raise NotFoundError(f"{kind} not found")
        if record.owner_id != self.owner_id:
            raise ForbiddenError(f"{kind} belongs to another user")
        return record
