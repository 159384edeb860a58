"""
Principal - the authenticated administrative identity.

A principal's permission override is a tagged union rather than a nullable
list, so "no override" and "override with nothing" cannot be confused:

    UseRoleDefaults()          -> role defaults apply
    UseCustomSet(frozenset())  -> explicitly no permissions
    UseCustomSet({...})        -> exactly these permissions

On the wire the same tri-state is ``null`` versus a (possibly empty) list.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Union

from .permission_catalog import in_catalog_order
from .role_defaults import AdminRole, parse_role

logger = logging.getLogger("salon_admin.rbac")


@dataclass(frozen=True, slots=True)
class UseRoleDefaults:
    pass


@dataclass(frozen=True, slots=True)
class UseCustomSet:
    keys: frozenset[str] = frozenset()

    @classmethod
    def of(cls, keys: Iterable[str]) -> "UseCustomSet":
        return cls(frozenset(keys))


PermissionOverride = Union[UseRoleDefaults, UseCustomSet]


def permissions_from_wire(value: Any) -> list[str] | None:
    """Normalize a wire ``permissions`` value, keeping ``null`` distinct from a list."""
    if value is None:
        return None
    if isinstance(value, (list, tuple, set, frozenset)):
        return [key for key in value if isinstance(key, str)]
    # Unreadable override: fail closed with an explicit empty set
    logger.warning("Malformed permissions value %r treated as an empty override", value)
    return []


def override_from_wire(value: Any) -> PermissionOverride:
    keys = permissions_from_wire(value)
    if keys is None:
        return UseRoleDefaults()
    return UseCustomSet(frozenset(keys))


def override_to_wire(override: PermissionOverride) -> list[str] | None:
    if isinstance(override, UseCustomSet):
        return list(in_catalog_order(override.keys))
    return None


def parse_collaborator_flag(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    # Unknown flag shapes are treated as restricted accounts
    logger.warning("Malformed is_admin_collaborator value %r treated as collaborator", value)
    return True


@dataclass(frozen=True, slots=True)
class Principal:
    id: int | str | None = None
    name: str = ""
    email: str = ""
    role: AdminRole | None = None
    is_collaborator: bool = False
    custom_permissions: PermissionOverride = field(default_factory=UseRoleDefaults)

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls()

    @classmethod
    def from_session_user(cls, user: Mapping[str, Any]) -> "Principal":
        """
        Build a principal from the platform session user (``/auth/me``).

        ``admin_role`` carries the admin tier. Accounts whose platform role is
        ``admin`` but that predate admin tiers carry no ``admin_role`` and are
        treated as ``admin``. Any other platform user has no admin role.
        """
        role = parse_role(user.get("admin_role"))
        if role is None and user.get("admin_role") is None and user.get("role") == "admin":
            role = AdminRole.ADMIN
        return cls(
            id=user.get("id"),
            name=str(user.get("name") or ""),
            email=str(user.get("email") or ""),
            role=role,
            is_collaborator=parse_collaborator_flag(user.get("is_admin_collaborator")),
            custom_permissions=override_from_wire(user.get("permissions")),
        )

    @classmethod
    def from_admin_record(cls, record: Mapping[str, Any]) -> "Principal":
        """Build a principal from an admin-directory record."""
        return cls(
            id=record.get("id"),
            name=str(record.get("name") or ""),
            email=str(record.get("email") or ""),
            role=parse_role(record.get("admin_role")),
            is_collaborator=parse_collaborator_flag(record.get("is_admin_collaborator")),
            custom_permissions=override_from_wire(record.get("permissions")),
        )

    @property
    def has_custom_permissions(self) -> bool:
        return isinstance(self.custom_permissions, UseCustomSet)

    def with_override(self, override: PermissionOverride) -> "Principal":
        return replace(self, custom_permissions=override)

