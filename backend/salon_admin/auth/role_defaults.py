"""
Role Defaults - default permission sets for each admin role.

ROLE_DEFAULT_PERMISSIONS is the only copy of the defaults table. super_admin
has no entry: it always resolves to the full catalog inside the resolver.
"""
from __future__ import annotations

from enum import Enum
from typing import Final

from .permission_catalog import (
    ALL_PERMISSIONS,
    ADMIN_PERMISSIONS,
    PermissionKey,
    validate_permission,
)


class AdminRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MODERATOR = "moderator"
    SUPPORT = "support"


# Roles a provisioning workflow may assign
ASSIGNABLE_ROLES: Final[tuple[AdminRole, ...]] = (
    AdminRole.ADMIN,
    AdminRole.MODERATOR,
    AdminRole.SUPPORT,
)

ROLE_DEFAULT_PERMISSIONS: Final[dict[AdminRole, frozenset[str]]] = {
    # Everything except admin team management and low-level system config
    AdminRole.ADMIN: frozenset(
        key
        for key in ALL_PERMISSIONS
        if key not in ADMIN_PERMISSIONS and key != PermissionKey.SYSTEM_CONFIG.value
    ),

    AdminRole.MODERATOR: frozenset({
        PermissionKey.USERS_VIEW.value,
        PermissionKey.USERS_SUSPEND.value,
        PermissionKey.BUSINESSES_VIEW.value,
        PermissionKey.CONTENT_VIEW.value,
        PermissionKey.CONTENT_MODERATE.value,
        PermissionKey.CONTENT_DELETE.value,
    }),

    # Read-only access
    AdminRole.SUPPORT: frozenset({
        PermissionKey.USERS_VIEW.value,
        PermissionKey.BUSINESSES_VIEW.value,
        PermissionKey.CONTENT_VIEW.value,
    }),
}


def parse_role(value: object) -> AdminRole | None:
    """Return the AdminRole for ``value``, or None when it is not a known role."""
    if isinstance(value, AdminRole):
        return value
    if not isinstance(value, str):
        return None
    try:
        return AdminRole(value.strip().lower())
    except ValueError:
        return None


def defaults_for(role: AdminRole | str) -> frozenset[str]:
    """
    Default permission set for a non-super role.

    Raises:
        ValueError: For super_admin (resolved by the resolver, not this table)
            and for unknown roles
    """
    parsed = parse_role(role)
    if parsed is None:
        raise ValueError(f"Invalid role '{role}'")
    if parsed is AdminRole.SUPER_ADMIN:
        raise ValueError("super_admin has no default table entry; it resolves to the full catalog")
    return ROLE_DEFAULT_PERMISSIONS[parsed]


def _validate_defaults() -> None:
    errors = []

    if AdminRole.SUPER_ADMIN in ROLE_DEFAULT_PERMISSIONS:
        errors.append("super_admin must not have a defaults entry")

    for role in ASSIGNABLE_ROLES:
        permissions = ROLE_DEFAULT_PERMISSIONS.get(role)
        if not permissions:
            errors.append(f"Role '{role.value}' has no default permissions")
            continue
        for permission in permissions:
            try:
                validate_permission(permission)
            except ValueError as e:
                errors.append(f"Role '{role.value}' has invalid permission: {e}")

    if errors:
        raise RuntimeError(
            "Role defaults validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )


_validate_defaults()
