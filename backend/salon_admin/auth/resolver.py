"""
Permission Resolver - computes what an admin principal may do.

Precedence is fixed:

    super_admin bypass > main admin bypass > custom override > role defaults

Resolution is pure and synchronous. It never raises: a principal with no
role or an unknown role holds no permissions, and keys outside the catalog
are ignored.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from .permission_catalog import FULL_CATALOG, in_catalog_order
from .principal import Principal, UseCustomSet
from .role_defaults import AdminRole, defaults_for, parse_role

logger = logging.getLogger("salon_admin.rbac")

_NO_PERMISSIONS: frozenset[str] = frozenset()


def _role_of(principal: Principal | None) -> AdminRole | None:
    if principal is None:
        return None
    return parse_role(principal.role)


def is_super_admin(principal: Principal | None) -> bool:
    return _role_of(principal) is AdminRole.SUPER_ADMIN


def is_main_admin(principal: Principal | None) -> bool:
    """An original ``admin`` account, as opposed to a provisioned collaborator."""
    return _role_of(principal) is AdminRole.ADMIN and not principal.is_collaborator


def is_collaborator(principal: Principal | None) -> bool:
    return principal is not None and _role_of(principal) is not None and principal.is_collaborator


def has_full_access(principal: Principal | None) -> bool:
    """True for the structural bypasses: super_admin and main admin."""
    return is_super_admin(principal) or is_main_admin(principal)


def has_admin_role(principal: Principal | None) -> bool:
    return _role_of(principal) is not None


def effective_permissions(principal: Principal | None) -> frozenset[str]:
    """
    Resolve the full set of permission keys a principal holds.

    Args:
        principal: The principal to resolve; None means not signed in

    Returns:
        frozenset[str]: Always a subset of the permission catalog
    """
    role = _role_of(principal)
    if role is None:
        if principal is not None and principal.role is not None:
            logger.debug("Unrecognized role %r resolves to no permissions", principal.role)
        return _NO_PERMISSIONS

    if role is AdminRole.SUPER_ADMIN:
        return FULL_CATALOG

    if role is AdminRole.ADMIN and not principal.is_collaborator:
        return FULL_CATALOG

    override = principal.custom_permissions
    if isinstance(override, UseCustomSet):
        return override.keys & FULL_CATALOG

    return defaults_for(role)


def has_permission(principal: Principal | None, permission: str) -> bool:
    return permission in effective_permissions(principal)


def has_any(principal: Principal | None, permissions: Iterable[str]) -> bool:
    """True when at least one key is held; an empty list is never satisfied."""
    return any(has_permission(principal, permission) for permission in permissions)


def has_all(principal: Principal | None, permissions: Iterable[str]) -> bool:
    """True when every key is held; an empty list is always satisfied."""
    return all(has_permission(principal, permission) for permission in permissions)


class PermissionResolver:
    """Permission checks bound to a single principal.

    Nothing is cached: every call resolves from the principal as it is now,
    so a gate evaluating several requirements sees one consistent answer
    without going stale across principal changes.
    """

    def __init__(self, principal: Principal | None):
        self.principal = principal

    def effective_permissions(self) -> frozenset[str]:
        return effective_permissions(self.principal)

    def sorted_permissions(self) -> tuple[str, ...]:
        return in_catalog_order(self.effective_permissions())

    def has_permission(self, permission: str) -> bool:
        return has_permission(self.principal, permission)

    def has_any(self, permissions: Iterable[str]) -> bool:
        return has_any(self.principal, permissions)

    def has_all(self, permissions: Iterable[str]) -> bool:
        return has_all(self.principal, permissions)

    def is_super_admin(self) -> bool:
        return is_super_admin(self.principal)

    def is_main_admin(self) -> bool:
        return is_main_admin(self.principal)

    def is_collaborator(self) -> bool:
        return is_collaborator(self.principal)

    def has_full_access(self) -> bool:
        return has_full_access(self.principal)

    def has_admin_role(self) -> bool:
        return has_admin_role(self.principal)
