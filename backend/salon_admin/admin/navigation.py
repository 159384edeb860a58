"""Admin console navigation, gated per item."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..auth.access_gate import AccessGate, AccessRequirement
from ..auth.permission_catalog import ALL_PERMISSIONS, PermissionKey
from ..auth.principal import Principal


@dataclass(frozen=True, slots=True)
class NavigationItem:
    name: str
    href: str
    requirement: AccessRequirement


ADMIN_NAVIGATION: Final[tuple[NavigationItem, ...]] = (
    # Any admin holding at least one permission
    NavigationItem("Dashboard", "/admin/dashboard", AccessRequirement.any_of(*ALL_PERMISSIONS)),
    NavigationItem("Users", "/admin/users", AccessRequirement.single(PermissionKey.USERS_VIEW.value)),
    NavigationItem(
        "Businesses", "/admin/businesses", AccessRequirement.single(PermissionKey.BUSINESSES_VIEW.value)
    ),
    NavigationItem(
        "Appointments", "/admin/appointments", AccessRequirement.single(PermissionKey.BUSINESSES_VIEW.value)
    ),
    NavigationItem(
        "Services", "/admin/services", AccessRequirement.single(PermissionKey.BUSINESSES_VIEW.value)
    ),
    NavigationItem("Reports", "/admin/reports", AccessRequirement.single(PermissionKey.ANALYTICS_VIEW.value)),
    NavigationItem("Team", "/admin/team", AccessRequirement.single(PermissionKey.ADMINS_VIEW.value)),
    NavigationItem("Collaborators", "/admin/collaborators", AccessRequirement.any_admin()),
)


def visible_navigation(principal: Principal | None) -> list[NavigationItem]:
    rendered = (AccessGate(item.requirement).render(principal, item) for item in ADMIN_NAVIGATION)
    return [item for item in rendered if item is not None]
