from .access_gate import (
    AccessDenied,
    AccessGate,
    AccessRequirement,
    GateDecision,
    GateMode,
    RenderFallback,
    RenderNothing,
    ShowAccessDenied,
)
from .permission_catalog import ALL_PERMISSIONS, FULL_CATALOG, PermissionKey, is_valid_key
from .principal import Principal, UseCustomSet, UseRoleDefaults
from .resolver import PermissionResolver
from .role_defaults import AdminRole, defaults_for

__all__ = [
    "ALL_PERMISSIONS",
    "FULL_CATALOG",
    "AccessDenied",
    "AccessGate",
    "AccessRequirement",
    "AdminRole",
    "GateDecision",
    "GateMode",
    "PermissionKey",
    "PermissionResolver",
    "Principal",
    "RenderFallback",
    "RenderNothing",
    "ShowAccessDenied",
    "UseCustomSet",
    "UseRoleDefaults",
    "defaults_for",
    "is_valid_key",
]
