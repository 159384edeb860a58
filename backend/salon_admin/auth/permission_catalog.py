"""
Permission Catalog - the closed registry of every grantable admin capability.

Every permission key is a lowercase "<category>.<action>" string. Keys are
shared verbatim with the platform API, so this module is the single place
they are spelled out. Anything not listed here is not a permission.

The catalog is immutable for the lifetime of the process and validates
itself on import.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Final


class PermissionKey(str, Enum):
    """Every permission in the catalog, in canonical display order."""

    # User management
    USERS_VIEW = "users.view"
    USERS_CREATE = "users.create"
    USERS_EDIT = "users.edit"
    USERS_DELETE = "users.delete"
    USERS_SUSPEND = "users.suspend"

    # Business management
    BUSINESSES_VIEW = "businesses.view"
    BUSINESSES_EDIT = "businesses.edit"
    BUSINESSES_DELETE = "businesses.delete"
    BUSINESSES_SUBSCRIPTIONS = "businesses.subscriptions"

    # Content moderation
    CONTENT_VIEW = "content.view"
    CONTENT_MODERATE = "content.moderate"
    CONTENT_DELETE = "content.delete"

    # Analytics
    ANALYTICS_VIEW = "analytics.view"
    ANALYTICS_EXPORT = "analytics.export"

    # Admin team management
    ADMINS_VIEW = "admins.view"
    ADMINS_CREATE = "admins.create"
    ADMINS_EDIT = "admins.edit"
    ADMINS_DELETE = "admins.delete"

    # System
    SYSTEM_SETTINGS = "system.settings"
    SYSTEM_CONFIG = "system.config"


# ============================================================================
# CATEGORIES
# ============================================================================

CATEGORY_LABELS: Final[dict[str, str]] = {
    "users": "Users",
    "businesses": "Businesses",
    "content": "Content",
    "analytics": "Analytics",
    "admins": "Admins",
    "system": "System",
}

# Full ordered list of keys
ALL_PERMISSIONS: Final[tuple[str, ...]] = tuple(key.value for key in PermissionKey)

PERMISSION_CATEGORIES: Final[dict[str, tuple[str, ...]]] = {
    category: tuple(key for key in ALL_PERMISSIONS if key.split(".", 1)[0] == category)
    for category in CATEGORY_LABELS
}

ADMIN_PERMISSIONS: Final[frozenset[str]] = frozenset(PERMISSION_CATEGORIES["admins"])

FULL_CATALOG: Final[frozenset[str]] = frozenset(ALL_PERMISSIONS)

_KEY_PATTERN = re.compile(r"^[a-z]+\.[a-z_]+$")
_CATALOG_ORDER: Final[dict[str, int]] = {key: index for index, key in enumerate(ALL_PERMISSIONS)}


# ============================================================================
# LOOKUPS
# ============================================================================

def is_valid_key(key: object) -> bool:
    return isinstance(key, str) and key in FULL_CATALOG


def permissions_for_category(category: str) -> tuple[str, ...]:
    """Keys filed under ``category``; an unknown category yields an empty group."""
    return PERMISSION_CATEGORIES.get(category, ())


def category_of(key: str) -> str | None:
    if not is_valid_key(key):
        return None
    return key.split(".", 1)[0]


def in_catalog_order(keys) -> tuple[str, ...]:
    """Valid keys from ``keys`` sorted by catalog position, unknown keys dropped."""
    return tuple(sorted({key for key in keys if is_valid_key(key)}, key=_CATALOG_ORDER.__getitem__))


def validate_permission(permission: str) -> None:
    """
    Validate that a permission key is explicitly listed in the catalog.

    Raises:
        ValueError: If the key is a wildcard pattern or not in the catalog
    """
    if permission.endswith("*") or permission.endswith(".*") or permission.endswith(":*"):
        raise ValueError(
            f"Wildcard permission '{permission}' is not allowed. "
            "All permissions must be explicit."
        )

    if permission not in FULL_CATALOG:
        raise ValueError(
            f"Invalid permission '{permission}'. "
            f"Permission must be one of: {', '.join(ALL_PERMISSIONS)}"
        )


def _validate_catalog() -> None:
    """Validate the catalog at module import time."""
    errors = []

    if len(ALL_PERMISSIONS) != len(FULL_CATALOG):
        errors.append("Duplicate permission keys in catalog")

    for key in ALL_PERMISSIONS:
        if not _KEY_PATTERN.match(key):
            errors.append(f"Malformed permission key: {key}")
            continue
        if key.split(".", 1)[0] not in CATEGORY_LABELS:
            errors.append(f"Permission '{key}' has no registered category")

    filed = sum(len(keys) for keys in PERMISSION_CATEGORIES.values())
    if filed != len(ALL_PERMISSIONS):
        errors.append("Every permission must be filed under exactly one category")

    if errors:
        raise RuntimeError(
            "Permission catalog validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )


_validate_catalog()
