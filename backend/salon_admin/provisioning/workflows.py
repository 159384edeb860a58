"""
Admin provisioning workflows.

Create flow:

    SELECTING_ROLE -> REVIEWING_DEFAULTS <-> CUSTOMIZING -> SUBMITTING -> CREATED

Edit flow:

    LOADED -> EDITING -> SUBMITTING -> SAVED

A failed submission puts the workflow back in the state it was in before
submitting, with every field intact and the failure on ``last_error``. The
caller decides whether to submit again.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol

from ..auth.permission_catalog import category_of, in_catalog_order, is_valid_key
from ..auth.principal import PermissionOverride, Principal, UseCustomSet, UseRoleDefaults
from ..auth.role_defaults import ASSIGNABLE_ROLES, AdminRole, defaults_for, parse_role
from ..errors import ValidationError
from .errors import InvalidTransitionError, MissingFieldsError, UnknownPermissionError
from .schemas import AdminRecord, CreatedAdmin

logger = logging.getLogger("salon_admin.provisioning")


class AdminDirectory(Protocol):
    async def create_admin(self, payload: Mapping[str, Any]) -> CreatedAdmin: ...

    async def update_admin(
        self, admin_id: int | str, payload: Mapping[str, Any]
    ) -> AdminRecord | None: ...


class CreateState(str, Enum):
    SELECTING_ROLE = "selecting_role"
    REVIEWING_DEFAULTS = "reviewing_defaults"
    CUSTOMIZING = "customizing"
    SUBMITTING = "submitting"
    CREATED = "created"


class EditState(str, Enum):
    LOADED = "loaded"
    EDITING = "editing"
    SUBMITTING = "submitting"
    SAVED = "saved"


def _assignable_role(value: AdminRole | str) -> AdminRole:
    role = parse_role(value)
    if role not in ASSIGNABLE_ROLES:
        raise ValidationError(
            f"Invalid role '{getattr(value, 'value', value)}'",
            details={"allowed_roles": [r.value for r in ASSIGNABLE_ROLES]},
        )
    return role


class _PermissionForm:
    """Role selection, default preview and custom selection shared by both flows."""

    _closed_states: frozenset[str] = frozenset()

    def __init__(self) -> None:
        self.role: AdminRole | None = None
        self.customizing = False
        self.last_error: Exception | None = None
        self._selected: set[str] = set()
        self.state: Enum

    # -- state guards -------------------------------------------------------

    def _ensure_open(self, operation: str) -> None:
        if self.state.value in self._closed_states:
            raise InvalidTransitionError(operation, self.state.value)

    def _ensure_customizing(self, operation: str) -> None:
        self._ensure_open(operation)
        if not self.customizing:
            raise InvalidTransitionError(operation, "using role defaults")

    # -- role and selection -------------------------------------------------

    def _apply_role(self, role: AdminRole | str) -> None:
        self.role = _assignable_role(role)
        if not self.customizing:
            # Previous selection is discarded in favour of the new defaults
            self._selected = set(defaults_for(self.role))

    def _apply_customization(self, enabled: bool) -> None:
        if self.role is None:
            raise InvalidTransitionError("customize permissions", "missing a role")
        self.customizing = enabled
        if not enabled:
            self._selected = set(defaults_for(self.role))

    def _check_key(self, permission: str) -> str:
        if not is_valid_key(permission):
            raise UnknownPermissionError(permission)
        return permission

    def _replace_selection(self, permissions) -> None:
        keys = list(permissions)
        for permission in keys:
            self._check_key(permission)
        self._selected = set(keys)

    def _toggle(self, permission: str) -> None:
        self._check_key(permission)
        if permission in self._selected:
            self._selected.discard(permission)
        else:
            self._selected.add(permission)

    @property
    def preview(self) -> tuple[str, ...]:
        """The permissions the account would hold, in catalog order."""
        if self.customizing:
            return in_catalog_order(self._selected)
        if self.role is None:
            return ()
        return in_catalog_order(defaults_for(self.role))

    @property
    def preview_categories(self) -> tuple[str, ...]:
        categories: list[str] = []
        for permission in self.preview:
            category = category_of(permission)
            if category and category not in categories:
                categories.append(category)
        return tuple(categories)

    @property
    def permission_override(self) -> PermissionOverride:
        if self.customizing:
            return UseCustomSet(frozenset(self._selected))
        return UseRoleDefaults()


class CreateAdminWorkflow(_PermissionForm):
    _closed_states = frozenset({CreateState.SUBMITTING.value, CreateState.CREATED.value})

    def __init__(self) -> None:
        super().__init__()
        self.name = ""
        self.email = ""
        self.state: CreateState = CreateState.SELECTING_ROLE
        self.created: AdminRecord | None = None
        self._credential: str | None = None

    def set_details(self, *, name: str | None = None, email: str | None = None) -> None:
        self._ensure_open("edit details")
        if name is not None:
            self.name = name
        if email is not None:
            self.email = email

    def select_role(self, role: AdminRole | str) -> None:
        self._ensure_open("select a role")
        self._apply_role(role)
        if not self.customizing:
            self.state = CreateState.REVIEWING_DEFAULTS

    def enable_customization(self) -> None:
        self._ensure_open("customize permissions")
        self._apply_customization(True)
        self.state = CreateState.CUSTOMIZING

    def disable_customization(self) -> None:
        self._ensure_open("customize permissions")
        self._apply_customization(False)
        self.state = CreateState.REVIEWING_DEFAULTS

    def toggle_permission(self, permission: str) -> None:
        self._ensure_customizing("change permissions")
        self._toggle(permission)

    def add_permission(self, permission: str) -> None:
        self._ensure_customizing("change permissions")
        self._selected.add(self._check_key(permission))

    def remove_permission(self, permission: str) -> None:
        self._ensure_customizing("change permissions")
        self._selected.discard(self._check_key(permission))

    def set_permissions(self, permissions) -> None:
        self._ensure_customizing("change permissions")
        self._replace_selection(permissions)

    def missing_fields(self) -> list[str]:
        missing = []
        if not self.name.strip():
            missing.append("name")
        if not self.email.strip():
            missing.append("email")
        if self.role is None:
            missing.append("admin_role")
        return missing

    def validate(self) -> None:
        missing = self.missing_fields()
        if missing:
            raise MissingFieldsError(missing)

    def build_payload(self) -> dict[str, Any]:
        self.validate()
        payload: dict[str, Any] = {
            "name": self.name.strip(),
            "email": self.email.strip(),
            "admin_role": self.role.value,
        }
        # An empty custom selection falls back to role defaults on create
        if self.customizing and self._selected:
            payload["custom_permissions"] = list(in_catalog_order(self._selected))
        return payload

    async def submit(self, directory: AdminDirectory) -> AdminRecord:
        self._ensure_open("submit")
        payload = self.build_payload()

        previous_state = self.state
        self.state = CreateState.SUBMITTING
        self.last_error = None
        try:
            result = await directory.create_admin(payload)
        except Exception as exc:
            self.state = previous_state
            self.last_error = exc
            logger.warning("Create admin failed for %s: %s", payload["email"], exc)
            raise

        self.state = CreateState.CREATED
        self.created = result.admin
        self._credential = result.temporary_password
        logger.info("Created admin %s with role %s", result.admin.id, payload["admin_role"])
        return result.admin

    def reveal_credential(self) -> str | None:
        """Return the one-time password once; later calls return None."""
        credential, self._credential = self._credential, None
        return credential


class EditAdminWorkflow(_PermissionForm):
    _closed_states = frozenset({EditState.SUBMITTING.value, EditState.SAVED.value})

    def __init__(self, record: AdminRecord) -> None:
        super().__init__()
        self.record = record
        self.state: EditState = EditState.LOADED

    @classmethod
    def load(cls, record: AdminRecord | Mapping[str, Any]) -> "EditAdminWorkflow":
        if not isinstance(record, AdminRecord):
            record = AdminRecord.model_validate(record)
        if parse_role(record.admin_role) is AdminRole.SUPER_ADMIN:
            raise ValidationError("Super admin accounts cannot be edited")

        workflow = cls(record)
        workflow.role = _assignable_role(record.admin_role or "")
        stored = record.permissions
        if stored:
            workflow.customizing = True
            workflow._selected = {key for key in stored if is_valid_key(key)}
            dropped = sorted(set(stored) - workflow._selected)
            if dropped:
                logger.warning(
                    "Ignoring unknown permissions %s on admin %s", dropped, record.id
                )
        else:
            workflow._selected = set(defaults_for(workflow.role))
        return workflow

    def _touch(self) -> None:
        self.state = EditState.EDITING

    def select_role(self, role: AdminRole | str) -> None:
        self._ensure_open("select a role")
        self._apply_role(role)
        self._touch()

    def enable_customization(self) -> None:
        self._ensure_open("customize permissions")
        self._apply_customization(True)
        self._touch()

    def disable_customization(self) -> None:
        self._ensure_open("customize permissions")
        self._apply_customization(False)
        self._touch()

    def toggle_permission(self, permission: str) -> None:
        self._ensure_customizing("change permissions")
        self._toggle(permission)
        self._touch()

    def add_permission(self, permission: str) -> None:
        self._ensure_customizing("change permissions")
        self._selected.add(self._check_key(permission))
        self._touch()

    def remove_permission(self, permission: str) -> None:
        self._ensure_customizing("change permissions")
        self._selected.discard(self._check_key(permission))
        self._touch()

    def set_permissions(self, permissions) -> None:
        self._ensure_customizing("change permissions")
        self._replace_selection(permissions)
        self._touch()

    def build_payload(self) -> dict[str, Any]:
        # permissions=None is an explicit reset to role defaults, not a no-op
        return {
            "admin_role": self.role.value,
            "permissions": list(in_catalog_order(self._selected)) if self.customizing else None,
        }

    def to_principal(self) -> Principal:
        """The admin as this form would leave them."""
        return Principal(
            id=self.record.id,
            name=self.record.name,
            email=self.record.email,
            role=self.role,
            is_collaborator=self.record.is_admin_collaborator,
            custom_permissions=self.permission_override,
        )

    async def submit(self, directory: AdminDirectory) -> AdminRecord:
        self._ensure_open("submit")
        payload = self.build_payload()

        previous_state = self.state
        self.state = EditState.SUBMITTING
        self.last_error = None
        try:
            updated = await directory.update_admin(self.record.id, payload)
        except Exception as exc:
            self.state = previous_state
            self.last_error = exc
            logger.warning("Update of admin %s failed: %s", self.record.id, exc)
            raise

        self.state = EditState.SAVED
        if updated is None:
            updated = self.record.model_copy(
                update={"admin_role": payload["admin_role"], "permissions": payload["permissions"]}
            )
        self.record = updated
        logger.info("Updated admin %s with role %s", updated.id, payload["admin_role"])
        return updated
