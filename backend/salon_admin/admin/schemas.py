from datetime import datetime

from pydantic import BaseModel, Field

from ..auth.permission_catalog import in_catalog_order
from ..auth.resolver import effective_permissions
from ..provisioning.schemas import AdminRecord


class PermissionCategoryRead(BaseModel):
    category: str
    label: str
    permissions: list[str]


class PermissionCatalogRead(BaseModel):
    categories: list[PermissionCategoryRead]
    role_defaults: dict[str, list[str]]


class PrincipalPermissionsRead(BaseModel):
    id: int | str | None
    name: str
    email: str
    role: str | None
    is_collaborator: bool
    is_super_admin: bool
    is_main_admin: bool
    has_custom_permissions: bool
    permissions: list[str]


class NavigationItemRead(BaseModel):
    name: str
    href: str


class AdminMemberRead(BaseModel):
    id: int | str
    name: str
    email: str
    admin_role: str | None
    is_admin_collaborator: bool
    permissions: list[str] | None
    effective_permissions: list[str]
    last_login: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, record: AdminRecord) -> "AdminMemberRead":
        return cls(
            id=record.id,
            name=record.name,
            email=record.email,
            admin_role=record.admin_role,
            is_admin_collaborator=record.is_admin_collaborator,
            permissions=record.permissions,
            effective_permissions=list(
                in_catalog_order(effective_permissions(record.to_principal()))
            ),
            last_login=record.last_login,
            created_at=record.created_at,
        )


class AdminTeamRead(BaseModel):
    total: int
    groups: dict[str, list[AdminMemberRead]]


class AdminCreateRequest(BaseModel):
    # Required fields are checked by the create workflow, not here
    name: str = ""
    email: str = ""
    admin_role: str | None = None
    custom_permissions: list[str] | None = None


class AdminUpdateRequest(BaseModel):
    admin_role: str | None = None
    # null (or omitted) resets the admin to role defaults
    permissions: list[str] | None = Field(default=None)


class AdminCreatedRead(BaseModel):
    admin: AdminMemberRead
    temporary_password: str | None
