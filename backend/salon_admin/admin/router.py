"""
Admin Router - permission catalog, principal introspection and admin team.

Read endpoints:
- GET /admin/permissions - Catalog grouped by category, with role defaults
- GET /admin/me/permissions - Effective permissions of the signed-in admin
- GET /admin/navigation - Navigation entries the signed-in admin may see
- GET /admin/team - Admin accounts grouped by role

Write endpoints:
- POST /admin/team - Provision a new admin account
- PUT /admin/team/{admin_id} - Change role and permissions of an admin
- DELETE /admin/team/{admin_id} - Remove an admin account

All writes are audited after the upstream call succeeds.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from ..auth.access_gate import AccessRequirement
from ..auth.permission_catalog import CATEGORY_LABELS, PERMISSION_CATEGORIES, PermissionKey, in_catalog_order
from ..auth.principal import Principal
from ..auth.resolver import PermissionResolver
from ..auth.role_defaults import ASSIGNABLE_ROLES, defaults_for
from ..dependencies import get_current_principal, get_session_directory
from ..provisioning.directory import AdminDirectoryClient
from ..provisioning.team import AdminTeamService
from ..provisioning.workflows import CreateAdminWorkflow, EditAdminWorkflow
from .dependencies import require_access
from .navigation import visible_navigation
from .schemas import (
    AdminCreatedRead,
    AdminCreateRequest,
    AdminMemberRead,
    AdminTeamRead,
    AdminUpdateRequest,
    NavigationItemRead,
    PermissionCatalogRead,
    PermissionCategoryRead,
    PrincipalPermissionsRead,
)

router = APIRouter(
    prefix="/admin",
    tags=["admin-team"],
)


def _team_service(directory: AdminDirectoryClient, principal: Principal) -> AdminTeamService:
    return AdminTeamService(directory, principal)


@router.get("/permissions", response_model=PermissionCatalogRead)
async def get_permission_catalog(
    _: Principal = Depends(require_access(AccessRequirement.single(PermissionKey.ADMINS_VIEW.value))),
) -> PermissionCatalogRead:
    """
    Permission catalog grouped by category, plus the default set of every assignable role.

    Required permission: admins.view
    """
    return PermissionCatalogRead(
        categories=[
            PermissionCategoryRead(
                category=category,
                label=CATEGORY_LABELS[category],
                permissions=list(permissions),
            )
            for category, permissions in PERMISSION_CATEGORIES.items()
        ],
        role_defaults={
            role.value: list(in_catalog_order(defaults_for(role))) for role in ASSIGNABLE_ROLES
        },
    )


@router.get("/me/permissions", response_model=PrincipalPermissionsRead)
async def get_my_permissions(
    principal: Principal = Depends(get_current_principal),
) -> PrincipalPermissionsRead:
    resolver = PermissionResolver(principal)
    return PrincipalPermissionsRead(
        id=principal.id,
        name=principal.name,
        email=principal.email,
        role=principal.role.value if principal.role else None,
        is_collaborator=principal.is_collaborator,
        is_super_admin=resolver.is_super_admin(),
        is_main_admin=resolver.is_main_admin(),
        has_custom_permissions=principal.has_custom_permissions,
        permissions=list(resolver.sorted_permissions()),
    )


@router.get("/navigation", response_model=list[NavigationItemRead])
async def get_navigation(
    principal: Principal = Depends(get_current_principal),
) -> list[NavigationItemRead]:
    return [NavigationItemRead(name=item.name, href=item.href) for item in visible_navigation(principal)]


@router.get("/team", response_model=AdminTeamRead)
async def list_team(
    search: str | None = Query(default=None),
    principal: Principal = Depends(require_access(AccessRequirement.single(PermissionKey.ADMINS_VIEW.value))),
    directory: AdminDirectoryClient = Depends(get_session_directory),
) -> AdminTeamRead:
    """
    Admin accounts grouped by role, optionally filtered by name or email.

    Required permission: admins.view
    """
    service = _team_service(directory, principal)
    admins = await service.list_admins(search)
    groups = service.group_by_role(admins)
    return AdminTeamRead(
        total=len(admins),
        groups={
            role: [AdminMemberRead.from_record(admin) for admin in members]
            for role, members in groups.items()
        },
    )


@router.post("/team", response_model=AdminCreatedRead, status_code=status.HTTP_201_CREATED)
async def create_admin(
    request: AdminCreateRequest,
    principal: Principal = Depends(require_access(AccessRequirement.single(PermissionKey.ADMINS_CREATE.value))),
    directory: AdminDirectoryClient = Depends(get_session_directory),
) -> AdminCreatedRead:
    """
    Provision a new admin account.

    Omitting custom_permissions (or sending an empty list) gives the account
    its role defaults. The temporary password is only ever returned here.

    Required permission: admins.create
    """
    workflow = CreateAdminWorkflow()
    workflow.set_details(name=request.name, email=request.email)
    if request.admin_role is not None:
        workflow.select_role(request.admin_role)
        if request.custom_permissions is not None:
            workflow.enable_customization()
            workflow.set_permissions(request.custom_permissions)

    created = await _team_service(directory, principal).create_admin(workflow)
    return AdminCreatedRead(
        admin=AdminMemberRead.from_record(created),
        temporary_password=workflow.reveal_credential(),
    )


@router.put("/team/{admin_id}", response_model=AdminMemberRead)
async def update_admin(
    admin_id: str,
    request: AdminUpdateRequest,
    principal: Principal = Depends(require_access(AccessRequirement.single(PermissionKey.ADMINS_EDIT.value))),
    directory: AdminDirectoryClient = Depends(get_session_directory),
) -> AdminMemberRead:
    """
    Change the role and permissions of an existing admin.

    permissions=null resets the admin to role defaults; a list (even an empty
    one) replaces the custom set.

    Required permission: admins.edit
    """
    service = _team_service(directory, principal)
    workflow = EditAdminWorkflow.load(await service.get_admin(admin_id))
    if request.admin_role is not None:
        workflow.select_role(request.admin_role)
    if request.permissions is None:
        workflow.disable_customization()
    else:
        workflow.enable_customization()
        workflow.set_permissions(request.permissions)

    updated = await service.update_admin(workflow)
    return AdminMemberRead.from_record(updated)


@router.delete("/team/{admin_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_admin(
    admin_id: str,
    principal: Principal = Depends(require_access(AccessRequirement.super_admin())),
    directory: AdminDirectoryClient = Depends(get_session_directory),
) -> Response:
    """
    Remove an admin account. Removing an account that is already gone succeeds.

    Required: full admin access, not a collaborator, not the caller's own account
    """
    await _team_service(directory, principal).remove_admin(admin_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
