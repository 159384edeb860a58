from __future__ import annotations

import logging

from ..admin.services.audit_service import AuditService
from ..auth.principal import Principal, override_to_wire
from ..auth.resolver import has_full_access
from ..auth.role_defaults import AdminRole
from ..errors import NotFoundError
from .directory import AdminDirectoryClient
from .errors import RemovalNotAllowedError, SelfRemovalError
from .schemas import AdminRecord
from .workflows import CreateAdminWorkflow, EditAdminWorkflow

logger = logging.getLogger("salon_admin.provisioning")

ROLE_GROUP_ORDER: tuple[AdminRole, ...] = (
    AdminRole.SUPER_ADMIN,
    AdminRole.ADMIN,
    AdminRole.MODERATOR,
    AdminRole.SUPPORT,
)


def matches_search(admin: AdminRecord, search: str | None) -> bool:
    if not search or not search.strip():
        return True
    needle = search.strip().lower()
    return needle in admin.name.lower() or needle in admin.email.lower()


def _same_identity(left: int | str | None, right: int | str | None) -> bool:
    return left is not None and right is not None and str(left) == str(right)


class AdminTeamService:
    """Admin team operations on behalf of one signed-in principal."""

    def __init__(
        self,
        directory: AdminDirectoryClient,
        actor: Principal,
        audit_service: AuditService | None = None,
    ):
        self.directory = directory
        self.actor = actor
        self.audit_service = audit_service or AuditService()

    async def list_admins(self, search: str | None = None) -> list[AdminRecord]:
        admins = await self.directory.list_admins()
        return [admin for admin in admins if matches_search(admin, search)]

    @staticmethod
    def group_by_role(admins: list[AdminRecord]) -> dict[str, list[AdminRecord]]:
        """Admins bucketed by role, super admins first. Unknown roles are left out."""
        groups: dict[str, list[AdminRecord]] = {role.value: [] for role in ROLE_GROUP_ORDER}
        for admin in admins:
            if admin.admin_role in groups:
                groups[admin.admin_role].append(admin)
        return groups

    async def get_admin(self, admin_id: int | str) -> AdminRecord:
        for admin in await self.directory.list_admins():
            if _same_identity(admin.id, admin_id):
                return admin
        raise NotFoundError("Admin not found")

    async def create_admin(self, workflow: CreateAdminWorkflow) -> AdminRecord:
        created = await workflow.submit(self.directory)
        await self.audit_service.log_admin_action(
            actor_id=self.actor.id,
            action="admins.create",
            target_type="admin",
            target_id=created.id,
            payload={
                "admin_role": workflow.role.value,
                "custom_permissions": override_to_wire(workflow.permission_override),
            },
        )
        return created

    async def update_admin(self, workflow: EditAdminWorkflow) -> AdminRecord:
        updated = await workflow.submit(self.directory)
        await self.audit_service.log_admin_action(
            actor_id=self.actor.id,
            action="admins.edit",
            target_type="admin",
            target_id=updated.id,
            payload={
                "admin_role": workflow.role.value,
                "permissions": override_to_wire(workflow.permission_override),
            },
        )
        return updated

    async def remove_admin(self, admin_id: int | str) -> None:
        """
        Remove an admin account. Removal is irreversible.

        Raises:
            RemovalNotAllowedError: The actor is a collaborator or lacks full access
            SelfRemovalError: The actor targeted their own account
        """
        if self.actor.is_collaborator or not has_full_access(self.actor):
            raise RemovalNotAllowedError()
        if _same_identity(self.actor.id, admin_id):
            raise SelfRemovalError()

        await self.directory.remove_admin(admin_id)
        logger.info("Admin %s removed by %s", admin_id, self.actor.id)
        await self.audit_service.log_admin_action(
            actor_id=self.actor.id,
            action="admins.delete",
            target_type="admin",
            target_id=admin_id,
        )
