"""Tests for the admin edit workflow."""
from unittest.mock import AsyncMock

import pytest

from salon_admin.auth.principal import UseCustomSet, UseRoleDefaults
from salon_admin.auth.resolver import effective_permissions, has_permission
from salon_admin.auth.role_defaults import defaults_for
from salon_admin.errors import UpstreamUnavailableError, ValidationError
from salon_admin.provisioning.errors import InvalidTransitionError
from salon_admin.provisioning.schemas import AdminRecord
from salon_admin.provisioning.workflows import EditAdminWorkflow, EditState

MODERATOR_DEFAULTS_WITHOUT_DELETE = [
    "users.view",
    "users.suspend",
    "businesses.view",
    "content.view",
    "content.moderate",
]


def moderator_record(permissions=None) -> AdminRecord:
    return AdminRecord(
        id=21,
        name="Marta",
        email="marta@salon.test",
        admin_role="moderator",
        permissions=permissions,
        is_admin_collaborator=True,
    )


def make_directory(returned=None) -> AsyncMock:
    directory = AsyncMock()
    directory.update_admin.return_value = returned
    return directory


class TestLoad:
    def test_load_with_role_defaults(self):
        """Admins without an override load with customization off."""
        workflow = EditAdminWorkflow.load(moderator_record())
        assert workflow.state is EditState.LOADED
        assert not workflow.customizing
        assert set(workflow.preview) == defaults_for("moderator")

    def test_load_with_stored_override(self):
        """A stored override loads with customization on."""
        workflow = EditAdminWorkflow.load(moderator_record(["users.view", "analytics.view"]))
        assert workflow.customizing
        assert workflow.preview == ("users.view", "analytics.view")

    def test_empty_stored_override_loads_as_defaults(self):
        """An empty stored override opens as role defaults."""
        workflow = EditAdminWorkflow.load(moderator_record([]))
        assert not workflow.customizing
        assert set(workflow.preview) == defaults_for("moderator")

    def test_load_from_mapping_drops_unknown_keys(self, caplog):
        """Unknown stored keys are dropped with a warning."""
        with caplog.at_level("WARNING", logger="salon_admin.provisioning"):
            workflow = EditAdminWorkflow.load(
                {
                    "id": 21,
                    "admin_role": "support",
                    "permissions": ["users.view", "billing.refund"],
                    "unexpected": "ignored",
                }
            )
        assert workflow.preview == ("users.view",)
        assert any("billing.refund" in r.getMessage() for r in caplog.records)

    def test_super_admin_cannot_be_edited(self):
        """Super admins cannot be loaded for editing."""
        with pytest.raises(ValidationError, match="Super admin accounts cannot be edited"):
            EditAdminWorkflow.load(AdminRecord(id=1, admin_role="super_admin"))

    def test_record_without_valid_role_is_rejected(self):
        with pytest.raises(ValidationError):
            EditAdminWorkflow.load(AdminRecord(id=1, admin_role=None))


class TestEditing:
    def test_role_change_without_customization_discards_selection(self):
        """Without customization a role change just swaps defaults."""
        workflow = EditAdminWorkflow.load(moderator_record())
        workflow.select_role("support")
        assert workflow.state is EditState.EDITING
        assert set(workflow.preview) == defaults_for("support")

    def test_mutations_require_customization(self):
        workflow = EditAdminWorkflow.load(moderator_record())
        with pytest.raises(InvalidTransitionError):
            workflow.remove_permission("content.delete")
        assert workflow.state is EditState.LOADED

    def test_to_principal_reflects_form(self):
        """The preview principal matches the form state."""
        workflow = EditAdminWorkflow.load(moderator_record())
        workflow.enable_customization()
        workflow.set_permissions(["users.view"])
        principal = workflow.to_principal()
        assert principal.custom_permissions == UseCustomSet.of(["users.view"])
        assert effective_permissions(principal) == {"users.view"}


class TestModeratorScenario:
    @pytest.mark.anyio
    async def test_removing_a_default_persists_explicit_set(self):
        """Removing one default saves the remaining set explicitly."""
        directory = make_directory()
        workflow = EditAdminWorkflow.load(moderator_record())
        workflow.enable_customization()
        workflow.remove_permission("content.delete")

        saved = await workflow.submit(directory)

        directory.update_admin.assert_awaited_once_with(
            21,
            {"admin_role": "moderator", "permissions": MODERATOR_DEFAULTS_WITHOUT_DELETE},
        )
        assert workflow.state is EditState.SAVED
        assert saved.permissions == MODERATOR_DEFAULTS_WITHOUT_DELETE
        assert not has_permission(saved.to_principal(), "content.delete")

    @pytest.mark.anyio
    async def test_toggling_customization_off_clears_override(self):
        """Turning customization off saves null."""
        stored = moderator_record(MODERATOR_DEFAULTS_WITHOUT_DELETE)
        directory = make_directory()
        workflow = EditAdminWorkflow.load(stored)
        assert workflow.customizing

        workflow.disable_customization()
        assert set(workflow.preview) == defaults_for("moderator")
        assert workflow.permission_override == UseRoleDefaults()

        saved = await workflow.submit(directory)

        payload = directory.update_admin.await_args.args[1]
        assert payload == {"admin_role": "moderator", "permissions": None}
        assert saved.permissions is None
        assert has_permission(saved.to_principal(), "content.delete")

    @pytest.mark.anyio
    async def test_empty_selection_is_sent_as_empty_override(self):
        """An empty custom selection saves an empty list."""
        directory = make_directory()
        workflow = EditAdminWorkflow.load(moderator_record())
        workflow.enable_customization()
        workflow.set_permissions([])

        await workflow.submit(directory)

        assert directory.update_admin.await_args.args[1]["permissions"] == []


class TestSubmit:
    @pytest.mark.anyio
    async def test_server_record_is_preferred(self):
        """The record returned by the directory wins over the local form."""
        returned = moderator_record(["users.view"]).model_copy(update={"name": "Marta R."})
        workflow = EditAdminWorkflow.load(moderator_record())
        workflow.enable_customization()
        workflow.set_permissions(["users.view"])

        saved = await workflow.submit(make_directory(returned))

        assert saved.name == "Marta R."
        assert workflow.record is saved

    @pytest.mark.anyio
    async def test_failure_returns_to_editing(self):
        """A failed save returns to editing."""
        error = UpstreamUnavailableError()
        directory = AsyncMock()
        directory.update_admin.side_effect = error
        workflow = EditAdminWorkflow.load(moderator_record())
        workflow.select_role("support")

        with pytest.raises(UpstreamUnavailableError):
            await workflow.submit(directory)

        assert workflow.state is EditState.EDITING
        assert workflow.last_error is error
        assert workflow.role.value == "support"
        assert workflow.record.admin_role == "moderator"

    @pytest.mark.anyio
    async def test_saved_workflow_is_closed(self):
        workflow = EditAdminWorkflow.load(moderator_record())
        await workflow.submit(make_directory())

        with pytest.raises(InvalidTransitionError):
            workflow.enable_customization()
