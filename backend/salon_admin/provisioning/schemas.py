"""Wire models for the platform admin-directory API."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..auth.principal import Principal, parse_collaborator_flag, permissions_from_wire


class AdminRecord(BaseModel):
    id: int | str
    name: str = ""
    email: str = ""
    admin_role: str | None = None
    # null means "role defaults"; a list, even an empty one, is an override
    permissions: list[str] | None = None
    is_admin_collaborator: bool = False
    created_by_admin_id: int | str | None = None
    last_login: datetime | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(extra="ignore")

    # One malformed record must not fail the whole listing
    @field_validator("permissions", mode="before")
    @classmethod
    def _lenient_permissions(cls, value: Any) -> list[str] | None:
        return permissions_from_wire(value)

    @field_validator("is_admin_collaborator", mode="before")
    @classmethod
    def _lenient_collaborator_flag(cls, value: Any) -> bool:
        return parse_collaborator_flag(value)

    def to_principal(self) -> Principal:
        return Principal.from_admin_record(self.model_dump())


class AdminList(BaseModel):
    admins: list[AdminRecord] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class CreatedAdmin(BaseModel):
    admin: AdminRecord
    # One-time credential; shown once and never stored
    temporary_password: str

    model_config = ConfigDict(extra="ignore")


class UpdatedAdmin(BaseModel):
    admin: AdminRecord | None = None

    model_config = ConfigDict(extra="ignore")
