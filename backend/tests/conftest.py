"""Shared test fixtures and configuration."""
import os

import pytest

# Required settings for modules that read configuration on first access
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
os.environ.setdefault("ADMIN_API_BASE_URL", "http://directory.test/api")

from salon_admin.auth.principal import Principal, UseCustomSet  # noqa: E402
from salon_admin.auth.role_defaults import AdminRole  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def super_admin() -> Principal:
    return Principal(id=1, name="Root", email="root@salon.test", role=AdminRole.SUPER_ADMIN)


@pytest.fixture
def main_admin() -> Principal:
    return Principal(id=2, name="Owner", email="owner@salon.test", role=AdminRole.ADMIN)


@pytest.fixture
def collaborator_admin() -> Principal:
    return Principal(
        id=3,
        name="Ops",
        email="ops@salon.test",
        role=AdminRole.ADMIN,
        is_collaborator=True,
    )


@pytest.fixture
def moderator() -> Principal:
    return Principal(
        id=4,
        name="Mod",
        email="mod@salon.test",
        role=AdminRole.MODERATOR,
        is_collaborator=True,
    )


@pytest.fixture
def support_agent() -> Principal:
    return Principal(
        id=5,
        name="Help",
        email="help@salon.test",
        role=AdminRole.SUPPORT,
        is_collaborator=True,
    )


@pytest.fixture
def custom_moderator() -> Principal:
    return Principal(
        id=6,
        name="Custom",
        email="custom@salon.test",
        role=AdminRole.MODERATOR,
        is_collaborator=True,
        custom_permissions=UseCustomSet.of(["users.view", "analytics.view"]),
    )
