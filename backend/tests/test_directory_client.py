"""Tests for the admin-directory HTTP client and its upstream error mapping."""
import json

import httpx
import pytest
from fastapi import status

from salon_admin.errors import AuthError, UpstreamRejectedError, UpstreamUnavailableError
from salon_admin.provisioning.directory import AdminDirectoryClient

BASE_URL = "http://directory.test/api/"


def make_client(handler, token: str | None = "session-token") -> AdminDirectoryClient:
    return AdminDirectoryClient(
        base_url=BASE_URL,
        token=token,
        transport=httpx.MockTransport(handler),
    )


def respond(status_code: int, body=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    return handler


class TestRequests:
    @pytest.mark.anyio
    async def test_session_user_sends_bearer_token(self):
        """Session lookups forward the caller's bearer token."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"user": {"id": 1, "role": "admin"}})

        user = await make_client(handler).fetch_session_user()

        assert user == {"id": 1, "role": "admin"}
        assert seen["url"] == "http://directory.test/api/auth/me"
        assert seen["auth"] == "Bearer session-token"

    @pytest.mark.anyio
    async def test_with_token_rebinds_credentials(self):
        """with_token() returns a client bound to another token."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"admins": []})

        client = make_client(handler, token=None)
        await client.list_admins()
        assert seen["auth"] is None

        await client.with_token("other").list_admins()
        assert seen["auth"] == "Bearer other"

    @pytest.mark.anyio
    async def test_list_admins_parses_records(self):
        """Records are parsed and unknown fields ignored."""
        body = {
            "admins": [
                {
                    "id": 4,
                    "name": "Mod",
                    "email": "mod@salon.test",
                    "admin_role": "moderator",
                    "permissions": None,
                    "is_admin_collaborator": True,
                    "phone": "ignored",
                }
            ]
        }
        admins = await make_client(respond(200, body)).list_admins()
        assert len(admins) == 1
        assert admins[0].admin_role == "moderator"
        assert admins[0].permissions is None

    @pytest.mark.anyio
    async def test_malformed_record_does_not_drop_listing(self):
        """A bad record is normalized instead of failing the whole listing."""
        body = {
            "admins": [
                {"id": 2, "name": "Owner", "admin_role": "admin"},
                {
                    "id": 4,
                    "name": "Mod",
                    "admin_role": "moderator",
                    "permissions": ["users.view", 7],
                    "is_admin_collaborator": None,
                },
                {"id": 5, "admin_role": "support", "permissions": "users.view"},
            ]
        }
        admins = await make_client(respond(200, body)).list_admins()

        assert [admin.id for admin in admins] == [2, 4, 5]
        assert admins[1].permissions == ["users.view"]
        assert admins[1].is_admin_collaborator is False
        assert admins[2].permissions == []

    @pytest.mark.anyio
    async def test_create_admin_posts_payload(self):
        """Create posts the payload and parses the credential."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "admin": {"id": 30, "name": "New", "email": "new@salon.test", "admin_role": "support"},
                    "temporary_password": "Tmp-1",
                },
            )

        payload = {"name": "New", "email": "new@salon.test", "admin_role": "support"}
        created = await make_client(handler).create_admin(payload)

        assert seen == {"method": "POST", "body": payload}
        assert created.admin.id == 30
        assert created.temporary_password == "Tmp-1"

    @pytest.mark.anyio
    async def test_update_admin_sends_explicit_null(self):
        """A null override is sent explicitly, not omitted."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"message": "updated"})

        result = await make_client(handler).update_admin(
            4, {"admin_role": "moderator", "permissions": None}
        )

        assert seen["path"] == "/api/admin/team/4"
        assert seen["body"] == {"admin_role": "moderator", "permissions": None}
        assert result is None

    @pytest.mark.anyio
    async def test_update_admin_returns_record(self):
        body = {"admin": {"id": 4, "admin_role": "support", "permissions": ["users.view"]}}
        result = await make_client(respond(200, body)).update_admin(4, {})
        assert result.permissions == ["users.view"]

    @pytest.mark.anyio
    async def test_remove_admin_no_content(self):
        assert await make_client(respond(204)).remove_admin(4) is None

    @pytest.mark.anyio
    async def test_remove_admin_already_gone_is_success(self):
        """Deleting an admin that is already gone is not an error."""
        assert await make_client(respond(404, {"message": "Admin not found"})).remove_admin(4) is None


class TestErrorMapping:
    @pytest.mark.anyio
    async def test_unauthorized_is_auth_error(self):
        """Upstream 401 maps to an auth error."""
        with pytest.raises(AuthError, match="Session has expired"):
            await make_client(respond(401)).list_admins()

    @pytest.mark.anyio
    async def test_rejection_keeps_upstream_message(self):
        """Upstream 4xx messages are passed through."""
        client = make_client(respond(409, {"message": "Email already registered"}))
        with pytest.raises(UpstreamRejectedError) as exc:
            await client.create_admin({"name": "x"})
        assert exc.value.status_code == status.HTTP_409_CONFLICT
        assert exc.value.message == "Email already registered"
        assert exc.value.details == {"upstream_status": 409}

    @pytest.mark.anyio
    async def test_rejection_reads_nested_error_message(self):
        """Nested error.message bodies are understood."""
        client = make_client(respond(403, {"error": {"message": "Cannot delete yourself"}}))
        with pytest.raises(UpstreamRejectedError, match="Cannot delete yourself"):
            await client.remove_admin(2)

    @pytest.mark.anyio
    async def test_rejection_without_message_uses_default(self):
        with pytest.raises(UpstreamRejectedError) as exc:
            await make_client(respond(422, ["bad"])).list_admins()
        assert exc.value.message == "Upstream request was rejected"

    @pytest.mark.anyio
    async def test_server_error_is_unavailable(self):
        """Upstream 5xx maps to unavailable."""
        with pytest.raises(UpstreamUnavailableError) as exc:
            await make_client(respond(503)).list_admins()
        assert exc.value.status_code == status.HTTP_502_BAD_GATEWAY

    @pytest.mark.anyio
    async def test_transport_error_is_unavailable(self):
        """Connection failures map to unavailable."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamUnavailableError):
            await make_client(handler).list_admins()

    @pytest.mark.anyio
    async def test_non_json_body_is_unavailable(self):
        """Non-JSON bodies are treated as an invalid response."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        with pytest.raises(UpstreamUnavailableError, match="invalid response"):
            await make_client(handler).list_admins()

    @pytest.mark.anyio
    async def test_invalid_payload_is_unavailable(self):
        """Records failing validation make the response invalid."""
        with pytest.raises(UpstreamUnavailableError):
            await make_client(respond(200, {"admins": [{"name": "no id"}]})).list_admins()

    @pytest.mark.anyio
    async def test_session_payload_without_user(self):
        with pytest.raises(UpstreamUnavailableError, match="invalid session payload"):
            await make_client(respond(200, {"id": 1})).fetch_session_user()
