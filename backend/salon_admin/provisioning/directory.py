from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from fastapi import status
from pydantic import ValidationError as PydanticValidationError

from ..errors import AuthError, UpstreamRejectedError, UpstreamUnavailableError
from .schemas import AdminList, AdminRecord, CreatedAdmin, UpdatedAdmin

logger = logging.getLogger("salon_admin.provisioning.directory")


def _upstream_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    message = body.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()
    error = body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return None


class AdminDirectoryClient:
    """Async client for the platform's admin-directory API.

    A client is bound to the caller's session token, which is forwarded as a
    bearer credential on every request. Requests are never retried: the
    backend is authoritative and mutations are not idempotent in general.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 10.0,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._token = token
        self._transport = transport
        self._headers = dict(headers or {})

    def with_token(self, token: str | None) -> "AdminDirectoryClient":
        return AdminDirectoryClient(
            base_url=self._base_url,
            timeout_seconds=self._timeout_seconds,
            token=token,
            transport=self._transport,
            headers=self._headers,
        )

    async def fetch_session_user(self) -> dict[str, Any]:
        body = await self._request("GET", "/auth/me")
        user = body.get("user") if isinstance(body, dict) else None
        if not isinstance(user, dict):
            raise UpstreamUnavailableError("Upstream returned an invalid session payload")
        return user

    async def list_admins(self) -> list[AdminRecord]:
        body = await self._request("GET", "/admin/team")
        return self._parse(AdminList, body).admins

    async def create_admin(self, payload: Mapping[str, Any]) -> CreatedAdmin:
        body = await self._request("POST", "/admin/team", json=dict(payload))
        return self._parse(CreatedAdmin, body)

    async def update_admin(
        self, admin_id: int | str, payload: Mapping[str, Any]
    ) -> AdminRecord | None:
        body = await self._request("PUT", f"/admin/team/{admin_id}", json=dict(payload))
        if body is None:
            return None
        return self._parse(UpdatedAdmin, body).admin

    async def remove_admin(self, admin_id: int | str) -> None:
        try:
            await self._request("DELETE", f"/admin/team/{admin_id}")
        except UpstreamRejectedError as exc:
            # Already gone: deletion is idempotent
            if exc.status_code != status.HTTP_404_NOT_FOUND:
                raise
            logger.info("Admin %s already removed upstream", admin_id)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
    ) -> Any:
        url = self._build_url(path)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                headers=self._request_headers(),
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, json=json)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise self._map_status_error(method, path, exc.response) from exc
        except httpx.RequestError as exc:
            logger.warning("Admin directory %s %s failed: %s", method, path, exc)
            raise UpstreamUnavailableError() from exc

        if response.status_code == status.HTTP_204_NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("Admin directory %s %s returned a non-JSON body", method, path)
            raise UpstreamUnavailableError("Upstream returned an invalid response") from exc

    def _map_status_error(self, method: str, path: str, response: httpx.Response) -> Exception:
        code = response.status_code
        if code == status.HTTP_401_UNAUTHORIZED:
            return AuthError("Session has expired")
        if code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Admin directory %s %s returned %s", method, path, code)
            return UpstreamUnavailableError(details={"upstream_status": code})
        logger.warning("Admin directory %s %s rejected with %s", method, path, code)
        return UpstreamRejectedError(
            _upstream_message(response),
            status_code=code,
            details={"upstream_status": code},
        )

    def _request_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", **self._headers}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _build_url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    @staticmethod
    def _parse(model, body: Any):
        try:
            return model.model_validate(body)
        except PydanticValidationError as exc:
            logger.warning("Admin directory payload failed validation: %s", exc)
            raise UpstreamUnavailableError("Upstream returned an invalid response") from exc
