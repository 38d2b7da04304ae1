"""Async HTTP client for the ConfigMgr AdminService REST endpoint."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from script_dispatch.core.config import AdminServiceSettings
from script_dispatch.modules.common.exceptions import NotFoundError, TransportError

logger = logging.getLogger(__name__)


def odata_literal(value: str) -> str:
    """Quote a string for use inside an OData ``$filter`` expression."""
    return "'" + value.replace("'", "''") + "'"


class AdminServiceClient:
    """Connection context shared by every backend call.

    The client is created once (``connect``) and invalidated on ``close``;
    any request made outside that window raises ``TransportError``.
    """

    def __init__(
        self,
        settings: AdminServiceSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    @property
    def is_connected(self) -> bool:
        return self._http is not None

    async def connect(self) -> None:
        if self._http is not None:
            return
        auth = None
        if self.settings.username:
            auth = httpx.BasicAuth(self.settings.username, self.settings.password or "")
        self._http = httpx.AsyncClient(
            base_url=self.settings.base_url.rstrip("/") + "/",
            auth=auth,
            verify=self.settings.verify_tls,
            timeout=self.settings.timeout,
            headers={"Accept": "application/json"},
            transport=self._transport,
        )
        logger.info("AdminService client connected to %s", self.settings.base_url)

    async def close(self) -> None:
        if self._http is None:
            return
        await self._http.aclose()
        self._http = None
        logger.info("AdminService client closed")

    async def __aenter__(self) -> "AdminServiceClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def get_json(self, path: str, params: Optional[dict[str, str]] = None) -> dict[str, Any]:
        return await self._request("GET", path, params=params)

    async def post_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", path, json=payload)

    async def query(self, path: str, *, filters: Optional[list[str]] = None, select: Optional[list[str]] = None) -> list[dict[str, Any]]:
        """Run an OData collection query and return its ``value`` entries."""
        params: dict[str, str] = {}
        if filters:
            params["$filter"] = " and ".join(filters)
        if select:
            params["$select"] = ",".join(select)
        data = await self.get_json(path, params=params or None)
        value = data.get("value", [])
        if isinstance(value, dict):
            return [value]
        if not isinstance(value, list):
            raise TransportError(f"Unexpected response shape from {path}")
        return [entry for entry in value if isinstance(entry, dict)]

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        if self._http is None:
            raise TransportError("AdminService client is not connected")
        try:
            response = await self._http.request(method, path.lstrip("/"), **kwargs)
        except httpx.HTTPError as exc:
            logger.error("AdminService %s %s failed: %s", method, path, exc)
            raise TransportError(f"AdminService request failed: {exc}") from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            raise NotFoundError(f"AdminService resource not found: {path}")
        if response.is_error:
            logger.error("AdminService %s %s returned %s", method, path, response.status_code)
            raise TransportError(
                f"AdminService returned HTTP {response.status_code} for {path}",
                status_code=response.status_code,
            )
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError(f"AdminService returned a non-JSON body for {path}") from exc
        if not isinstance(data, dict):
            return {"value": data}
        return data


__all__ = ["AdminServiceClient", "odata_literal"]
