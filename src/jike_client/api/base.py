"""Shared plumbing for API endpoint groups."""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from jike_client.errors.handler import to_result
from jike_client.errors.models import ApiResult

logger = logging.getLogger(__name__)

ClientProvider = Callable[[], httpx.AsyncClient]


class ApiGroup:
    """A group of related endpoints.

    The HTTP client is looked up through `client_provider` on every call, since
    the client object is replaced whenever the access token changes.
    """

    def __init__(self, client_provider: ClientProvider) -> None:
        self._client_provider = client_provider

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> ApiResult:
        client = self._client_provider()
        logger.debug(f"{method} {path}")
        response = await client.request(method, path, json=json, params=params, headers=headers)
        return to_result(response)

    async def _post(self, path: str, json: Any = None, headers: dict[str, str] | None = None) -> ApiResult:
        return await self._request("POST", path, json=json, headers=headers)

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> ApiResult:
        return await self._request("GET", path, params=params)


def drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose value is None so they are not sent at all."""
    return {k: v for k, v in payload.items() if v is not None}
