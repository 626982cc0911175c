"""Endpoint bindings for the Jike API.

Every call returns an `ApiResult` envelope; check it with `is_success`.

Example:
    ```python
    from jike_client.api import create_api
    from jike_client.config import ApiConfig
    from jike_client.errors import is_success

    api = create_api(ApiConfig(access_token="..."))
    result = await api.user_relation.get_follower_list("some-user", limit=10)
    if is_success(result):
        print(len(result.data["data"]))
    await api.aclose()
    ```
"""

import httpx

from jike_client.api.base import ApiGroup, ClientProvider
from jike_client.api.notifications import NotificationsApi
from jike_client.api.user_relation import UserRelationApi
from jike_client.api.users import UsersApi, resolve_area_code
from jike_client.config import ApiConfig


class Api:
    """All endpoint groups, sharing one client provider."""

    def __init__(self, client_provider: ClientProvider, owned_client: httpx.AsyncClient | None = None) -> None:
        self.users = UsersApi(client_provider)
        self.user_relation = UserRelationApi(client_provider)
        self.notifications = NotificationsApi(client_provider)
        self._owned_client = owned_client

    async def aclose(self) -> None:
        """Close the HTTP client if this `Api` created it."""
        if self._owned_client is not None:
            await self._owned_client.aclose()


def build_http_client(config: ApiConfig, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the config's default headers baked in."""
    return httpx.AsyncClient(
        base_url=config.base_url,
        headers=config.default_headers(),
        timeout=config.timeout,
        transport=transport,
    )


def create_api(config: ApiConfig, transport: httpx.AsyncBaseTransport | None = None) -> Api:
    """Build a standalone `Api` over an explicit configuration.

    No token renewal happens here; use `JikeClient` for that.
    """
    client = build_http_client(config, transport)
    return Api(lambda: client, owned_client=client)


__all__ = [
    "Api",
    "ApiGroup",
    "NotificationsApi",
    "UserRelationApi",
    "UsersApi",
    "build_http_client",
    "create_api",
    "resolve_area_code",
]
