"""High level Jike client.

`JikeClient` combines the credential manager, which renews the access token
whenever a request fails with 401, with the endpoint bindings and the lazy
pagination helpers.

Example:
    ```python
    from jike_client import ApiConfig, JikeClient, PaginatedOption

    async with JikeClient(ApiConfig()) as client:
        await client.login_with_password("+86", "13800000000", "secret")
        async for notification in client.query_notifications(PaginatedOption(limit=20)):
            print(notification["created_at"], notification["type"])
    ```
"""

import logging
from datetime import datetime
from typing import Any

import httpx

from jike_client.api import Api
from jike_client.auth.credentials import CredentialResolver, Credentials
from jike_client.auth.manager import CredentialsManager
from jike_client.config import ApiConfig
from jike_client.errors.handler import is_success, throw_request_failure
from jike_client.errors.models import ApiResult
from jike_client.pagination import PaginatedOption, PaginatedSequence, paginate
from jike_client.user import JikeUser

logger = logging.getLogger(__name__)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp as sent by the server (`...Z` included)."""
    if not value:
        return None
    return datetime.fromisoformat(value)


class JikeClient:
    """Authenticated Jike client.

    Args:
        config: Client configuration; defaults are used when omitted
        refresh_token: Refresh token to start with; empty means logged out
        transport: Base httpx transport, e.g. `httpx.MockTransport` in tests
        max_retries: Opt-in backoff retries for 429/5xx responses; 0 keeps
            failures unretried apart from the 401 renewal path
    """

    def __init__(
        self,
        config: ApiConfig | None = None,
        refresh_token: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 0,
    ) -> None:
        self._manager = CredentialsManager(
            config, refresh_token=refresh_token, transport=transport, max_retries=max_retries
        )

    @classmethod
    def from_env(cls, resolver: CredentialResolver | None = None, **kwargs) -> "JikeClient":
        """Build a client from `JIKE_*` environment variables, `.env` or a token file."""
        resolver = resolver or CredentialResolver()
        credentials = resolver.resolve_credentials()
        config = ApiConfig.from_env(resolver, access_token=credentials.access_token)
        return cls(config, refresh_token=credentials.refresh_token, **kwargs)

    async def __aenter__(self) -> "JikeClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._manager.aclose()

    @property
    def credentials_manager(self) -> CredentialsManager:
        return self._manager

    @property
    def credentials(self) -> Credentials:
        return self._manager.credentials

    @property
    def access_token(self) -> str:
        return self._manager.access_token

    @property
    def refresh_token(self) -> str:
        return self._manager.refresh_token

    @property
    def config(self) -> ApiConfig:
        return self._manager.config

    @property
    def api(self) -> Api:
        return self._manager.api

    async def send_sms_code(self, area_code: str | int, mobile: str) -> None:
        """Send a login SMS code to `mobile`.

        Raises:
            RequestFailureError: If the server refuses.
        """
        result = await self.api.users.get_sms_code(area_code, mobile)
        if not is_success(result):
            throw_request_failure(result, "send SMS code")

    async def login_with_sms_code(self, area_code: str | int, mobile: str, sms_code: str | int) -> None:
        """Log in with an SMS code and store the returned token pair.

        Raises:
            RequestFailureError: If the login fails.
        """
        result = await self.api.users.login_with_sms_code(area_code, mobile, sms_code)
        if not is_success(result):
            throw_request_failure(result, "login")
        self._apply_login(result)

    async def login_with_password(self, area_code: str | int, mobile: str, password: str) -> None:
        """Log in with a password and store the returned token pair.

        Raises:
            RequestFailureError: If the login fails.
        """
        result = await self.api.users.login_with_phone_and_password(area_code, mobile, password)
        if not is_success(result):
            throw_request_failure(result, "login")
        self._apply_login(result)

    def _apply_login(self, result: ApiResult) -> None:
        config = self.config
        self._manager.apply_credentials(
            access_token=result.headers.get(config.access_token_header, ""),
            refresh_token=result.headers.get(config.refresh_token_header, ""),
        )
        logger.info("Logged in")

    async def renew_token(self) -> None:
        """Renew the access token now.

        Raises:
            RefreshTokenMissingError: If no refresh token is stored.
            AuthorizationError: If the refresh token was rejected.
        """
        await self._manager.renew_token()

    def get_user(self, username: str) -> JikeUser:
        return JikeUser(self, username)

    def get_self(self) -> JikeUser:
        return JikeUser(self, None)

    def query_notifications(self, option: PaginatedOption[str] | None = None) -> PaginatedSequence[str]:
        """The logged-in user's notifications, newest first, as a lazy sequence.

        Each item gains `created_at` / `updated_at` datetimes and a running
        `total`.
        """

        async def fetch_page(last_id: str | None):
            result = await self.api.notifications.list(
                load_more_key={"lastNotificationId": last_id} if last_id else None
            )
            if not is_success(result):
                throw_request_failure(result, "query notifications")
            load_more_key = result.data.get("loadMoreKey") or {}
            return load_more_key.get("lastNotificationId"), result.data["data"]

        def annotate(item: dict[str, Any], items: list[dict[str, Any]]) -> dict[str, Any]:
            return {
                "created_at": parse_timestamp(item.get("createdAt")),
                "updated_at": parse_timestamp(item.get("updatedAt")),
                "total": len(items) + 1,
            }

        return paginate(fetch_page, annotate, option)
