"""Credential store and transport client rebuilder.

`CredentialsManager` owns the current access/refresh tokens and the
`httpx.AsyncClient` that carries the access token in its default headers.
Changing the access token goes through `apply_access_token` or
`apply_credentials`, which rebuild that client; nothing patches headers on an
existing client. Code that needs the client looks it up through
`http_client` on each call instead of holding on to one across a renewal.

Renewals are serialized: concurrent 401s share one renewal call.
"""

import asyncio
import logging

import httpx

from jike_client.api import Api, build_http_client
from jike_client.auth.credentials import Credentials
from jike_client.auth.exceptions import AuthorizationError, RefreshTokenMissingError
from jike_client.config import RENEWAL_PATH, ApiConfig, resolve_api_config
from jike_client.errors.handler import is_success
from jike_client.transport import RenewalInterceptor, create_transport_stack

logger = logging.getLogger(__name__)


class CredentialsManager:
    """Hold the token pair and rebuild the HTTP client when it changes.

    Args:
        config: Client configuration, including the initial access token
        refresh_token: Initial refresh token; empty means unauthenticated
        transport: Base transport shared by every rebuilt client; a fresh
            `httpx.AsyncHTTPTransport` when omitted
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
        self._config = resolve_api_config(config)
        self._refresh_token = refresh_token
        self._renew_lock = asyncio.Lock()
        self._transport = create_transport_stack(
            before_retry=RenewalInterceptor(self),
            wrapped_transport=transport,
            max_retries=max_retries,
        )
        self._api = Api(lambda: self.http_client)
        self.rebuild_count = 0
        self._http_client = self._build_client()

    @property
    def access_token(self) -> str:
        return self._config.access_token

    @property
    def refresh_token(self) -> str:
        return self._refresh_token

    @property
    def credentials(self) -> Credentials:
        return Credentials(access_token=self.access_token, refresh_token=self._refresh_token)

    @property
    def config(self) -> ApiConfig:
        return self._config

    @property
    def http_client(self) -> httpx.AsyncClient:
        """The current client. Replaced on every token change."""
        return self._http_client

    @property
    def api(self) -> Api:
        return self._api

    def _build_client(self) -> httpx.AsyncClient:
        # rebuilt clients share one transport stack and its connection pool
        self.rebuild_count += 1
        logger.debug(f"Building HTTP client for '{self._config.endpoint_id}' (build #{self.rebuild_count})")
        return build_http_client(self._config, self._transport)

    def apply_access_token(self, token: str) -> None:
        """Replace the access token and rebuild the HTTP client."""
        self._config = self._config.with_access_token(token)
        self._http_client = self._build_client()

    def apply_credentials(self, access_token: str, refresh_token: str) -> None:
        """Replace both tokens with a single rebuild."""
        self._refresh_token = refresh_token
        self.apply_access_token(access_token)

    def apply_config(self, config: ApiConfig) -> None:
        """Replace the whole configuration and rebuild the HTTP client."""
        self._config = resolve_api_config(config)
        self._http_client = self._build_client()

    def is_renewal_request(self, request: httpx.Request) -> bool:
        return RENEWAL_PATH in request.url.path

    async def renew_token(self, failed_access_token: str | None = None) -> None:
        """Exchange the refresh token for a new token pair.

        Args:
            failed_access_token: The access token a request was rejected with.
                When the current token already differs once the renewal lock
                is held, a concurrent renewal has succeeded and no call is made.

        Raises:
            RefreshTokenMissingError: No refresh token is stored; raised before
                any network call.
            AuthorizationError: The server rejected the refresh token.
        """
        if not self._refresh_token:
            raise RefreshTokenMissingError("No refresh token available, log in again to obtain one")

        async with self._renew_lock:
            if failed_access_token is not None and failed_access_token != self.access_token:
                logger.debug("Access token was renewed by a concurrent request, skipping renewal")
                return

            logger.debug("Renewing access token (refresh token: ***)")
            result = await self._api.users.refresh_token(
                self._refresh_token, header_name=self._config.refresh_token_header
            )
            if not is_success(result):
                logger.warning(f"Token renewal rejected with HTTP {result.status_code}")
                raise AuthorizationError(
                    "Failed to renew access token: the refresh token is invalid or has expired"
                )

            data = result.data if isinstance(result.data, dict) else {}
            access_token = data.get(self._config.access_token_header)
            refresh_token = data.get(self._config.refresh_token_header)
            if not access_token or not refresh_token:
                raise AuthorizationError("Token renewal response did not contain a token pair")

            self.apply_credentials(access_token=access_token, refresh_token=refresh_token)
            logger.info("Access token renewed")

    async def aclose(self) -> None:
        """Close the shared transport and its connections."""
        await self._http_client.aclose()
