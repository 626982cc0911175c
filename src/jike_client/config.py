"""Client configuration.

`ApiConfig` is an immutable value passed explicitly to every client and API
object. Changing the access token produces a new config, and with it a new
transport client, because the token lives in the client's default headers.

Example:
    ```python
    from jike_client.config import ApiConfig

    config = ApiConfig(endpoint_id="jike", access_token="...")
    config.access_token_header  # "x-jike-access-token"
    ```
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from jike_client.auth.credentials import CredentialResolver

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT_ID = "jike"
DEFAULT_BASE_URL = "https://api.ruguoapp.com/1.0/"
DEFAULT_TIMEOUT = 10.0

DEFAULT_HEADERS: dict[str, str] = {
    "Origin": "https://web.okjike.com",
    "Accept": "application/json, text/plain, */*",
    "User-Agent": (
        "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) "
        "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/16.0 "
        "Mobile/15E148 Safari/604.1"
    ),
}

# Path of the token renewal operation, relative to base_url
RENEWAL_PATH = "app_auth_tokens.refresh"


@dataclass(frozen=True)
class ApiConfig:
    """Resolved configuration for one client instance.

    Attributes:
        endpoint_id: Namespace used to build the credential header names.
        base_url: Base URL every API path is resolved against.
        headers: Extra default headers sent with every request.
        access_token: Current access token; empty before the first login.
        timeout: Per-request timeout in seconds.
    """

    endpoint_id: str = DEFAULT_ENDPOINT_ID
    base_url: str = DEFAULT_BASE_URL
    headers: dict[str, str] = field(default_factory=dict)
    access_token: str = ""
    timeout: float = DEFAULT_TIMEOUT

    @property
    def access_token_header(self) -> str:
        return f"x-{self.endpoint_id}-access-token"

    @property
    def refresh_token_header(self) -> str:
        return f"x-{self.endpoint_id}-refresh-token"

    def with_access_token(self, token: str) -> ApiConfig:
        """Return a copy of this config carrying `token`."""
        return dataclasses.replace(self, access_token=token)

    def default_headers(self) -> dict[str, str]:
        """Build the default headers baked into a transport client.

        The access token header is only present once a token is known.
        """
        headers = {**DEFAULT_HEADERS, **self.headers}
        if self.access_token:
            headers[self.access_token_header] = self.access_token
        return headers

    @classmethod
    def from_env(cls, resolver: CredentialResolver | None = None, **overrides) -> ApiConfig:
        """Build a config from explicit overrides, then environment, then defaults.

        Reads `JIKE_ENDPOINT_ID`, `JIKE_BASE_URL`, `JIKE_TIMEOUT` and the access
        token (see `CredentialResolver.resolve_credentials`).

        Args:
            resolver: Resolver to use. A default one (loading `.env`) is created
                when omitted.
            **overrides: Explicit field values; these win over the environment.
        """
        from jike_client.auth.credentials import CredentialResolver

        resolver = resolver or CredentialResolver()
        endpoint_id = resolver.resolve(
            value=overrides.pop("endpoint_id", None),
            env_var_name="JIKE_ENDPOINT_ID",
            default=DEFAULT_ENDPOINT_ID,
            mask_in_logs=False,
        )
        base_url = resolver.resolve(
            value=overrides.pop("base_url", None),
            env_var_name="JIKE_BASE_URL",
            default=DEFAULT_BASE_URL,
            mask_in_logs=False,
        )
        timeout = overrides.pop("timeout", None)
        if timeout is None:
            timeout = float(
                resolver.resolve(env_var_name="JIKE_TIMEOUT", default=str(DEFAULT_TIMEOUT), mask_in_logs=False)
            )
        access_token = overrides.pop("access_token", None)
        if access_token is None:
            access_token = resolver.resolve_credentials().access_token

        return cls(
            endpoint_id=endpoint_id,
            base_url=base_url,
            access_token=access_token,
            timeout=timeout,
            **overrides,
        )


def resolve_api_config(config: ApiConfig | None = None, **overrides) -> ApiConfig:
    """Fill in defaults for a partially specified configuration.

    Args:
        config: Base configuration; `ApiConfig()` when omitted.
        **overrides: Field values replacing those of `config`.
    """
    config = config or ApiConfig()
    if overrides:
        config = dataclasses.replace(config, **overrides)
    logger.debug(f"Resolved API config for endpoint '{config.endpoint_id}' at {config.base_url}")
    return config
