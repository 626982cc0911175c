"""Authentication components for the Jike client.

This module provides:
- The access/refresh token pair and its multi-source resolution
  (value → env → .env → token file)
- `CredentialsManager`, which rebuilds the HTTP client when tokens change and
  renews the access token through the refresh token

Example:
    ```python
    from jike_client.auth import CredentialResolver

    resolver = CredentialResolver()
    credentials = resolver.resolve_credentials(required=True)
    ```
"""

from jike_client.auth.credentials import CredentialResolver, Credentials
from jike_client.auth.exceptions import (
    AuthorizationError,
    CredentialError,
    CredentialFileError,
    CredentialNotFoundError,
    RefreshTokenMissingError,
)
from jike_client.auth.manager import CredentialsManager

__all__ = [
    "AuthorizationError",
    "CredentialError",
    "CredentialFileError",
    "CredentialNotFoundError",
    "CredentialResolver",
    "Credentials",
    "CredentialsManager",
    "RefreshTokenMissingError",
]
