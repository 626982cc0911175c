"""Custom exceptions for credential resolution and authorization.

This module defines exceptions used throughout the authentication system:
resolving credentials at start-up and renewing the access token at runtime.

Example:
    ```python
    from jike_client.auth.exceptions import AuthorizationError

    try:
        await client.renew_token()
    except AuthorizationError:
        # refresh token is gone or expired, log in again
        await client.login_with_sms_code("+86", mobile, code)
    ```
"""


class CredentialError(Exception):
    """Base exception for credential-related errors.

    All credential-specific exceptions inherit from this class,
    making it easy to catch any credential-related error.
    """

    pass


class CredentialNotFoundError(CredentialError):
    """Raised when a required credential cannot be resolved.

    Attributes:
        env_var_name: The environment variable name that was checked (if any).
    """

    def __init__(self, message: str, env_var_name: str | None = None):
        super().__init__(message)
        self.env_var_name = env_var_name


class CredentialFileError(CredentialError):
    """Raised when a token file cannot be read or parsed."""

    pass


class AuthorizationError(CredentialError):
    """Raised when the access token cannot be renewed.

    The client cannot recover from this on its own: the caller has to log in
    again to obtain a fresh credential pair.
    """

    pass


class RefreshTokenMissingError(AuthorizationError):
    """Raised when renewal is requested without a stored refresh token.

    Raised before any network call is made.
    """

    pass
