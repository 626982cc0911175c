"""jike-client - async Jike API client.

- Transparent access token renewal: a request rejected with 401 triggers one
  renewal through the refresh token and is resent once
- Lazy cursor pagination over "load more" listings
- Credential resolution from env, .env or a token file

Example:
    ```python
    from jike_client import JikeClient, PaginatedOption

    async with JikeClient.from_env() as client:
        followers = client.get_user("some-user").query_followers(PaginatedOption(limit=100))
        async for follower in followers:
            print(follower["screenName"])
    ```
"""

from jike_client.auth import AuthorizationError, CredentialResolver, Credentials, RefreshTokenMissingError
from jike_client.client import JikeClient
from jike_client.config import ApiConfig
from jike_client.errors import ApiResult, RequestFailureError, is_success
from jike_client.pagination import PaginatedOption, PaginatedSequence, paginate
from jike_client.user import JikeUser

__version__ = "0.1.0"

__all__ = [
    "ApiConfig",
    "ApiResult",
    "AuthorizationError",
    "CredentialResolver",
    "Credentials",
    "JikeClient",
    "JikeUser",
    "PaginatedOption",
    "PaginatedSequence",
    "RefreshTokenMissingError",
    "RequestFailureError",
    "__version__",
    "is_success",
    "paginate",
]
