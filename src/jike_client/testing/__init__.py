"""Testing utilities for code built on jike-client.

Factories for fake server responses to use with `httpx.MockTransport`.

Example:
    ```python
    import httpx
    from jike_client import JikeClient
    from jike_client.testing import create_page_response


    async def handler(request):
        return create_page_response([{"id": "1"}], load_more_key=None)


    client = JikeClient(transport=httpx.MockTransport(handler), max_retries=0)
    ```
"""

from typing import Any

import httpx

from jike_client.config import ApiConfig


def create_mock_response(data: Any = None, status_code: int = 200, headers: dict[str, str] | None = None) -> httpx.Response:
    """A JSON response; `{"success": true}` when `data` is None."""
    return httpx.Response(status_code, json={"success": True} if data is None else data, headers=headers)


def create_error_response(status_code: int, error: str = "error", toast: str | None = None) -> httpx.Response:
    """A failure response with the server's error body shape."""
    body: dict[str, Any] = {"success": False, "error": error}
    if toast is not None:
        body["toast"] = toast
    return httpx.Response(status_code, json=body)


def create_page_response(items: list[dict[str, Any]], load_more_key: dict[str, Any] | None = None) -> httpx.Response:
    """A "load more" page; the key is left out entirely on the last page."""
    body: dict[str, Any] = {"data": items}
    if load_more_key is not None:
        body["loadMoreKey"] = load_more_key
    return httpx.Response(200, json=body)


def create_token_response(access_token: str, refresh_token: str, config: ApiConfig | None = None) -> httpx.Response:
    """A successful renewal response carrying the token pair in its body."""
    config = config or ApiConfig()
    return httpx.Response(
        200,
        json={
            "success": True,
            config.access_token_header: access_token,
            config.refresh_token_header: refresh_token,
        },
    )


def create_login_response(access_token: str, refresh_token: str, config: ApiConfig | None = None) -> httpx.Response:
    """A successful login response carrying the token pair in its headers."""
    config = config or ApiConfig()
    return httpx.Response(
        200,
        json={"success": True},
        headers={
            config.access_token_header: access_token,
            config.refresh_token_header: refresh_token,
        },
    )


__all__ = [
    "create_error_response",
    "create_login_response",
    "create_mock_response",
    "create_page_response",
    "create_token_response",
]
