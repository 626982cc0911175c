"""Transport layer components for composable HTTP middleware.

Transport layers wrap an httpx transport to add behaviour below the client:

Modules:
    renewal: Before-retry hook transport and the 401 token renewal hook
    retry: Backoff retry for rate limits and transient server errors

Example:
    ```python
    from jike_client.transport import create_transport_stack

    transport = create_transport_stack(before_retry=RenewalInterceptor(manager))
    client = httpx.AsyncClient(transport=transport)
    ```
"""

import httpx

from jike_client.transport.renewal import BeforeRetryHook, RenewalInterceptor, RenewingTransport, RetryContext
from jike_client.transport.retry import RateLimitAwareRetry


def create_transport_stack(
    *,
    before_retry: BeforeRetryHook,
    wrapped_transport: httpx.AsyncBaseTransport | None = None,
    max_retries: int = 0,
) -> RenewingTransport:
    """Build `RenewingTransport` over optional backoff retry over the base transport.

    Args:
        before_retry: Hook consulted when a request fails
        wrapped_transport: Base transport; a fresh `httpx.AsyncHTTPTransport`
            when omitted
        max_retries: Backoff retries for 429/5xx; 0 disables that layer
    """
    transport = wrapped_transport or httpx.AsyncHTTPTransport()
    if max_retries > 0:
        transport = RateLimitAwareRetry(wrapped_transport=transport, max_retries=max_retries)
    return RenewingTransport(wrapped_transport=transport, before_retry=before_retry)


__all__ = [
    "BeforeRetryHook",
    "RateLimitAwareRetry",
    "RenewalInterceptor",
    "RenewingTransport",
    "RetryContext",
    "create_transport_stack",
]
