"""Access token renewal on 401 responses.

`RenewingTransport` wraps another httpx transport and consults a
*before-retry* hook whenever a request fails, either with a transport error or
with a non-2xx response. The hook may patch the request in place and ask for it
to be resent.

`RenewalInterceptor` is the hook used by `JikeClient`. Its decision policy, in
order:

1. failure is not an HTTP status failure → no retry
2. status is not 401 → no retry
3. request targets the renewal endpoint itself → no retry
4. otherwise renew the token, patch the access token header, retry

The transport resends a request at most `max_hook_retries` times (default 1),
so a server that keeps answering 401 after a successful renewal cannot cause
a loop.

Example:
    ```python
    transport = RenewingTransport(
        wrapped_transport=httpx.AsyncHTTPTransport(),
        before_retry=RenewalInterceptor(manager),
    )
    ```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import httpx

if TYPE_CHECKING:
    from jike_client.auth.manager import CredentialsManager

logger = logging.getLogger(__name__)


@dataclass
class RetryContext:
    """What the before-retry hook gets to see.

    Attributes:
        request: The failing request. Its headers may be patched in place.
        error: `httpx.HTTPStatusError` for non-2xx responses, otherwise the
            exception raised by the wrapped transport.
        attempt: Number of hook-triggered resends already made for this request.
    """

    request: httpx.Request
    error: Exception
    attempt: int = 0


class BeforeRetryHook(Protocol):
    async def __call__(self, context: RetryContext) -> bool: ...


class RenewingTransport(httpx.AsyncBaseTransport):
    """Transport that lets a hook decide whether a failed request is resent.

    Args:
        wrapped_transport: The underlying transport to wrap
        before_retry: Hook consulted on every failure; True means resend
        max_hook_retries: Maximum hook-triggered resends per request
    """

    def __init__(
        self,
        *,
        wrapped_transport: httpx.AsyncBaseTransport,
        before_retry: BeforeRetryHook,
        max_hook_retries: int = 1,
    ) -> None:
        self._wrapped_transport = wrapped_transport
        self.before_retry = before_retry
        self.max_hook_retries = max_hook_retries

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0

        while True:
            try:
                response = await self._wrapped_transport.handle_async_request(request)
            except Exception as e:
                if attempt >= self.max_hook_retries:
                    raise
                if not await self.before_retry(RetryContext(request=request, error=e, attempt=attempt)):
                    raise
                attempt += 1
                continue

            if 200 <= response.status_code < 300 or attempt >= self.max_hook_retries:
                return response

            error = httpx.HTTPStatusError(
                f"{request.method} {request.url} failed with {response.status_code}",
                request=request,
                response=response,
            )
            try:
                should_retry = await self.before_retry(RetryContext(request=request, error=error, attempt=attempt))
            except BaseException:
                await response.aclose()
                raise
            if not should_retry:
                return response

            attempt += 1
            logger.debug(f"Resending {request.method} {request.url} (attempt {attempt}/{self.max_hook_retries})")
            await response.aclose()

    async def aclose(self) -> None:
        await self._wrapped_transport.aclose()


class RenewalInterceptor:
    """Before-retry hook that renews the access token on 401.

    Holds nothing but a reference to the credentials manager, so it stays
    valid across client rebuilds.
    """

    UNAUTHORIZED = 401

    def __init__(self, manager: CredentialsManager) -> None:
        self._manager = manager

    async def __call__(self, context: RetryContext) -> bool:
        error = context.error
        if not isinstance(error, httpx.HTTPStatusError):
            return False

        if error.response.status_code != self.UNAUTHORIZED:
            return False

        request = context.request
        # never renew while renewing
        if self._manager.is_renewal_request(request):
            return False

        header = self._manager.config.access_token_header
        failed_token = request.headers.get(header, "")
        logger.info(f"{request.method} {request.url} returned 401, renewing access token")

        # AuthorizationError propagates to the caller of the original request
        await self._manager.renew_token(failed_access_token=failed_token)
        request.headers[header] = self._manager.access_token
        return True
