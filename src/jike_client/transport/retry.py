"""Backoff retry transport for rate limits and transient server errors.

`RateLimitAwareRetry` sits beneath `RenewingTransport` in the stack built by
`create_transport_stack`. It never sees authorization failures as retryable:
401 responses pass straight through so the renewal hook can handle them.

| Status | Methods retried |
|--------|-----------------|
| 429 | all (Retry-After honoured) |
| 502, 503, 504 | GET, HEAD, PUT, DELETE, OPTIONS, TRACE |

```python
import httpx
from jike_client.transport.retry import RateLimitAwareRetry

transport = RateLimitAwareRetry(wrapped_transport=httpx.AsyncHTTPTransport(), max_retries=3)
```
"""

import asyncio
import logging
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import httpx

logger = logging.getLogger(__name__)


class RateLimitAwareRetry(httpx.AsyncBaseTransport):
    """Retry 429 for every method and selected 5xx for idempotent methods.

    Args:
        wrapped_transport: The underlying transport to wrap
        max_retries: Maximum number of retry attempts (default: 3)
        backoff_factor: Multiplier for exponential backoff (default: 0.5)
        max_backoff: Maximum backoff time in seconds (default: 30)
        retry_5xx_status_codes: 5xx codes to retry (default: 502, 503, 504)
    """

    IDEMPOTENT_METHODS: frozenset[str] = frozenset(["HEAD", "GET", "PUT", "DELETE", "OPTIONS", "TRACE"])

    DEFAULT_RETRY_5XX_STATUS_CODES: frozenset[int] = frozenset([502, 503, 504])

    def __init__(
        self,
        *,
        wrapped_transport: httpx.AsyncBaseTransport,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        max_backoff: float = 30.0,
        retry_5xx_status_codes: frozenset[int] | None = None,
    ) -> None:
        self._wrapped_transport = wrapped_transport
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.max_backoff = max_backoff
        self.retry_5xx_status_codes = retry_5xx_status_codes or self.DEFAULT_RETRY_5XX_STATUS_CODES

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        retries = 0

        while True:
            try:
                response = await self._wrapped_transport.handle_async_request(request)
            except httpx.TransportError as e:
                if retries >= self.max_retries or request.method not in self.IDEMPOTENT_METHODS:
                    raise
                retries += 1
                delay = self._calculate_backoff_delay(retries)
                logger.warning(
                    f"Request {request.method} {request.url} failed with {e!r}, "
                    f"retrying in {delay}s (attempt {retries}/{self.max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            delay = self._retry_delay(request, response, retries)
            if delay is None:
                return response

            retries += 1
            logger.warning(
                f"Request {request.method} {request.url} failed with {response.status_code}, "
                f"retrying in {delay}s (attempt {retries}/{self.max_retries})"
            )
            await response.aclose()
            await asyncio.sleep(delay)

    async def aclose(self) -> None:
        await self._wrapped_transport.aclose()

    def _retry_delay(self, request: httpx.Request, response: httpx.Response, current_retries: int) -> float | None:
        """Return the delay before the next attempt, or None when not retrying."""
        if current_retries >= self.max_retries:
            return None

        if response.status_code == 429:
            delay = self._parse_retry_after(response)
            return delay if delay is not None else self._calculate_backoff_delay(current_retries + 1)

        if response.status_code in self.retry_5xx_status_codes and request.method in self.IDEMPOTENT_METHODS:
            return self._calculate_backoff_delay(current_retries + 1)

        return None

    def _parse_retry_after(self, response: httpx.Response) -> float | None:
        """Parse Retry-After as delay-seconds or HTTP-date, capped at max_backoff."""
        retry_after = response.headers.get("Retry-After")
        if not retry_after:
            return None

        try:
            delay = float(int(retry_after))
        except ValueError:
            try:
                delay = (parsedate_to_datetime(retry_after) - datetime.now(UTC)).total_seconds()
            except (ValueError, TypeError):
                return None

        # Negative delays come from clock skew
        if delay < 0:
            return None
        return min(delay, self.max_backoff)

    def _calculate_backoff_delay(self, retry_number: int) -> float:
        # 1-indexed: backoff_factor, 2x, 4x, ... capped at max_backoff
        return min(self.backoff_factor * (2 ** (retry_number - 1)), self.max_backoff)
