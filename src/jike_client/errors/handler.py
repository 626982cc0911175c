"""Error handling utilities for HTTP responses."""

import logging
from typing import NoReturn

import httpx

from jike_client.errors.exceptions import RequestFailureError
from jike_client.errors.models import ApiResult, ErrorDetail

logger = logging.getLogger(__name__)


def to_result(response: httpx.Response) -> ApiResult:
    """Wrap an HTTP response into an `ApiResult` envelope.

    A response is successful when its status is 2xx and, if the body carries a
    `success` flag, that flag is not false.

    Args:
        response: HTTP response object (already read)
    """
    try:
        data = response.json() if response.content else None
    except ValueError:
        data = response.text

    success = response.is_success
    if success and isinstance(data, dict) and data.get("success") is False:
        success = False

    if success:
        return ApiResult(
            success=True,
            status_code=response.status_code,
            headers=response.headers,
            data=data,
            response=response,
        )

    return ApiResult(
        success=False,
        status_code=response.status_code,
        headers=response.headers,
        data=data,
        error=ErrorDetail.from_response(response),
        response=response,
    )


def is_success(result: ApiResult) -> bool:
    """Tell success payloads from failure payloads."""
    return result.success


def raise_for_result(result: ApiResult, operation: str) -> None:
    """Raise `RequestFailureError` if `result` is a failure envelope.

    Args:
        result: Envelope returned by a domain call
        operation: Human readable name of the operation, used in the message

    Raises:
        RequestFailureError: If the result is not successful
    """
    if is_success(result):
        return
    throw_request_failure(result, operation)


def throw_request_failure(result: ApiResult, operation: str) -> NoReturn:
    if result.error:
        detail = result.error.to_exception_message()
    else:
        detail = f"HTTP {result.status_code}"
    message = f"{operation} failed: {detail}"
    logger.debug(message)
    raise RequestFailureError(
        message,
        operation=operation,
        status_code=result.status_code,
        response=result.response,
        error_detail=result.error,
    )
