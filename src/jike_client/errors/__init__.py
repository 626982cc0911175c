"""Result envelopes and error handling for Jike API calls."""

from jike_client.errors.exceptions import APIError, RequestFailureError
from jike_client.errors.handler import is_success, raise_for_result, throw_request_failure, to_result
from jike_client.errors.models import ApiResult, ErrorDetail

__all__ = [
    "APIError",
    "ApiResult",
    "ErrorDetail",
    "RequestFailureError",
    "is_success",
    "raise_for_result",
    "throw_request_failure",
    "to_result",
]
