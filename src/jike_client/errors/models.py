"""Response envelope and server error detail models."""

from dataclasses import dataclass, field
from typing import Any

import httpx


@dataclass
class ErrorDetail:
    """Error detail reported by the server for a failed call."""

    message: str | None = None  # Developer facing error text
    toast: str | None = None  # User facing text the app would show
    code: str | int | None = None  # Server error code, when present

    # Remaining fields of the error body
    extensions: dict[str, Any] | None = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ErrorDetail | None":
        """Parse error detail from a failed HTTP response.

        Args:
            response: HTTP response object

        Returns:
            ErrorDetail object or None if the body is not a JSON object
        """
        try:
            data = response.json()
        except (ValueError, TypeError, AttributeError):
            return None
        if not isinstance(data, dict):
            return None

        known_fields = {"error", "message", "toast", "code", "success"}
        extensions = {k: v for k, v in data.items() if k not in known_fields}
        message = data.get("error") or data.get("message")

        return cls(
            message=message if isinstance(message, str) else None,
            toast=data.get("toast"),
            code=data.get("code"),
            extensions=extensions if extensions else None,
        )

    def to_exception_message(self) -> str:
        lines = []
        if self.message:
            lines.append(self.message)
        if self.toast and self.toast != self.message:
            lines.append(self.toast)
        if self.code is not None:
            lines.append(f"Error code: {self.code}")
        return "\n".join(lines) if lines else "Unknown API error"


@dataclass
class ApiResult:
    """Discriminated result of a domain call.

    On success `data` holds the decoded body; on failure `error` holds the
    server's detail. Use `is_success` to tell them apart.
    """

    success: bool
    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    data: Any = None
    error: ErrorDetail | None = None
    response: httpx.Response | None = field(default=None, repr=False)
