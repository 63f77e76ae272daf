"""
Upstream error classification.

Every FCC client raises from this hierarchy so callers can tell
"failed to reach a data source" apart from "the source has no data".
No error here is retried: a failed upstream call is surfaced once and the
coverage tier fallback is the only recovery mechanism.
"""

from typing import Optional, Dict, Any


class APIError(Exception):
    """
    Base exception for all upstream errors.

    Attributes:
        message: Human-readable error description
        source: Upstream name (e.g., 'fcc_bdc', 'fcc_form477')
        status_code: HTTP status code if applicable
        response_data: Raw response data for debugging
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.source = source
        self.status_code = status_code
        self.response_data = response_data

    def __str__(self) -> str:
        parts = [self.message]
        if self.source:
            parts.insert(0, f"[{self.source}]")
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "source": self.source,
            "status_code": self.status_code,
            "response_data": self.response_data,
        }


class UpstreamUnavailable(APIError):
    """
    An upstream could not be reached or answered with an error.

    Examples:
    - Network / DNS / connection reset errors
    - Any non-2xx HTTP status
    - A JSON envelope reporting a non-successful status
    - A body that is not the JSON shape the endpoint promises
    """


class UpstreamTimeout(UpstreamUnavailable):
    """
    The request exceeded its per-call timeout.

    Handled exactly like UpstreamUnavailable for that sub-request; sibling
    requests in the same fan-out are unaffected.
    """

    def __init__(
        self,
        message: str = "Request timed out",
        source: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        if timeout is not None:
            message = f"{message} after {timeout:.1f}s"
        super().__init__(message=message, source=source)
        self.timeout = timeout


class MalformedRecordError(APIError):
    """
    A single upstream row or geometry failed to parse.

    Always recovered locally by skipping the record; never propagated
    past the adapter that raised it.
    """

    def __init__(
        self,
        message: str = "Malformed record",
        source: Optional[str] = None,
        record: Optional[Any] = None,
    ):
        super().__init__(message=message, source=source)
        self.record = record


def classify_http_error(
    status_code: int, response_text: str = "", source: Optional[str] = None
) -> APIError:
    """
    Classify an HTTP error status into an UpstreamUnavailable.

    Args:
        status_code: HTTP status code
        response_text: Response body text
        source: Upstream name

    Returns:
        UpstreamUnavailable carrying a readable cause
    """
    if status_code == 429:
        message = f"Rate limited: {response_text[:200]}"
    elif status_code in (401, 403):
        message = f"Access denied: {response_text[:200]}"
    elif status_code == 404:
        message = f"Not found: {response_text[:200]}"
    elif status_code in (400, 422):
        message = f"Rejected request: {response_text[:200]}"
    elif 500 <= status_code < 600:
        message = f"Server error: {response_text[:200]}"
    else:
        message = f"HTTP error {status_code}: {response_text[:200]}"
    return UpstreamUnavailable(
        message=message.rstrip(": "), source=source, status_code=status_code
    )
