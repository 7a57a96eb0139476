"""
Exceptions for Canvas Grades.

Upstream and identity failures are raised by the low-level layers. The
TerminalError family is what the report surfaces to its caller when the
whole request has to be abandoned.
"""


class UpstreamError(Exception):
    """Raised when a Canvas API call fails or returns an unusable payload."""

    def __init__(self, status: int | None, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"Canvas API request failed (status={status}): {body[:200]}")


class IdentityError(Exception):
    """Raised when no student enrollment can be found for the token owner."""


class TerminalError(Exception):
    """Base class for failures that abort the whole report."""

    stage = "unknown"


class MissingToken(TerminalError):
    stage = "token"

    def __init__(self):
        super().__init__("Missing token")


class UpstreamUnavailable(TerminalError):
    stage = "courses"

    def __init__(self, status: int | None):
        self.status = status
        super().__init__(f"Canvas returned {status} when fetching courses")


class IdentityUnresolved(TerminalError):
    stage = "identity"

    def __init__(self):
        super().__init__("No student enrollment found for this token")
