"""Exception types raised by octoapp."""
from __future__ import annotations


class OctoAppError(Exception):
    """Base class for all octoapp errors."""


class SignatureError(OctoAppError):
    """A webhook signature could not be evaluated."""


class SignatureDecodeError(SignatureError):
    """The signature header is not ``<scheme>=<hex digest>`` in a known scheme."""


class SignatureBackendError(SignatureError):
    """The HMAC could not be computed (unsupported digest, bad key type, ...)."""


class PayloadDecodeError(OctoAppError):
    """A webhook body is not valid JSON or lacks a required key."""


class UnsupportedEventError(OctoAppError):
    """No payload type is registered for the given ``X-GitHub-Event`` value."""

    def __init__(self, event_type: str) -> None:
        super().__init__(f"Unsupported webhook event: {event_type!r}")
        self.event_type = event_type


class GitHubApiError(OctoAppError):
    """GitHub answered a request with an unexpected status code."""

    def __init__(self, status_code: int, message: str = "") -> None:
        detail = f": {message}" if message else ""
        super().__init__(f"GitHub API returned {status_code}{detail}")
        self.status_code = status_code
        self.message = message
