"""octoapp: GitHub App authentication and webhook verification."""

__version__ = "0.1.0"

from .errors import (
    GitHubApiError,
    OctoAppError,
    PayloadDecodeError,
    SignatureBackendError,
    SignatureDecodeError,
    SignatureError,
    UnsupportedEventError,
)
from .events import decode_event

__all__ = [
    "GitHubApiError",
    "OctoAppError",
    "PayloadDecodeError",
    "SignatureBackendError",
    "SignatureDecodeError",
    "SignatureError",
    "UnsupportedEventError",
    "decode_event",
    "__version__",
]
