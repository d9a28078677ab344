"""GitHub App integration: authentication, installation tokens and webhooks."""
from __future__ import annotations

from .app import GitHubApp
from .webhook import (
    EVENT_HEADER_NAME,
    SIGNATURE_256_HEADER_NAME,
    SIGNATURE_HEADER_NAME,
    check_signature,
    create_app,
    sign_payload,
    verify_payload_signature,
)

__all__ = [
    "GitHubApp",
    "EVENT_HEADER_NAME",
    "SIGNATURE_HEADER_NAME",
    "SIGNATURE_256_HEADER_NAME",
    "check_signature",
    "create_app",
    "sign_payload",
    "verify_payload_signature",
]
