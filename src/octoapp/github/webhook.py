"""Webhook signature verification and receiver for GitHub App events (FastAPI)."""
from __future__ import annotations

import binascii
import hashlib
import hmac
import inspect
import logging
from typing import Any, Callable

from fastapi import FastAPI, Request, Response

from ..errors import (
    PayloadDecodeError,
    SignatureBackendError,
    SignatureDecodeError,
    UnsupportedEventError,
)
from ..events import WebhookEvent, decode_event
from .app import GitHubApp

logger = logging.getLogger(__name__)

EVENT_HEADER_NAME = "X-GitHub-Event"
DELIVERY_HEADER_NAME = "X-GitHub-Delivery"
SIGNATURE_HEADER_NAME = "X-Hub-Signature"
SIGNATURE_256_HEADER_NAME = "X-Hub-Signature-256"

# scheme -> (digest constructor, hex length of the digest)
SIGNATURE_SCHEMES: dict[str, tuple[Callable[..., Any], int]] = {
    "sha1": (hashlib.sha1, 40),
    "sha256": (hashlib.sha256, 64),
}


def _secret_bytes(secret: bytes | str) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return secret


def parse_signature(signature_header: str) -> tuple[str, bytes]:
    """Split a signature header into its scheme and raw digest bytes.

    Example header: ``sha1=4b4a1c9a70dc40caf22099fb2d62a283dedd4614``.

    Raises:
        SignatureDecodeError: If the scheme is unknown, the hex part has the
            wrong length for the scheme, or it contains non-hex characters.
    """
    scheme, sep, hexdigest = signature_header.partition("=")
    if not sep or scheme not in SIGNATURE_SCHEMES:
        raise SignatureDecodeError("signature header has no known '<scheme>=' prefix")

    _, hex_length = SIGNATURE_SCHEMES[scheme]
    if len(hexdigest) != hex_length:
        raise SignatureDecodeError(
            f"{scheme} signature must be {hex_length} hex characters, got {len(hexdigest)}"
        )
    try:
        return scheme, binascii.unhexlify(hexdigest)
    except (binascii.Error, ValueError) as exc:
        raise SignatureDecodeError(f"{scheme} signature is not valid hex") from exc


def compute_digest(secret: bytes | str, body: bytes, scheme: str = "sha1") -> bytes:
    """Return the HMAC of ``body`` keyed by ``secret`` for ``scheme``.

    Raises:
        SignatureBackendError: If the HMAC cannot be built for this scheme
            or key.
    """
    try:
        digestmod, _ = SIGNATURE_SCHEMES[scheme]
        return hmac.new(_secret_bytes(secret), body, digestmod).digest()
    except (KeyError, TypeError, ValueError) as exc:
        raise SignatureBackendError(f"could not compute {scheme} HMAC") from exc


def sign_payload(secret: bytes | str, body: bytes, scheme: str = "sha1") -> str:
    """Build the signature header value GitHub would send for ``body``."""
    return f"{scheme}={compute_digest(secret, body, scheme).hex()}"


def check_signature(
    signature_header: str | None,
    secret: bytes | str,
    body: bytes,
) -> bool:
    """Check a signature and report undecodable input as an exception.

    Returns:
        False for an absent header or a digest mismatch, True on a match.

    Raises:
        SignatureDecodeError: If the header is malformed.
        SignatureBackendError: If the HMAC could not be computed.
    """
    if not signature_header:
        return False

    scheme, received = parse_signature(signature_header)
    expected = compute_digest(secret, body, scheme)
    return hmac.compare_digest(expected, received)


def verify_payload_signature(
    signature_header: str | None,
    secret: bytes | str,
    body: bytes,
) -> bool:
    """Decide whether a webhook body was signed with ``secret``.

    Args:
        signature_header: The ``X-Hub-Signature`` (``sha1=...``) or
            ``X-Hub-Signature-256`` (``sha256=...``) header value, or None
            when the delivery carried no signature.
        secret: The webhook secret configured in the GitHub App.
        body: Raw request body bytes, exactly as received.

    Returns:
        True only if the digest matches. Absent, malformed and mismatching
        signatures all return False.

    Raises:
        SignatureBackendError: If the HMAC could not be computed at all.
    """
    if not signature_header:
        logger.info("Webhook delivery is unsigned")
        return False

    try:
        valid = check_signature(signature_header, secret, body)
    except SignatureDecodeError as exc:
        logger.warning("Malformed webhook signature: %s", exc)
        return False

    if not valid:
        logger.warning("Webhook signature mismatch")
    return valid


EventHandler = Callable[[WebhookEvent], Any]


def create_app(
    github_app: GitHubApp,
    handlers: dict[str, EventHandler] | None = None,
    verify_signatures: bool | None = None,
) -> FastAPI:
    """Create a FastAPI application with webhook and health endpoints.

    Args:
        github_app: A configured GitHubApp instance (provides the webhook secret).
        handlers: Optional mapping of ``X-GitHub-Event`` value to a callable
            receiving the decoded event. Coroutine functions are awaited.
        verify_signatures: Reject deliveries whose signature does not verify.
            ``None`` uses ``github_app.verify_signatures`` (the
            ``GITHUB_VERIFY_SIGNATURES`` setting). Only disable for local testing.

    Returns:
        A FastAPI application.
    """
    app = FastAPI(title="octoapp webhook")
    registered = dict(handlers or {})
    if verify_signatures is None:
        verify_signatures = github_app.verify_signatures

    if not verify_signatures:
        logger.warning("Webhook signature verification is disabled")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    @app.post("/webhook")
    async def webhook(request: Request) -> Response:
        """Receive, verify and dispatch GitHub webhook events."""
        body = await request.body()
        event_type = request.headers.get(EVENT_HEADER_NAME, "")
        delivery = request.headers.get(DELIVERY_HEADER_NAME, "-")

        if verify_signatures:
            signature = request.headers.get(SIGNATURE_256_HEADER_NAME) or request.headers.get(
                SIGNATURE_HEADER_NAME
            )
            try:
                authentic = verify_payload_signature(signature, github_app.webhook_secret, body)
            except SignatureBackendError:
                logger.exception("Could not verify delivery %s", delivery)
                return Response(content="Internal error", status_code=500)
            if authentic is not True:
                return Response(content="Invalid signature", status_code=401)

        try:
            event = decode_event(event_type, body)
        except UnsupportedEventError:
            logger.debug("Ignoring %r delivery %s", event_type, delivery)
            return Response(content="ignored", status_code=200)
        except PayloadDecodeError as exc:
            logger.warning("Bad payload in delivery %s: %s", delivery, exc)
            return Response(content="Invalid payload", status_code=400)

        handler = registered.get(event_type)
        if handler is None:
            return Response(content="ignored", status_code=200)

        result = handler(event)
        if inspect.isawaitable(result):
            await result
        logger.info("Handled %s delivery %s", event_type, delivery)
        return Response(content="accepted", status_code=200)

    return app
