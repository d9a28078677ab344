"""GitHub App configuration, JWT authentication and installation tokens."""
from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx
import jwt
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from .. import __version__
from ..config import DEFAULT_API_URL, Config
from ..errors import GitHubApiError
from ..models import (
    CheckRun,
    CheckSuite,
    CreateCheckRun,
    GithubAppInfo,
    InstallationToken,
    IssueComment,
    PermissionGrant,
    ReviewComment,
)

logger = logging.getLogger(__name__)

JWT_LIFETIME = 10 * 60
# Refresh cached installation tokens this long before GitHub expires them
TOKEN_REFRESH_MARGIN = 5 * 60
# Used when expires_at is missing or unparseable (tokens live for an hour)
FALLBACK_TOKEN_TTL = 55 * 60

MEDIA_TYPE = "application/vnd.github+json"
USER_AGENT = f"octoapp/{__version__}"


def _parse_expiry(expires_at: str) -> float | None:
    """Parse GitHub's ISO 8601 ``expires_at`` into a UNIX timestamp."""
    if not expires_at:
        return None
    try:
        return datetime.fromisoformat(expires_at.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return None


def _api_message(resp: httpx.Response) -> str:
    """Extract the ``message`` field of a GitHub error body, if any."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict):
        return str(body.get("message", ""))
    return ""


def _expect(resp: httpx.Response, status: int) -> None:
    if resp.status_code != status:
        raise GitHubApiError(resp.status_code, _api_message(resp))


class GitHubApp:
    """GitHub App authentication manager.

    Handles JWT generation (RS256), installation token exchange, and the
    installation-scoped calls for comments and checks.
    Values not passed explicitly come from ``Config`` (environment):
      - GITHUB_APP_ID
      - GITHUB_PRIVATE_KEY_PATH
      - GITHUB_WEBHOOK_SECRET
      - GITHUB_API_URL
      - GITHUB_VERIFY_SIGNATURES
    """

    def __init__(
        self,
        app_id: str | None = None,
        private_key_path: str | None = None,
        webhook_secret: str | None = None,
        api_url: str | None = None,
        verify_signatures: bool | None = None,
    ) -> None:
        config = Config()
        self.app_id: str = app_id if app_id is not None else config.app_id
        self.private_key_path: str = private_key_path if private_key_path is not None else config.private_key_path
        self.webhook_secret: str = webhook_secret if webhook_secret is not None else config.webhook_secret
        self.api_url: str = ((api_url if api_url is not None else config.api_url) or DEFAULT_API_URL).rstrip("/")
        self.verify_signatures: bool = verify_signatures if verify_signatures is not None else config.verify_signatures
        self._private_key: bytes | None = None
        self._token_cache: dict[int, tuple[str, float]] = {}

    @classmethod
    def from_config(cls, config: Config) -> GitHubApp:
        """Build an app from an explicit configuration object."""
        return cls(
            app_id=config.app_id,
            private_key_path=config.private_key_path,
            webhook_secret=config.webhook_secret,
            api_url=config.api_url,
            verify_signatures=config.verify_signatures,
        )

    def _load_private_key(self) -> bytes:
        """Load RSA private key from the configured file path.

        Returns:
            The PEM-encoded private key bytes.

        Raises:
            FileNotFoundError: If the key file does not exist.
            ValueError: If the key file cannot be parsed as a PEM RSA key.
        """
        if self._private_key is not None:
            return self._private_key

        key_path = Path(self.private_key_path)
        if not self.private_key_path or not key_path.is_file():
            raise FileNotFoundError(
                f"GitHub App private key not found at: {self.private_key_path}"
            )

        pem_data = key_path.read_bytes()
        key = load_pem_private_key(pem_data, password=None)
        if not isinstance(key, rsa.RSAPrivateKey):
            raise ValueError("GitHub App private key must be an RSA key")
        self._private_key = pem_data
        return self._private_key

    def generate_jwt(self) -> str:
        """Create a JWT for GitHub App authentication.

        The JWT uses RS256, is issued now, expires in 10 minutes, and
        contains the app_id as the issuer claim.

        Returns:
            Encoded JWT string.

        Raises:
            FileNotFoundError: If the private key file is missing.
            ValueError: If app_id is empty or the key is not a PEM RSA key.
        """
        if not self.app_id:
            raise ValueError("GITHUB_APP_ID is required to generate a JWT")

        private_key = self._load_private_key()
        now = int(time.time())
        payload = {
            "iat": now,
            "exp": now + JWT_LIFETIME,
            "iss": self.app_id,
        }
        return jwt.encode(payload, private_key, algorithm="RS256")

    def _jwt_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.generate_jwt()}",
            "Accept": MEDIA_TYPE,
            "User-Agent": USER_AGENT,
        }

    def get_app(self) -> GithubAppInfo:
        """Fetch the authenticated app (``GET /app``).

        Raises:
            GitHubApiError: If GitHub does not answer 200.
        """
        resp = httpx.get(
            f"{self.api_url}/app",
            headers=self._jwt_headers(),
            timeout=15.0,
        )
        _expect(resp, 200)
        return GithubAppInfo.from_dict(resp.json())

    def create_installation_token(
        self,
        installation_id: int,
        permissions: dict[str, PermissionGrant | str] | None = None,
        repository_ids: list[int] | None = None,
    ) -> InstallationToken:
        """Exchange a JWT for an installation access token.

        Args:
            installation_id: The GitHub App installation ID.
            permissions: Optional subset of the installation's permissions,
                e.g. ``{"checks": PermissionGrant.WRITE}``.
            repository_ids: Optional repositories to scope the token to.

        Returns:
            The issued token with its expiry and granted permissions.

        Raises:
            GitHubApiError: If GitHub does not answer 201 Created.
        """
        body: dict[str, Any] = {}
        if permissions is not None:
            body["permissions"] = {
                name: PermissionGrant(level).value for name, level in permissions.items()
            }
        if repository_ids is not None:
            body["repository_ids"] = list(repository_ids)

        resp = httpx.post(
            f"{self.api_url}/app/installations/{installation_id}/access_tokens",
            headers=self._jwt_headers(),
            json=body or None,
            timeout=15.0,
        )
        _expect(resp, 201)

        token = InstallationToken.from_dict(resp.json())
        logger.info("Obtained new installation token for installation %d", installation_id)
        return token

    def get_installation_token(self, installation_id: int) -> str:
        """Return an installation token, reusing a cached one while it is fresh.

        Args:
            installation_id: The GitHub App installation ID.

        Returns:
            Installation access token string.
        """
        now = time.time()
        cached = self._token_cache.get(installation_id)
        if cached is not None:
            token, refresh_at = cached
            if now < refresh_at:
                return token

        issued = self.create_installation_token(installation_id)
        expiry = _parse_expiry(issued.expires_at)
        if expiry is None:
            refresh_at = now + FALLBACK_TOKEN_TTL
        else:
            refresh_at = expiry - TOKEN_REFRESH_MARGIN
        self._token_cache[installation_id] = (issued.token, refresh_at)
        return issued.token

    def _installation_headers(self, installation_id: int) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.get_installation_token(installation_id)}",
            "Accept": MEDIA_TYPE,
            "User-Agent": USER_AGENT,
        }

    def create_issue_comment(
        self, installation_id: int, repo: str, issue_number: int, body: str
    ) -> IssueComment:
        """Post a comment on an issue or pull request.

        Args:
            installation_id: Installation whose token authenticates the call.
            repo: Repository in ``owner/name`` format.
            issue_number: Issue or pull request number.
            body: Markdown comment body.

        Raises:
            GitHubApiError: If GitHub does not answer 201 Created.
        """
        resp = httpx.post(
            f"{self.api_url}/repos/{repo}/issues/{issue_number}/comments",
            headers=self._installation_headers(installation_id),
            json={"body": body},
            timeout=15.0,
        )
        _expect(resp, 201)
        return IssueComment.from_dict(resp.json())

    def delete_issue_comment(self, installation_id: int, repo: str, comment_id: int) -> None:
        """Delete an issue comment. GitHub answers 204 No Content."""
        resp = httpx.delete(
            f"{self.api_url}/repos/{repo}/issues/comments/{comment_id}",
            headers=self._installation_headers(installation_id),
            timeout=15.0,
        )
        _expect(resp, 204)
        logger.info("Deleted comment %d on %s", comment_id, repo)

    def get_review_comments(
        self, installation_id: int, repo: str, pull_number: int
    ) -> list[ReviewComment]:
        """List the review comments on a pull request (first page only)."""
        resp = httpx.get(
            f"{self.api_url}/repos/{repo}/pulls/{pull_number}/comments",
            headers=self._installation_headers(installation_id),
            timeout=15.0,
        )
        _expect(resp, 200)
        return [ReviewComment.from_dict(c) for c in resp.json()]

    def create_check_suite(self, installation_id: int, repo: str, head_sha: str) -> CheckSuite:
        """Create a check suite for a commit.

        Raises:
            GitHubApiError: If GitHub does not answer 201 Created.
        """
        resp = httpx.post(
            f"{self.api_url}/repos/{repo}/check-suites",
            headers=self._installation_headers(installation_id),
            json={"head_sha": head_sha},
            timeout=15.0,
        )
        _expect(resp, 201)
        return CheckSuite.from_dict(resp.json())

    def create_check_run(
        self, installation_id: int, repo: str, check_run: CreateCheckRun
    ) -> CheckRun:
        """Create a check run on a commit.

        Raises:
            GitHubApiError: If GitHub does not answer 201 Created.
        """
        resp = httpx.post(
            f"{self.api_url}/repos/{repo}/check-runs",
            headers=self._installation_headers(installation_id),
            json=check_run.to_dict(),
            timeout=15.0,
        )
        _expect(resp, 201)
        run = CheckRun.from_dict(resp.json())
        logger.info("Created check run %d (%s) on %s", run.id, check_run.name, repo)
        return run
