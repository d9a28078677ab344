"""Configuration and environment management."""

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

load_dotenv()

DEFAULT_API_URL = "https://api.github.com"

_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment."""
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    return raw.strip().lower() not in _FALSE_VALUES


@dataclass
class Config:
    """Application configuration loaded from environment."""

    # GitHub App
    app_id: str = field(default_factory=lambda: os.getenv("GITHUB_APP_ID", ""))
    private_key_path: str = field(
        default_factory=lambda: os.getenv("GITHUB_PRIVATE_KEY_PATH", "")
    )
    webhook_secret: str = field(
        default_factory=lambda: os.getenv("GITHUB_WEBHOOK_SECRET", "")
    )
    api_url: str = field(
        default_factory=lambda: os.getenv("GITHUB_API_URL", DEFAULT_API_URL).rstrip("/")
    )

    # Webhooks
    verify_signatures: bool = field(
        default_factory=lambda: _env_flag("GITHUB_VERIFY_SIGNATURES", True)
    )

    def validate(self) -> list[str]:
        """Validate configuration, return list of issues."""
        issues = []
        if not self.app_id:
            issues.append("GITHUB_APP_ID is required to authenticate as the app")
        if not self.private_key_path:
            issues.append("GITHUB_PRIVATE_KEY_PATH is required to sign app JWTs")
        if self.verify_signatures and not self.webhook_secret:
            issues.append(
                "GITHUB_WEBHOOK_SECRET is required while signature verification is enabled"
            )
        return issues
