"""Shared pytest fixtures for the octoapp test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
)

_GITHUB_ENV = (
    "GITHUB_APP_ID",
    "GITHUB_PRIVATE_KEY_PATH",
    "GITHUB_WEBHOOK_SECRET",
    "GITHUB_API_URL",
    "GITHUB_VERIFY_SIGNATURES",
)


@pytest.fixture(autouse=True)
def clean_github_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own GitHub settings out of the tests."""
    for name in _GITHUB_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def rsa_key_pair(tmp_path: Path) -> tuple[Path, bytes]:
    """Generate an RSA key pair and write the private key to a temp file."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = private_key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    key_file = tmp_path / "test-app.pem"
    key_file.write_bytes(pem)
    return key_file, pem


@pytest.fixture()
def user_payload() -> dict[str, Any]:
    return {
        "id": 583231,
        "login": "octocat",
        "node_id": "MDQ6VXNlcjU4MzIzMQ==",
        "type": "User",
        "site_admin": False,
    }


@pytest.fixture()
def repository_payload() -> dict[str, Any]:
    return {
        "id": 1296269,
        "name": "Hello-World",
        "full_name": "octocat/Hello-World",
        "private": False,
    }


@pytest.fixture()
def issue_comment_payload(
    user_payload: dict[str, Any], repository_payload: dict[str, Any]
) -> dict[str, Any]:
    """Mock ``issue_comment`` webhook body."""
    return {
        "action": "created",
        "issue": {"id": 1, "number": 1347, "title": "Found a bug", "state": "open"},
        "comment": {"id": 99, "body": "Me too", "user": user_payload},
        "repository": repository_payload,
        "installation": {"id": 2311213, "node_id": "MDIzOkludGVncmF0aW9u"},
    }


@pytest.fixture()
def installation_payload(user_payload: dict[str, Any]) -> dict[str, Any]:
    """Mock ``installation`` webhook body."""
    return {
        "action": "created",
        "installation": {
            "id": 2311213,
            "app_id": 42,
            "target_id": 583231,
            "target_type": "User",
            "repository_selection": "selected",
            "access_tokens_url": "https://api.github.com/app/installations/2311213/access_tokens",
            "repositories_url": "https://api.github.com/installation/repositories",
            "html_url": "https://github.com/settings/installations/2311213",
            "permissions": {"checks": "write", "metadata": "read", "administration": "admin"},
            "events": ["check_suite", "push"],
            "single_file_name": None,
        },
        "repositories": [
            {
                "id": 1296269,
                "node_id": "MDEwOlJlcG9zaXRvcnkxMjk2MjY5",
                "name": "Hello-World",
                "full_name": "octocat/Hello-World",
                "private": False,
            }
        ],
        "sender": user_payload,
    }


@pytest.fixture()
def push_payload(
    user_payload: dict[str, Any], repository_payload: dict[str, Any]
) -> dict[str, Any]:
    """Mock ``push`` webhook body with a single commit."""
    commit = {
        "id": "6dcb09b5b57875f334f61aebed695e2e4193db5e",
        "tree_id": "f9d2a07e9488b91af2641b26b9407fe22a451433",
        "distinct": True,
        "message": "Fix all the bugs",
        "author": {"name": "Monalisa Octocat", "email": "support@github.com"},
        "committer": {"name": "Monalisa Octocat", "email": "support@github.com"},
        "url": "https://github.com/octocat/Hello-World/commit/6dcb09b5",
    }
    return {
        "ref": "refs/heads/main",
        "before": "0000000000000000000000000000000000000000",
        "after": commit["id"],
        "created": True,
        "deleted": False,
        "forced": False,
        "base_ref": None,
        "compare": "https://github.com/octocat/Hello-World/compare/000000000000...6dcb09b5",
        "commits": [commit],
        "head_commit": commit,
        "repository": repository_payload,
        "pusher": {"name": "octocat", "email": "octocat@github.com"},
        "sender": user_payload,
        "installation": {"id": 2311213, "node_id": "MDIzOkludGVncmF0aW9u"},
    }
