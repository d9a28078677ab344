"""Typed records for the GitHub App REST resources and webhook payload parts.

Every record is built from decoded JSON with ``from_dict``. Required keys are
read with ``data[key]`` so a missing key raises ``KeyError``; the payload
decoder turns that into ``PayloadDecodeError``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PermissionGrant(str, Enum):
    """Access level granted to an installation for one permission."""

    READ = "read"
    WRITE = "write"


def parse_permissions(data: dict[str, Any] | None) -> dict[str, PermissionGrant]:
    """Map permission name -> grant, dropping levels this library does not model."""
    permissions: dict[str, PermissionGrant] = {}
    for name, level in (data or {}).items():
        try:
            permissions[name] = PermissionGrant(level)
        except ValueError:
            continue
    return permissions


@dataclass
class User:
    """A GitHub account (user, bot or organization)."""

    id: int
    login: str
    node_id: str = ""
    type: str = "User"
    site_admin: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=data["id"],
            login=data["login"],
            node_id=data.get("node_id", ""),
            type=data.get("type", "User"),
            site_admin=data.get("site_admin", False),
        )


@dataclass
class Repository:
    full_name: str
    id: int | None = None
    name: str = ""
    private: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Repository:
        return cls(
            full_name=data["full_name"],
            id=data.get("id"),
            name=data.get("name", ""),
            private=data.get("private", False),
        )


@dataclass
class Issue:
    id: int
    number: int
    title: str = ""
    state: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Issue:
        return cls(
            id=data["id"],
            number=data["number"],
            title=data.get("title", "") or "",
            state=data.get("state", "") or "",
        )


@dataclass
class IssueComment:
    id: int
    body: str
    user: User

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IssueComment:
        return cls(
            id=data["id"],
            body=data.get("body", "") or "",
            user=User.from_dict(data["user"]),
        )


@dataclass
class CommitAuthor:
    """Author or committer of a pushed commit."""

    name: str
    email: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommitAuthor:
        return cls(name=data["name"], email=data.get("email", "") or "")


@dataclass
class Commit:
    id: str
    tree_id: str
    distinct: bool
    message: str
    author: CommitAuthor
    committer: CommitAuthor
    url: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Commit:
        return cls(
            id=data["id"],
            tree_id=data["tree_id"],
            distinct=data.get("distinct", True),
            message=data.get("message", ""),
            author=CommitAuthor.from_dict(data["author"]),
            committer=CommitAuthor.from_dict(data["committer"]),
            url=data.get("url", ""),
        )


@dataclass
class Pusher:
    name: str
    email: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pusher:
        return cls(name=data["name"], email=data.get("email", "") or "")


@dataclass
class InstallationRef:
    """The short installation reference carried by repository events."""

    id: int
    node_id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstallationRef:
        return cls(id=data["id"], node_id=data.get("node_id", ""))


@dataclass
class Installation:
    """A GitHub App installation on a user or organization account."""

    id: int
    app_id: int
    target_id: int
    target_type: str
    repository_selection: str = "all"
    access_tokens_url: str = ""
    repositories_url: str = ""
    html_url: str = ""
    permissions: dict[str, PermissionGrant] = field(default_factory=dict)
    events: list[str] = field(default_factory=list)
    single_file_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Installation:
        return cls(
            id=data["id"],
            app_id=data["app_id"],
            target_id=data["target_id"],
            target_type=data["target_type"],
            repository_selection=data.get("repository_selection", "all"),
            access_tokens_url=data.get("access_tokens_url", ""),
            repositories_url=data.get("repositories_url", ""),
            html_url=data.get("html_url", ""),
            permissions=parse_permissions(data.get("permissions")),
            events=list(data.get("events", [])),
            single_file_name=data.get("single_file_name"),
        )


@dataclass
class InstallationRepository:
    id: int
    node_id: str
    name: str
    full_name: str
    private: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstallationRepository:
        return cls(
            id=data["id"],
            node_id=data.get("node_id", ""),
            name=data["name"],
            full_name=data["full_name"],
            private=data.get("private", False),
        )


@dataclass
class PullRequestRef:
    """Pull request summary as embedded in check suite payloads."""

    id: int
    number: int
    url: str = ""
    head_sha: str = ""
    base_sha: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PullRequestRef:
        return cls(
            id=data["id"],
            number=data["number"],
            url=data.get("url", ""),
            head_sha=(data.get("head") or {}).get("sha", ""),
            base_sha=(data.get("base") or {}).get("sha", ""),
        )


@dataclass
class GithubAppInfo:
    """The authenticated app, as returned by ``GET /app``."""

    id: int
    slug: str
    name: str
    node_id: str = ""
    owner: User | None = None
    description: str = ""
    external_url: str = ""
    html_url: str = ""
    created_at: str = ""
    updated_at: str = ""
    permissions: dict[str, PermissionGrant] = field(default_factory=dict)
    events: list[str] = field(default_factory=list)
    # Only present on authenticated calls
    installations_count: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GithubAppInfo:
        owner = data.get("owner")
        return cls(
            id=data["id"],
            slug=data["slug"],
            name=data["name"],
            node_id=data.get("node_id", ""),
            owner=User.from_dict(owner) if owner else None,
            description=data.get("description", "") or "",
            external_url=data.get("external_url", "") or "",
            html_url=data.get("html_url", "") or "",
            created_at=data.get("created_at", "") or "",
            updated_at=data.get("updated_at", "") or "",
            permissions=parse_permissions(data.get("permissions")),
            events=list(data.get("events", [])),
            installations_count=data.get("installations_count"),
        )


@dataclass
class CheckSuite:
    id: int
    head_sha: str
    status: str
    conclusion: str | None = None
    node_id: str = ""
    head_branch: str | None = None
    url: str = ""
    before: str | None = None
    after: str | None = None
    pull_requests: list[PullRequestRef] = field(default_factory=list)
    app: GithubAppInfo | None = None
    # Set on REST responses; webhook payloads carry it at the top level
    repository: Repository | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckSuite:
        app = data.get("app")
        repository = data.get("repository")
        return cls(
            id=data["id"],
            head_sha=data["head_sha"],
            status=data["status"],
            conclusion=data.get("conclusion"),
            node_id=data.get("node_id", ""),
            head_branch=data.get("head_branch"),
            url=data.get("url", ""),
            before=data.get("before"),
            after=data.get("after"),
            pull_requests=[
                PullRequestRef.from_dict(pr) for pr in data.get("pull_requests", [])
            ],
            app=GithubAppInfo.from_dict(app) if app else None,
            repository=Repository.from_dict(repository) if repository else None,
        )


@dataclass
class CheckRun:
    """A check run as returned by ``POST /repos/{owner}/{repo}/check-runs``."""

    id: int
    head_sha: str
    status: str
    node_id: str = ""
    external_id: str = ""
    url: str = ""
    html_url: str = ""
    details_url: str = ""
    conclusion: str | None = None
    started_at: str | None = None
    completed_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckRun:
        return cls(
            id=data["id"],
            head_sha=data["head_sha"],
            status=data["status"],
            node_id=data.get("node_id", ""),
            external_id=data.get("external_id", "") or "",
            url=data.get("url", ""),
            html_url=data.get("html_url", "") or "",
            details_url=data.get("details_url", "") or "",
            conclusion=data.get("conclusion"),
            started_at=data.get("started_at"),
            completed_at=data.get("completed_at"),
        )


@dataclass
class CreateCheckRun:
    """Request body for creating a check run."""

    name: str
    head_sha: str
    status: str | None = None
    conclusion: str | None = None
    details_url: str | None = None
    external_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"name": self.name, "head_sha": self.head_sha}
        for key in ("status", "conclusion", "details_url", "external_id"):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        return body


@dataclass
class ReviewComment:
    """A pull request review comment (a comment on a diff line)."""

    id: int
    body: str
    user: User
    path: str = ""
    commit_id: str = ""
    line: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewComment:
        return cls(
            id=data["id"],
            body=data.get("body", "") or "",
            user=User.from_dict(data["user"]),
            path=data.get("path", "") or "",
            commit_id=data.get("commit_id", "") or "",
            line=data.get("line"),
        )


@dataclass
class InstallationToken:
    """An installation access token issued by ``POST .../access_tokens``."""

    token: str
    expires_at: str
    permissions: dict[str, PermissionGrant] = field(default_factory=dict)
    # Omitted by GitHub unless repository_ids was part of the request
    repositories: list[Repository] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstallationToken:
        repos = data.get("repositories")
        return cls(
            token=data["token"],
            expires_at=data.get("expires_at", ""),
            permissions=parse_permissions(data.get("permissions")),
            repositories=[Repository.from_dict(r) for r in repos] if repos is not None else None,
        )
