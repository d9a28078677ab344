"""Typed webhook event payloads and the decoder that builds them.

``decode_event`` must only see bodies whose signature has already been
checked (see ``octoapp.github.webhook``).
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from .errors import PayloadDecodeError, UnsupportedEventError
from .models import (
    CheckSuite,
    Commit,
    Installation,
    InstallationRef,
    InstallationRepository,
    Issue,
    IssueComment,
    Pusher,
    Repository,
    User,
)

logger = logging.getLogger(__name__)


class EventAction:
    """Common values of the ``action`` key. GitHub sends others too."""

    CREATED = "created"
    EDITED = "edited"
    DELETED = "deleted"
    REMOVED = "removed"
    OPENED = "opened"
    CLOSED = "closed"
    REQUESTED = "requested"
    REREQUESTED = "rerequested"
    COMPLETED = "completed"


def _installation(data: dict[str, Any]) -> InstallationRef | None:
    raw = data.get("installation")
    return InstallationRef.from_dict(raw) if raw else None


@dataclass
class IssueCommentEvent:
    action: str
    issue: Issue
    repository: Repository
    comment: IssueComment
    installation: InstallationRef | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IssueCommentEvent:
        return cls(
            action=data["action"],
            issue=Issue.from_dict(data["issue"]),
            repository=Repository.from_dict(data["repository"]),
            comment=IssueComment.from_dict(data["comment"]),
            installation=_installation(data),
        )


@dataclass
class IssuesEvent:
    action: str
    issue: Issue
    repository: Repository
    installation: InstallationRef | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IssuesEvent:
        return cls(
            action=data["action"],
            issue=Issue.from_dict(data["issue"]),
            repository=Repository.from_dict(data["repository"]),
            installation=_installation(data),
        )


@dataclass
class PushEvent:
    ref: str
    before: str
    after: str
    created: bool
    deleted: bool
    forced: bool
    compare: str
    commits: list[Commit]
    repository: Repository
    pusher: Pusher
    sender: User
    base_ref: str | None = None
    head_commit: Commit | None = None
    installation: InstallationRef | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PushEvent:
        head_commit = data.get("head_commit")
        return cls(
            ref=data["ref"],
            before=data["before"],
            after=data["after"],
            created=data["created"],
            deleted=data["deleted"],
            forced=data["forced"],
            compare=data["compare"],
            commits=[Commit.from_dict(c) for c in data["commits"]],
            repository=Repository.from_dict(data["repository"]),
            pusher=Pusher.from_dict(data["pusher"]),
            sender=User.from_dict(data["sender"]),
            base_ref=data.get("base_ref"),
            head_commit=Commit.from_dict(head_commit) if head_commit else None,
            installation=_installation(data),
        )


@dataclass
class InstallationEvent:
    action: str
    installation: Installation
    sender: User
    # GitHub leaves the key out when the installation was deleted
    repositories: list[InstallationRepository] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstallationEvent:
        repos = data.get("repositories")
        return cls(
            action=data["action"],
            installation=Installation.from_dict(data["installation"]),
            sender=User.from_dict(data["sender"]),
            repositories=(
                [InstallationRepository.from_dict(r) for r in repos]
                if repos is not None
                else None
            ),
        )


@dataclass
class CheckSuiteEvent:
    action: str
    check_suite: CheckSuite
    repository: Repository
    installation: InstallationRef | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckSuiteEvent:
        return cls(
            action=data["action"],
            check_suite=CheckSuite.from_dict(data["check_suite"]),
            repository=Repository.from_dict(data["repository"]),
            installation=_installation(data),
        )


@dataclass
class PingEvent:
    """Sent once when a webhook is created."""

    zen: str
    hook_id: int
    hook: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PingEvent:
        return cls(
            zen=data["zen"],
            hook_id=data["hook_id"],
            hook=data.get("hook") or {},
        )


WebhookEvent = Union[
    IssueCommentEvent,
    IssuesEvent,
    PushEvent,
    InstallationEvent,
    CheckSuiteEvent,
    PingEvent,
]

EVENT_TYPES: dict[str, Callable[[dict[str, Any]], WebhookEvent]] = {
    "issue_comment": IssueCommentEvent.from_dict,
    "issues": IssuesEvent.from_dict,
    "push": PushEvent.from_dict,
    "installation": InstallationEvent.from_dict,
    "check_suite": CheckSuiteEvent.from_dict,
    "ping": PingEvent.from_dict,
}


def decode_event(event_type: str, body: bytes) -> WebhookEvent:
    """Decode a verified webhook body into its typed payload.

    Args:
        event_type: Value of the ``X-GitHub-Event`` header.
        body: Raw request body bytes.

    Returns:
        One of the event dataclasses in ``EVENT_TYPES``.

    Raises:
        UnsupportedEventError: If ``event_type`` has no payload type.
        PayloadDecodeError: If the body is not a JSON object or a required
            key is missing or has the wrong shape.
    """
    builder = EVENT_TYPES.get(event_type)
    if builder is None:
        raise UnsupportedEventError(event_type)

    try:
        data = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PayloadDecodeError(f"{event_type} payload is not valid JSON") from exc
    if not isinstance(data, dict):
        raise PayloadDecodeError(f"{event_type} payload must be a JSON object")

    try:
        event = builder(data)
    except KeyError as exc:
        raise PayloadDecodeError(
            f"{event_type} payload is missing key {exc.args[0]!r}"
        ) from exc
    except (TypeError, AttributeError) as exc:
        raise PayloadDecodeError(f"{event_type} payload has an unexpected shape") from exc

    logger.debug("Decoded %s event", event_type)
    return event
