"""GitHub Actions context: event payload, changed files, labels, refs.

API calls go through the gh CLI, which is preinstalled on GitHub-hosted
runners and reads its token from GH_TOKEN / GITHUB_TOKEN.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

from .models import ChangedFile, ChangeType
from .shell import gh, warn

Event = dict[str, Any]


def load_event(path: Path | str | None = None) -> Event:
    """Load the workflow event payload.

    Args:
        path: Payload file; defaults to $GITHUB_EVENT_PATH.

    Raises:
        FileNotFoundError: If no payload file is available.
        json.JSONDecodeError: If the payload is not valid JSON.
    """
    event_path = path or os.environ.get("GITHUB_EVENT_PATH")
    if not event_path:
        raise FileNotFoundError("No event payload: GITHUB_EVENT_PATH is not set")
    return json.loads(Path(event_path).read_text())


def resolve_repository(event: Event) -> str | None:
    """Return "owner/repo" from the payload or $GITHUB_REPOSITORY."""
    full_name = (event.get("repository") or {}).get("full_name")
    return full_name or os.environ.get("GITHUB_REPOSITORY")


def pull_request_number(event: Event) -> int | None:
    return (event.get("pull_request") or {}).get("number")


def _change_type(status: str) -> ChangeType:
    # GitHub also reports "copied", "changed" and "unchanged"
    try:
        return ChangeType(status)
    except ValueError:
        return ChangeType.MODIFIED


def list_pr_files(repository: str, number: int) -> list[ChangedFile]:
    """List every file of a pull request, following pagination."""
    output = gh(
        "api",
        "--paginate",
        f"repos/{repository}/pulls/{number}/files?per_page=100",
        "--jq",
        ".[] | [.status, .filename] | @tsv",
    )
    files: list[ChangedFile] = []
    for line in output.splitlines():
        status, _, filename = line.partition("\t")
        if filename:
            files.append(ChangedFile(path=filename, change_type=_change_type(status)))
    return files


def get_changed_files(event: Event, repository: str | None = None) -> list[ChangedFile]:
    """Collect the files changed by a pull request or push event.

    Pull requests are listed through the API; push payloads already carry
    added/removed/modified lists per commit. Any other event yields a
    warning and no files.
    """
    number = pull_request_number(event)
    if number:
        repo = repository or resolve_repository(event)
        if not repo:
            warn("Cannot determine repository for pull request file listing.")
            return []
        return list_pr_files(repo, number)

    if event.get("commits"):
        files: list[ChangedFile] = []
        for commit in event["commits"]:
            for path in commit.get("added") or []:
                files.append(ChangedFile(path=path, change_type=ChangeType.ADDED))
            for path in commit.get("removed") or []:
                files.append(ChangedFile(path=path, change_type=ChangeType.REMOVED))
            for path in commit.get("modified") or []:
                files.append(ChangedFile(path=path, change_type=ChangeType.MODIFIED))
        return files

    warn("No pull_request or commits found in the event payload.")
    return []


def list_pr_labels(repository: str, number: int) -> list[str]:
    """Return the label names attached to a pull request."""
    output = gh("api", f"repos/{repository}/issues/{number}/labels", "--jq", ".[].name")
    return output.splitlines()


def resolve_commit_message(event: Event) -> str | None:
    """Pick the message that decides the bump level.

    Prefers the PR title, then the head commit message, then $PR_TITLE.
    """
    title = (event.get("pull_request") or {}).get("title")
    if title:
        return str(title)
    head_message = (event.get("head_commit") or {}).get("message")
    if head_message:
        return str(head_message)
    return os.environ.get("PR_TITLE") or None


def resolve_target_branch(event: Event) -> str | None:
    """Determine the branch to push to for PR and push events.

    Returns None when it cannot be determined (e.g. a tag push).
    """
    head_ref = ((event.get("pull_request") or {}).get("head") or {}).get("ref")
    if head_ref:
        return str(head_ref)
    if os.environ.get("GITHUB_HEAD_REF"):
        return os.environ["GITHUB_HEAD_REF"]
    ref = event.get("ref") or os.environ.get("GITHUB_REF", "")
    m = re.match(r"^refs/heads/(.+)$", str(ref))
    return m.group(1) if m else None
