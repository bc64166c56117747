"""Conventional commit parsing.

Only the header line decides the commit type, scope and "!" marker. Any
following lines are scanned solely for a BREAKING CHANGE footer.
"""

from __future__ import annotations

import re

from .errors import InvalidFormat
from .models import BumpLevel, ConventionalCommit

HEADER_RE = re.compile(
    r"^(?P<type>[a-z]+)(?:\((?P<scope>[^)]+)\))?(?P<bang>!)?:\s*(?P<description>.+)$",
    re.IGNORECASE | re.ASCII,
)
BREAKING_FOOTER_RE = re.compile(r"BREAKING CHANGE:", re.IGNORECASE)


def classify(message: object) -> ConventionalCommit:
    """Parse a commit message or PR title into a ConventionalCommit.

    Examples:
        "fix: typo" → type="fix", scope=None, is_breaking=False
        "feat(api)!: drop v1" → type="feat", scope="api", is_breaking=True

    Raises:
        InvalidFormat: If message is not a string or its first line does
            not match ``type[(scope)][!]: description``.
    """
    if not isinstance(message, str):
        raise InvalidFormat("Invalid conventional commit message")

    lines = message.splitlines()
    header = lines[0].strip() if lines else ""
    m = HEADER_RE.match(header)
    if not m:
        raise InvalidFormat(f"Invalid conventional commit message: {header!r}")

    body = "\n".join(lines[1:])
    return ConventionalCommit(
        type=m.group("type"),
        scope=m.group("scope"),
        is_breaking=bool(m.group("bang")) or bool(BREAKING_FOOTER_RE.search(body)),
        description=m.group("description").strip(),
    )


def bump_level(commit: ConventionalCommit) -> BumpLevel:
    """Map a parsed commit to the version bump it implies.

    Breaking changes are major, "feat" is minor, every other type
    (fix, docs, chore, unknown ones) is a patch.
    """
    if commit.is_breaking:
        return BumpLevel.MAJOR
    if commit.type.lower() == "feat":
        return BumpLevel.MINOR
    return BumpLevel.PATCH
