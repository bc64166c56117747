"""Data models for chart-versioner.

These Pydantic models represent the values passed between the commit
classifier, the chart locator and the version resolver, plus the records
produced by chart discovery.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class BumpLevel(IntEnum):
    """Magnitude of a semantic-version increment, ordered for max-aggregation."""

    PATCH = 0
    MINOR = 1
    MAJOR = 2


class ChangeType(str, Enum):
    """How a file changed, as reported by the GitHub API or a push payload."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"


class ConventionalCommit(BaseModel):
    """Parsed header of a conventional commit message.

    Attributes:
        type: Commit type exactly as written (e.g. "feat", "fix").
        scope: Parenthesised scope, or None when absent.
        is_breaking: True for a "!" header or a BREAKING CHANGE footer.
        description: Header text after the colon.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    scope: str | None = None
    is_breaking: bool = False
    description: str = ""


class ChangedFile(BaseModel):
    """A repository-relative path touched by a pull request or push."""

    model_config = ConfigDict(frozen=True)

    path: str
    change_type: ChangeType = ChangeType.MODIFIED


class ChartRef(BaseModel):
    """The chart owning a changed file.

    Attributes:
        name: Chart name declared in Chart.yaml.
        chart_yaml: Location of the Chart.yaml; the current version is
                    re-read from here when needed rather than cached.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    chart_yaml: Path


class ChartInfo(BaseModel):
    """Metadata for a chart found during discovery.

    Attributes:
        name: Chart name declared in Chart.yaml.
        version: Current version, or None when Chart.yaml has none.
        path: Posix path of Chart.yaml relative to the charts root.
        app_version: Declared appVersion, falling back to "v{version}".
    """

    name: str
    version: str | None = None
    path: str
    app_version: str | None = None


class VersionBump(BaseModel):
    """Records a version change for a chart."""

    old: str
    new: str
