"""Version resolution: commit message + changed files → new chart versions.

1. Classify the commit message once to get a single bump level
2. Attribute each changed file to the chart that owns it
3. Keep the highest bump level seen per chart
4. Re-read each chart's current version and bump it

Files outside any chart and charts whose version cannot be read are left
out of the result rather than raised. An optional ``warn`` callable
receives a message for each omission.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from .charts import locate_chart, read_chart_version
from .conventional import bump_level, classify
from .models import BumpLevel, ChangedFile, ChartRef
from .versions import bump_version

WarnFn = Callable[[str], None]


def _ignore(msg: str) -> None:
    pass


def merge_levels(levels: Iterable[BumpLevel]) -> BumpLevel:
    """Combine bump levels so that the most severe one wins.

    An empty input yields PATCH.
    """
    return max(levels, default=BumpLevel.PATCH)


def attribute_changes(
    changes: Iterable[ChangedFile],
    level: BumpLevel,
    *,
    root: Path | None = None,
    warn: WarnFn | None = None,
) -> dict[str, tuple[ChartRef, BumpLevel]]:
    """Map changed files to their charts with the bump level each receives.

    A chart touched by several changes keeps the first ChartRef found and
    the highest level among them.

    Returns:
        Map of chart name → (ChartRef, BumpLevel).
    """
    warn = warn or _ignore
    charts: dict[str, tuple[ChartRef, BumpLevel]] = {}
    for change in changes:
        ref = locate_chart(change.path, root)
        if ref is None:
            warn(f"{change.path} does not belong to any chart")
            continue
        if ref.name in charts:
            first_ref, seen = charts[ref.name]
            charts[ref.name] = (first_ref, merge_levels((seen, level)))
        else:
            charts[ref.name] = (ref, level)
    return charts


def resolve_versions(
    changes: Iterable[ChangedFile],
    commit_message: str,
    *,
    root: Path | None = None,
    warn: WarnFn | None = None,
) -> dict[str, str]:
    """Compute the new version of every chart touched by ``changes``.

    Args:
        changes: Changed files, with paths relative to ``root``.
        commit_message: Conventional commit message or PR title deciding
            the bump level for the whole batch.
        root: Repository root; defaults to the current working directory.
        warn: Optional sink for messages about skipped files and charts.

    Returns:
        Map of chart name → new version string.

    Raises:
        InvalidFormat: If ``commit_message`` is not a conventional commit.
    """
    warn = warn or _ignore
    level = bump_level(classify(commit_message))

    results: dict[str, str] = {}
    for name, (ref, chosen) in attribute_changes(
        changes, level, root=root, warn=warn
    ).items():
        current = read_chart_version(ref.chart_yaml)
        if not current:
            warn(f"{name}: no readable version in {ref.chart_yaml}")
            continue
        results[name] = bump_version(current, chosen)
    return results
