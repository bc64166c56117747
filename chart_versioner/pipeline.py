"""Versioning pipeline: diff → resolve → rewrite → package → index → commit.

This module orchestrates a chart-versioner run inside a CI job:
1. Skip the run when the pull request carries the skip label
2. Collect the changed files and keep those under the charts root
3. Resolve new versions from the PR title / commit message
4. Rewrite Chart.yaml and package every bumped chart with helm
5. Regenerate the chart repository index
6. Stage, commit and push the result back to the branch

Packaging, indexing and staging problems are reported as warnings so one
broken chart does not block the others from being versioned.
"""

from __future__ import annotations

import subprocess
from pathlib import Path, PurePosixPath

from .charts import find_all_charts, update_chart_files
from .config import Settings
from .errors import HelmError, InvalidFormat
from .github import (
    Event,
    get_changed_files,
    list_pr_labels,
    pull_request_number,
    resolve_commit_message,
    resolve_repository,
    resolve_target_branch,
)
from .helm import package_chart, regenerate_index
from .models import ChangedFile, ChartInfo, VersionBump
from .resolver import resolve_versions
from .shell import git, step, warn


def has_skip_label(event: Event, settings: Settings) -> bool:
    """Return True when the pull request is labelled to skip versioning.

    Label lookup failures only produce a warning.
    """
    number = pull_request_number(event)
    repository = resolve_repository(event)
    if not number or not repository:
        return False
    try:
        labels = list_pr_labels(repository, number)
    except (subprocess.CalledProcessError, OSError) as exc:
        warn(f"Failed to check PR labels: {exc}")
        return False
    return settings.skip_label in labels


def detect_chart_changes(event: Event, settings: Settings) -> list[ChangedFile]:
    """List the changed files and keep those below the charts root."""
    step("Detecting changed files")

    changed_all = get_changed_files(event)
    print(f"  Detected {len(changed_all)} changed file(s) in total")
    for f in changed_all:
        print(f"   - {f.change_type.value}: {f.path}")

    prefix = settings.charts_root.rstrip("/") + "/"
    changed = [
        f
        for f in changed_all
        if f.path.startswith(prefix) and ".." not in PurePosixPath(f.path).parts
    ]
    print(f"  Detected {len(changed)} changed file(s) under {prefix}")
    return changed


def compute_versions(
    changed: list[ChangedFile], message: str | None, settings: Settings
) -> dict[str, str]:
    """Resolve new chart versions, falling back to a patch-level message.

    An invalid (or missing) commit message is replaced by
    ``settings.fallback_message`` rather than failing the run.
    """
    step("Resolving chart versions")

    try:
        if message is None:
            raise InvalidFormat("No commit message or PR title available")
        versions = resolve_versions(changed, message, warn=warn)
    except InvalidFormat as exc:
        warn(
            "Non-conventional commit/PR title detected. "
            f"Falling back to {settings.fallback_message!r}. Reason: {exc}"
        )
        versions = resolve_versions(changed, settings.fallback_message, warn=warn)

    for name in settings.exclude:
        if versions.pop(name, None) is not None:
            print(f"  {name}: excluded")

    for name, version in versions.items():
        print(f"  {name} → {version}")
    return versions


def apply_versions(
    versions: dict[str, str], charts: list[ChartInfo], settings: Settings
) -> dict[str, VersionBump]:
    """Rewrite Chart.yaml for each bumped chart and package it.

    Returns:
        Map of chart name → VersionBump for the charts that were rewritten.
    """
    step(f"Updating {len(versions)} charts")

    charts_root = Path(settings.charts_root)
    by_name = {c.name: c for c in charts}
    bumped: dict[str, VersionBump] = {}

    for name, new_version in versions.items():
        chart = by_name.get(name)
        if chart is None:
            warn(f"Cannot update {name}: not found under {charts_root}")
            continue

        update_chart_files(charts_root, [name], new_version)
        bumped[name] = VersionBump(old=chart.version or "0.0.0", new=new_version)
        print(f"  {name} ({chart.path}): {bumped[name].old} → {new_version}")

        chart_dir = charts_root / Path(chart.path).parent
        try:
            package_chart(chart_dir, settings.output_dir)
            print(f"  Packaged {name} → {settings.output_dir}")
        except HelmError as exc:
            warn(f"Packaging failed for {name}: {exc}")

    return bumped


def publish_index(settings: Settings) -> None:
    """Regenerate index.yaml in the output directory and stage it."""
    if not settings.repo_url:
        print("  No repo-url configured; skipping index regeneration")
        return

    step("Regenerating chart index")
    try:
        index = regenerate_index(settings.output_dir, settings.repo_url)
        git("add", str(index))
        print(f"  {index}")
    except (HelmError, subprocess.CalledProcessError, OSError) as exc:
        warn(f"Failed to regenerate chart index: {exc}")


def stage_changes(
    bumped: dict[str, VersionBump], charts: list[ChartInfo], settings: Settings
) -> None:
    """Stage packaged charts and the rewritten Chart.yaml files."""
    if Path(settings.output_dir).exists():
        try:
            git("add", settings.output_dir)
        except subprocess.CalledProcessError as exc:
            warn(f"Failed staging packaged charts: {exc}")

    charts_root = Path(settings.charts_root)
    try:
        for chart in charts:
            if chart.name in bumped:
                git("add", str(charts_root / chart.path))
    except subprocess.CalledProcessError as exc:
        warn(f"Failed staging Chart.yaml files: {exc}")


def commit_message_for(bumped: dict[str, VersionBump]) -> tuple[str, str]:
    """Build the (subject, body) of the version bump commit."""
    parts = ", ".join(f"{n}@{b.new}" for n, b in bumped.items())
    summary = "\n".join(f"  {n}: {b.old} → {b.new}" for n, b in bumped.items())
    return f"chore(version): bump charts {parts}", summary


def commit_and_push(
    bumped: dict[str, VersionBump], event: Event, settings: Settings
) -> None:
    """Commit the staged version bumps and push them to the source branch.

    Failures are reported as warnings; the versions have already been
    written to disk at this point.
    """
    step("Committing version bumps")

    try:
        staged = git("diff", "--cached", "--name-only", check=False)
        if not staged:
            print("  No staged changes to commit")
            return

        git("config", "user.name", settings.bot_name)
        git("config", "user.email", settings.bot_email)

        subject, summary = commit_message_for(bumped)
        git("commit", "-m", subject, "-m", summary)
        print(f"  {subject}")

        # Push by explicit ref so a detached HEAD still lands on the branch
        branch = resolve_target_branch(event)
        if not branch:
            warn("Cannot determine target branch for push (detached HEAD). Skipping push.")
            return
        git("push", "origin", f"HEAD:refs/heads/{branch}")
        print(f"  Pushed version bumps to {branch}")
    except subprocess.CalledProcessError as exc:
        warn(f"Failed to commit/push changes: {exc}")


def run_versioning(event: Event, settings: Settings, *, push: bool = True) -> dict[str, str]:
    """Execute the full versioning pipeline.

    Args:
        event: GitHub event payload.
        settings: Loaded configuration.
        push: If False, skip the label check and leave the changes staged
              without committing (useful for local dry runs).

    Returns:
        Map of chart name → new version for the charts that were bumped.
    """
    if push and has_skip_label(event, settings):
        print(f"PR has label {settings.skip_label!r}. Skipping automatic versioning.")
        return {}

    # Phase 1: Resolve
    changed = detect_chart_changes(event, settings)
    if not changed:
        print("\nNo chart changes detected.")
        return {}

    charts = find_all_charts(settings.charts_root, settings.exclude)
    versions = compute_versions(changed, resolve_commit_message(event), settings)
    if not versions:
        print("\nNo chart versions to update.")
        return {}

    # Phase 2: Rewrite and package
    bumped = apply_versions(versions, charts, settings)
    publish_index(settings)
    stage_changes(bumped, charts, settings)

    # Phase 3: Publish
    if push:
        commit_and_push(bumped, event, settings)

    print(f"\n{'=' * 60}\nDone!\n{'=' * 60}")
    return versions
