"""CLI entry point for chart-versioner."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import click

from .charts import find_all_charts
from .config import load_settings
from .conventional import bump_level, classify
from .errors import ConfigError, InvalidFormat
from .github import load_event
from .models import ChangedFile
from .pipeline import run_versioning
from .resolver import resolve_versions

TEMPLATES_DIR = Path(__file__).parent / "templates"


@click.group()
@click.version_option(package_name="chart-versioner")
def cli() -> None:
    """Conventional-commit driven version bumps for Helm charts."""


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML file holding [tool.chart-versioner]. (default: pyproject.toml)",
)
@click.option(
    "--event",
    "event_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Event payload JSON. (default: $GITHUB_EVENT_PATH)",
)
@click.option("--charts-root", default=None, help="Directory holding the charts.")
@click.option("--output-dir", default=None, help="Where packaged charts are written.")
@click.option("--repo-url", default=None, help="Chart repository URL for index.yaml.")
@click.option(
    "--no-push", is_flag=True, help="Leave changes staged; skip label check and push."
)
def run(
    config_path: Path | None,
    event_path: Path | None,
    charts_root: str | None,
    output_dir: str | None,
    repo_url: str | None,
    no_push: bool,
) -> None:
    """Run the versioning pipeline (usually called from CI)."""
    try:
        settings = load_settings(
            config_path,
            charts_root=charts_root,
            output_dir=output_dir,
            repo_url=repo_url,
        )
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    try:
        event = load_event(event_path)
    except (OSError, json.JSONDecodeError) as exc:
        raise click.ClickException(f"Cannot load event payload: {exc}") from exc

    try:
        run_versioning(event, settings, push=not no_push)
    except subprocess.CalledProcessError as exc:
        raise click.ClickException(f"Command failed: {' '.join(exc.cmd)}") from exc


@cli.command()
@click.option("-m", "--message", required=True, help="Conventional commit message.")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Repository root. (default: current directory)",
)
@click.argument("paths", nargs=-1)
def resolve(message: str, root: Path | None, paths: tuple[str, ...]) -> None:
    """Print the new versions for charts touched by PATHS as JSON."""
    changes = [ChangedFile(path=p) for p in paths]

    def _warn(msg: str) -> None:
        click.echo(f"Warning: {msg}", err=True)

    try:
        versions = resolve_versions(changes, message, root=root, warn=_warn)
    except InvalidFormat as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(versions, indent=2, sort_keys=True))


@cli.command(name="classify")
@click.argument("message")
def classify_cmd(message: str) -> None:
    """Print the parsed conventional commit and its bump level as JSON."""
    try:
        commit = classify(message)
    except InvalidFormat as exc:
        raise click.ClickException(str(exc)) from exc
    data = commit.model_dump()
    data["bump"] = bump_level(commit).name.lower()
    click.echo(json.dumps(data, indent=2))


@cli.command()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("charts"),
    show_default=True,
    help="Directory to scan for charts.",
)
@click.option("--exclude", multiple=True, help="Chart name to leave out (repeatable).")
def charts(root: Path, exclude: tuple[str, ...]) -> None:
    """List the charts found under ROOT."""
    found = find_all_charts(root, exclude)
    if not found:
        click.echo(f"No charts found under {root}")
        return
    for chart in found:
        click.echo(f"{chart.name} {chart.version or '<none>'} ({chart.path})")


@cli.command()
@click.option(
    "--workflow-dir",
    type=click.Path(),
    default=".github/workflows",
    show_default=True,
    help="Directory to write the workflow file.",
)
def init(workflow_dir: str) -> None:
    """Scaffold the GitHub Actions workflow into your repo."""
    root = Path.cwd()

    # Sanity checks
    if not (root / ".git").exists():
        raise click.ClickException("Not a git repository. Run from the repo root.")

    try:
        settings = load_settings()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    if not (root / settings.charts_root).is_dir():
        raise click.ClickException(
            f"No {settings.charts_root}/ directory found.\n"
            "Set charts-root in pyproject.toml if your charts live elsewhere:\n\n"
            "  [tool.chart-versioner]\n"
            '  charts-root = "deploy/charts"'
        )

    dest_dir = root / workflow_dir
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest = dest_dir / "chart-versioning.yml"

    template = TEMPLATES_DIR / "chart-versioning.yml"
    rendered = template.read_text().replace("__CHARTS_ROOT__", settings.charts_root)
    dest.write_text(rendered)

    click.echo(f"✓ Wrote workflow to {dest.relative_to(root)}")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Set repo-url under [tool.chart-versioner] in pyproject.toml")
    click.echo("  2. Commit and push the workflow file")
    click.echo("  3. Open a pull request with a conventional-commit title")
