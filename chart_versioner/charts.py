"""Chart discovery, ownership lookup and Chart.yaml rewriting.

Chart.yaml is treated as line-oriented ``key: value`` text. Only the
top-level ``name``, ``version`` and ``appVersion`` scalars are read, and
edits are made with targeted substitutions so the rest of the file
(comments, ordering, dependencies) is left untouched.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from .models import ChartInfo, ChartRef

CHART_FILE = "Chart.yaml"

_NAME_RE = re.compile(r"^name:[ \t]*(.+)$", re.MULTILINE)
_VERSION_RE = re.compile(r"^version:[ \t]*(.+)$", re.MULTILINE)
_APP_VERSION_RE = re.compile(r"^appVersion:[ \t]*(.+)$", re.MULTILINE)

# Indentation and trailing comments are preserved when rewriting.
_VERSION_LINE_RE = re.compile(
    r"^(?P<indent>[ \t]*)version:[ \t]*(?P<value>[^\r\n#]*?)(?P<tail>[ \t]*(?:#[^\r\n]*)?)(?P<cr>\r?)$",
    re.MULTILINE,
)
_APP_VERSION_LINE_RE = re.compile(r"^[ \t]*appVersion:", re.MULTILINE)


def _scalar(match: re.Match[str] | None) -> str | None:
    """Return a matched scalar without surrounding quotes, or None if empty."""
    if not match:
        return None
    value = match.group(1).strip()
    value = re.sub(r"^['\"]|['\"]$", "", value).strip()
    return value or None


def parse_chart_yaml(content: str) -> tuple[str | None, str | None, str | None]:
    """Extract (name, version, appVersion) from Chart.yaml contents."""
    return (
        _scalar(_NAME_RE.search(content)),
        _scalar(_VERSION_RE.search(content)),
        _scalar(_APP_VERSION_RE.search(content)),
    )


def _read(chart_yaml: Path) -> str | None:
    """Return Chart.yaml contents, or None if missing or not valid UTF-8."""
    try:
        return chart_yaml.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def _normalize(changed_path: str) -> str:
    """Strip leading "./" segments and slashes from a repo-relative path."""
    return re.sub(r"^(?:\./)+", "", changed_path.replace("\\", "/")).lstrip("/")


def locate_chart(changed_path: str, root: Path | None = None) -> ChartRef | None:
    """Find the chart that owns a changed file.

    Walks the ancestors of the file's directory from deepest to shallowest
    and stops at the first one containing Chart.yaml, so with nested charts
    the most specific chart owns the file. The repository root itself is
    never a candidate, and siblings or descendants are never searched.

    Args:
        changed_path: Repository-relative path of the changed file.
        root: Repository root; defaults to the current working directory.

    Returns:
        A ChartRef, or None when no ancestor holds a chart or the nearest
        Chart.yaml is unreadable or has no name.
    """
    base = Path.cwd() if root is None else Path(root)
    parts = PurePosixPath(_normalize(changed_path)).parent.parts
    # Paths that climb out of the repository are never owned
    if ".." in parts:
        return None

    chart_yaml: Path | None = None
    for depth in range(len(parts), 0, -1):
        candidate = base.joinpath(*parts[:depth], CHART_FILE)
        if candidate.is_file():
            chart_yaml = candidate
            break

    if chart_yaml is None:
        return None

    content = _read(chart_yaml)
    if content is None:
        return None

    name, _, _ = parse_chart_yaml(content)
    if not name:
        return None
    return ChartRef(name=name, chart_yaml=chart_yaml)


def read_chart_version(chart_yaml: Path) -> str | None:
    """Read the current version from a Chart.yaml, or None if unavailable."""
    content = _read(chart_yaml)
    if content is None:
        return None
    _, version, _ = parse_chart_yaml(content)
    return version


def find_all_charts(root: Path | str, exclude: Iterable[str] = ()) -> list[ChartInfo]:
    """Find every chart below a directory.

    Charts without a name, or whose name is in ``exclude``, are skipped.
    Results are ordered by directory depth (shallow first), then by name.

    Args:
        root: Directory to scan.
        exclude: Chart names to leave out.

    Returns:
        List of ChartInfo with paths relative to ``root``. Empty if ``root``
        does not exist.
    """
    base = Path(root)
    if not base.is_dir():
        return []

    excluded = set(exclude)
    charts: list[ChartInfo] = []
    for chart_yaml in base.rglob(CHART_FILE):
        if not chart_yaml.is_file():
            continue
        content = _read(chart_yaml)
        if content is None:
            continue
        name, version, app_version = parse_chart_yaml(content)
        if not name or name in excluded:
            continue
        # Fall back to v{version} when the chart declares no appVersion
        if not app_version and version:
            app_version = f"v{version}"
        charts.append(
            ChartInfo(
                name=name,
                version=version,
                path=chart_yaml.relative_to(base).as_posix(),
                app_version=app_version,
            )
        )

    charts.sort(key=lambda c: (c.path.count("/"), c.name))
    return charts


def update_chart_version(content: str, new_version: str) -> str:
    """Set the version in Chart.yaml contents.

    - The first ``version:`` line is rewritten, keeping its indentation and
      any trailing comment. If there is none, one is appended.
    - An existing ``appVersion`` is kept as is. Otherwise
      ``appVersion: v{new_version}`` is inserted right after the version.
    """
    updated = content
    if not _VERSION_LINE_RE.search(updated):
        sep = "" if not updated or updated.endswith("\n") else "\n"
        updated = f"{updated}{sep}version: {new_version}\n"

    add_app_version = not _APP_VERSION_LINE_RE.search(updated)

    def _replace(m: re.Match[str]) -> str:
        indent = m.group("indent")
        cr = m.group("cr")
        line = f"{indent}version: {new_version}{m.group('tail')}{cr}"
        if add_app_version:
            line += f"\n{indent}appVersion: v{new_version}{cr}"
        return line

    return _VERSION_LINE_RE.sub(_replace, updated, count=1)


def update_chart_files(
    root: Path | str, chart_names: Iterable[str], new_version: str
) -> list[Path]:
    """Rewrite the version of every chart under ``root`` named in ``chart_names``.

    Returns:
        Chart.yaml files whose contents changed.
    """
    base = Path(root)
    wanted = set(chart_names)
    written: list[Path] = []
    for chart in find_all_charts(base):
        if chart.name not in wanted:
            continue
        chart_yaml = base / chart.path
        content = _read(chart_yaml)
        if content is None:
            continue
        updated = update_chart_version(content, new_version)
        if updated != content:
            chart_yaml.write_text(updated, encoding="utf-8")
            written.append(chart_yaml)
    return written
