"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest


def write_chart(
    root: Path,
    rel_dir: str,
    name: str | None = None,
    version: str | None = None,
    app_version: str | None = None,
) -> Path:
    """Create a chart directory with a Chart.yaml and a values.yaml."""
    chart_dir = root / rel_dir
    chart_dir.mkdir(parents=True, exist_ok=True)
    lines = ["apiVersion: v2"]
    if name is not None:
        lines.append(f"name: {name}")
    lines.append("description: A Helm chart for testing")
    lines.append("type: application")
    if version is not None:
        lines.append(f"version: {version}")
    if app_version is not None:
        lines.append(f'appVersion: "{app_version}"')
    chart_yaml = chart_dir / "Chart.yaml"
    chart_yaml.write_text("\n".join(lines) + "\n")
    (chart_dir / "values.yaml").write_text("replicaCount: 1\n")
    return chart_yaml


@pytest.fixture
def chart_repo(tmp_path: Path) -> Path:
    """Create a repository with four charts under charts/.

    charts/
      top1/              top1 2.2.3
      top2/              top2 3.2.3
      nested/nested1/    nested1 1.0.0
      nested/nested2/    nested2 1.2.3 (no appVersion)
    """
    charts = tmp_path / "charts"
    write_chart(charts, "top1", "top1", "2.2.3", "v2.4.4")
    write_chart(charts, "top2", "top2", "3.2.3", "v2.2.2")
    write_chart(charts, "nested/nested1", "nested1", "1.0.0", "v4.5.6")
    write_chart(charts, "nested/nested2", "nested2", "1.2.3")
    (charts / "nested" / "README.md").write_text("# nested charts\n")
    (tmp_path / "tooling").mkdir()
    (tmp_path / "tooling" / "script.sh").write_text("echo hi\n")
    (tmp_path / "README.md").write_text("# repo\n")
    return tmp_path
