"""Helm packaging and chart repository index generation.

helm is treated as an external command; output streams straight to the
terminal so CI logs show dependency resolution and packaging progress.
"""

from __future__ import annotations

from pathlib import Path

from .errors import HelmError
from .shell import run


def _helm(*args: str) -> None:
    try:
        result = run("helm", *args, check=False)
    except OSError as exc:
        raise HelmError(f"Cannot run helm: {exc}") from exc
    if result.returncode != 0:
        raise HelmError(f"helm {' '.join(args)} exited with {result.returncode}")


def package_chart(chart_dir: Path | str, output_dir: Path | str) -> None:
    """Update a chart's dependencies and package it into ``output_dir``.

    Raises:
        HelmError: If either helm command fails.
    """
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    _helm("dependency", "update", str(chart_dir))
    _helm("package", str(chart_dir), "-d", str(output_dir))


def regenerate_index(output_dir: Path | str, repo_url: str) -> Path:
    """Regenerate index.yaml for the packaged charts in ``output_dir``.

    Returns:
        Path of the regenerated index.yaml.

    Raises:
        HelmError: If ``helm repo index`` fails.
    """
    _helm("repo", "index", str(output_dir), "--url", repo_url)
    return Path(output_dir) / "index.yaml"
