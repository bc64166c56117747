"""Configuration loading.

Settings live in the ``[tool.chart-versioner]`` table of a TOML file
(``pyproject.toml`` in the working directory by default)::

    [tool.chart-versioner]
    charts-root = "charts"
    output-dir = "docs/charts"
    repo-url = "https://example.org/charts/"
    exclude = ["experimental"]

Uses tomlkit so the same parser reads the file that other tooling edits.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError

DEFAULT_CONFIG = Path("pyproject.toml")
TOOL_KEY = "chart-versioner"


class Settings(BaseModel):
    """Runtime settings for the versioning pipeline.

    Attributes:
        charts_root: Directory holding the charts, relative to the repo root.
        output_dir: Where packaged charts and index.yaml are written.
        repo_url: URL of the published chart repository. The index is
                  not regenerated when empty.
        skip_label: Pull request label that disables automatic versioning.
        fallback_message: Commit message used when the real one is not a
                          conventional commit.
        exclude: Chart names ignored during discovery.
        bot_name: git user.name for the version bump commit.
        bot_email: git user.email for the version bump commit.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    charts_root: str = Field("charts", alias="charts-root")
    output_dir: str = Field("docs/charts", alias="output-dir")
    repo_url: str = Field("", alias="repo-url")
    skip_label: str = Field("manual-versioning", alias="skip-label")
    fallback_message: str = Field("chore: bump", alias="fallback-message")
    exclude: list[str] = Field(default_factory=list)
    bot_name: str = Field("github-actions[bot]", alias="bot-name")
    bot_email: str = Field(
        "github-actions[bot]@users.noreply.github.com", alias="bot-email"
    )


def load_tool_table(path: Path) -> dict[str, Any]:
    """Read ``[tool.chart-versioner]`` from a TOML file as plain Python data.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        doc = tomlkit.parse(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    except TOMLKitError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    return doc.unwrap().get("tool", {}).get(TOOL_KEY, {})


def load_settings(path: Path | None = None, **overrides: Any) -> Settings:
    """Build Settings from a config file plus explicit overrides.

    A missing default ``pyproject.toml`` means all defaults; a missing file
    that was asked for explicitly is an error. Overrides whose value is
    None are ignored so CLI options can be passed straight through.

    Raises:
        ConfigError: If the file is unreadable or the values are invalid.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        raw = load_tool_table(path)
    elif DEFAULT_CONFIG.exists():
        raw = load_tool_table(DEFAULT_CONFIG)

    try:
        settings = Settings.model_validate(raw)
        updates = {k: v for k, v in overrides.items() if v is not None}
        if updates:
            settings = Settings.model_validate(
                settings.model_dump() | updates
            )
    except ValidationError as exc:
        raise ConfigError(f"Invalid [tool.{TOOL_KEY}] settings:\n{exc}") from exc
    return settings
