"""Tests for chart_versioner.resolver."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import write_chart

from chart_versioner.errors import InvalidFormat
from chart_versioner.models import BumpLevel, ChangedFile
from chart_versioner.resolver import attribute_changes, merge_levels, resolve_versions


def changes(*paths: str) -> list[ChangedFile]:
    return [ChangedFile(path=p) for p in paths]


class TestMergeLevels:
    def test_highest_severity_wins(self) -> None:
        levels = [BumpLevel.PATCH, BumpLevel.MAJOR, BumpLevel.MINOR]
        assert merge_levels(levels) is BumpLevel.MAJOR

    def test_order_does_not_matter(self) -> None:
        assert merge_levels([BumpLevel.MINOR, BumpLevel.PATCH]) is BumpLevel.MINOR
        assert merge_levels([BumpLevel.PATCH, BumpLevel.MINOR]) is BumpLevel.MINOR

    def test_empty_is_patch(self) -> None:
        assert merge_levels([]) is BumpLevel.PATCH


class TestAttributeChanges:
    def test_groups_changes_per_chart(self, chart_repo: Path) -> None:
        result = attribute_changes(
            changes(
                "charts/top1/values.yaml",
                "charts/top1/templates/deployment.yaml",
                "charts/top2/values.yaml",
            ),
            BumpLevel.MINOR,
            root=chart_repo,
        )
        assert sorted(result) == ["top1", "top2"]
        ref, level = result["top1"]
        assert ref.chart_yaml == chart_repo / "charts" / "top1" / "Chart.yaml"
        assert level is BumpLevel.MINOR

    def test_unowned_files_reported(self, chart_repo: Path) -> None:
        warnings: list[str] = []
        result = attribute_changes(
            changes("tooling/script.sh"),
            BumpLevel.PATCH,
            root=chart_repo,
            warn=warnings.append,
        )
        assert result == {}
        assert warnings == ["tooling/script.sh does not belong to any chart"]


class TestResolveVersions:
    def test_fix_bumps_patch(self, chart_repo: Path) -> None:
        result = resolve_versions(
            changes("charts/top1/values.yaml"), "fix: bugfix", root=chart_repo
        )
        assert result == {"top1": "2.2.4"}

    def test_feat_bumps_minor(self, chart_repo: Path) -> None:
        result = resolve_versions(
            changes("charts/top1/values.yaml"), "feat: some feature", root=chart_repo
        )
        assert result == {"top1": "2.3.0"}

    def test_breaking_bumps_major(self, chart_repo: Path) -> None:
        result = resolve_versions(
            changes("charts/top1/values.yaml"), "feat!: breaking", root=chart_repo
        )
        assert result == {"top1": "3.0.0"}

    def test_breaking_footer_bumps_major(self, chart_repo: Path) -> None:
        message = "fix(top1): rename values\n\nBREAKING CHANGE: image.tag moved"
        result = resolve_versions(
            changes("charts/top1/values.yaml"), message, root=chart_repo
        )
        assert result == {"top1": "3.0.0"}

    def test_two_charts(self, chart_repo: Path) -> None:
        result = resolve_versions(
            changes("charts/top1/values.yaml", "charts/nested/nested2/values.yaml"),
            "fix: bugfix",
            root=chart_repo,
        )
        assert result == {"top1": "2.2.4", "nested2": "1.2.4"}

    def test_two_charts_breaking(self, chart_repo: Path) -> None:
        result = resolve_versions(
            changes("charts/top1/values.yaml", "charts/nested/nested2/values.yaml"),
            "feat!: some breaking feature",
            root=chart_repo,
        )
        assert result == {"top1": "3.0.0", "nested2": "2.0.0"}

    def test_docs_bumps_patch(self, chart_repo: Path) -> None:
        result = resolve_versions(
            changes("charts/top1/README.md", "charts/nested/nested2/README.md"),
            "docs: update documentation",
            root=chart_repo,
        )
        assert result == {"top1": "2.2.4", "nested2": "1.2.4"}

    def test_many_files_one_chart_bumped_once(self, chart_repo: Path) -> None:
        result = resolve_versions(
            changes(
                "charts/top2/values.yaml",
                "charts/top2/templates/a.yaml",
                "charts/top2/templates/b.yaml",
            ),
            "feat: x",
            root=chart_repo,
        )
        assert result == {"top2": "3.3.0"}

    def test_files_outside_charts_ignored(self, chart_repo: Path) -> None:
        result = resolve_versions(
            changes("some-other-file.txt", "tooling/script.sh"),
            "feat: some feature",
            root=chart_repo,
        )
        assert result == {}

    def test_undecodable_chart_omitted(self, chart_repo: Path) -> None:
        bad = chart_repo / "charts" / "bad"
        bad.mkdir()
        (bad / "Chart.yaml").write_bytes(
            b"name: bad\nversion: 1.0.0\ndescription: caf\xe9\n"
        )
        result = resolve_versions(
            changes("charts/bad/values.yaml", "charts/top1/values.yaml"),
            "fix: bugfix",
            root=chart_repo,
        )
        assert result == {"top1": "2.2.4"}

    def test_no_changes(self, chart_repo: Path) -> None:
        assert resolve_versions([], "feat: nothing", root=chart_repo) == {}

    def test_nested_child_gets_the_bump(self, chart_repo: Path) -> None:
        write_chart(chart_repo / "charts", "top1/charts/child", "child", "0.1.0")
        result = resolve_versions(
            changes("charts/top1/charts/child/values.yaml"),
            "fix: child only",
            root=chart_repo,
        )
        assert result == {"child": "0.1.1"}

    def test_unreadable_version_excluded(self, chart_repo: Path) -> None:
        write_chart(chart_repo / "charts", "noversion", "noversion")
        warnings: list[str] = []
        result = resolve_versions(
            changes("charts/noversion/values.yaml", "charts/top1/values.yaml"),
            "fix: x",
            root=chart_repo,
            warn=warnings.append,
        )
        assert result == {"top1": "2.2.4"}
        assert len(warnings) == 1
        assert warnings[0].startswith("noversion: no readable version")

    def test_partial_version_defaults_to_zero(self, chart_repo: Path) -> None:
        write_chart(chart_repo / "charts", "short", "short", "1.4")
        result = resolve_versions(
            changes("charts/short/values.yaml"), "fix: x", root=chart_repo
        )
        assert result == {"short": "1.4.1"}

    def test_accepts_any_change_type(self, chart_repo: Path) -> None:
        result = resolve_versions(
            [
                ChangedFile(path="charts/top1/old.yaml", change_type="removed"),
                ChangedFile(path="charts/top2/new.yaml", change_type="added"),
            ],
            "fix: x",
            root=chart_repo,
        )
        assert result == {"top1": "2.2.4", "top2": "3.2.4"}

    def test_invalid_message_raises(self, chart_repo: Path) -> None:
        with pytest.raises(InvalidFormat):
            resolve_versions(
                changes("charts/top1/values.yaml"), "not conventional", root=chart_repo
            )

    def test_repeat_runs_give_same_result(self, chart_repo: Path) -> None:
        args = (changes("charts/top1/values.yaml"), "feat: x")
        first = resolve_versions(*args, root=chart_repo)
        assert resolve_versions(*args, root=chart_repo) == first

    def test_uses_cwd_by_default(
        self, chart_repo: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(chart_repo)
        assert resolve_versions(changes("charts/top2/values.yaml"), "fix: x") == {
            "top2": "3.2.4"
        }
