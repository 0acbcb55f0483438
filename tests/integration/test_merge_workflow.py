"""Integration tests for merge workflow.

This module tests the complete workflow including:
- Reading icon set JSON files through the adapter
- Merging published and regenerated icon sets
- Diff reports and skipped icon handling
- Health reports and metadata
"""

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path
from unittest.mock import patch

import polars as pl
import pytest

from icon_set_tools.adapters.json_adapter import IconSetJSONAdapter
from icon_set_tools.builder import import_icons, merge_icon_set_files, run_merge_jobs
from icon_set_tools.config import load_merge_config
from icon_set_tools.core.icon_set import blank_icon_set
from icon_set_tools.metadata import generate_metadata
from icon_set_tools.tools.report_icon_set import run_health_checks

MAXIMIZE = '<g fill="currentColor"><path d="M3 3v10h10V3H3zm9 9H4V4h8v8z"/></g>'
REMOVE = '<g fill="currentColor"><path d="M15 8H1V7h14v1z"/></g>'


def _write_json(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _write_inputs(root: Path) -> tuple[Path, Path]:
    old_path = _write_json(
        root / "published" / "foo.json",
        {
            "prefix": "foo",
            "icons": {"chrome-maximize": {"body": MAXIMIZE}},
            # 旧形式のエイリアス
            "aliases": {"maximize": "chrome-maximize"},
            "chars": {"e000": "chrome-maximize"},
            "width": 24,
            "height": 24,
        },
    )
    new_path = _write_json(
        root / "build" / "foo.json",
        {
            "prefix": "foo",
            "info": {"name": "Foo", "author": "Jane", "license": "MIT", "total": 0},
            "icons": {"remove": {"body": REMOVE}},
        },
    )
    return old_path, new_path


@dataclass
class FakeSVG:
    body: str
    view_box: dict = field(default_factory=lambda: {"left": 0, "top": 0, "width": 24, "height": 24})

    def get_body(self) -> str:
        return self.body


@pytest.mark.integration
class TestMergeWorkflow:
    """マージワークフロー統合テスト."""

    def test_merge_files_with_report(self, tmp_path: Path) -> None:
        """ファイル同士のマージ → 出力 → 差分レポート."""
        old_path, new_path = _write_inputs(tmp_path)
        output_path = tmp_path / "dist" / "foo.json"
        report_dir = tmp_path / "reports"

        merged = merge_icon_set_files(old_path, new_path, output_path, report_dir=report_dir)

        written = json.loads(output_path.read_text(encoding="utf-8"))
        assert written == {
            "prefix": "foo",
            "info": {
                "name": "Foo",
                "author": {"name": "Jane"},
                "license": {"title": "MIT"},
                "total": 1,
            },
            "icons": {
                # 寸法が同数なのでルートには移さない
                "chrome-maximize": {"body": MAXIMIZE, "width": 24, "height": 24, "hidden": True},
                "remove": {"body": REMOVE},
            },
            "aliases": {"maximize": {"parent": "chrome-maximize"}},
            "chars": {"e000": "chrome-maximize"},
        }
        assert merged.count() == 1

        # hidden になっただけのアイコンは差分に含まない
        changes = pl.read_csv(report_dir / "icon_changes.csv")
        assert changes["name"].to_list() == ["remove"]
        assert changes["change"].to_list() == ["added"]

    def test_merge_report_includes_skipped_icons(self, tmp_path: Path) -> None:
        """取り込みでスキップしたアイコンはマージレポートに出力する."""
        old_path, new_path = _write_inputs(tmp_path)
        report_dir = tmp_path / "reports"

        def _broken() -> FakeSVG:
            raise ValueError("unsupported element")

        skipped = import_icons(blank_icon_set("foo"), [("broken", _broken)])
        merge_icon_set_files(
            old_path,
            new_path,
            tmp_path / "dist" / "foo.json",
            report_dir=report_dir,
            skipped=skipped,
        )

        with open(report_dir / "skipped_icons.tsv", encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f, delimiter="\t"))
        assert rows == [["name", "reason"], ["broken", "unsupported element"]]

    def test_merge_jobs_from_config(self, tmp_path: Path) -> None:
        """YAML のジョブ定義からマージを実行する."""
        _write_inputs(tmp_path)
        config_path = tmp_path / "merge.yml"
        config_path.write_text(
            """
jobs:
  - name: foo
    old: published/foo.json
    new: build/foo.json
    output: dist/foo.json
    mark_as_hidden: false
""",
            encoding="utf-8",
        )

        results = run_merge_jobs(load_merge_config(config_path))

        assert list(results) == ["foo"]
        assert results["foo"].count() == 2
        written = json.loads((tmp_path / "dist" / "foo.json").read_text(encoding="utf-8"))
        assert "hidden" not in written["icons"]["chrome-maximize"]

    def test_import_skips_failed_icons(self) -> None:
        """整形に失敗したアイコンはスキップし、バッチ全体は止めない."""
        icon_set = blank_icon_set("foo")

        def _broken() -> FakeSVG:
            raise ValueError("unsupported element")

        sources = [
            ("ok", lambda: FakeSVG(body="<path d='M0 0h24v24H0z' />")),
            ("broken", _broken),
            ("ok2", lambda: FakeSVG(body="<circle r='8' />", view_box={"width": 16, "height": 16})),
        ]

        with patch("icon_set_tools.builder.logger.warning") as mock_warning:
            skipped = import_icons(icon_set, sources)

        assert skipped == [("broken", "unsupported element")]
        assert icon_set.list() == ["ok", "ok2"]
        assert icon_set.resolve("ok") == {"body": "<path d='M0 0h24v24H0z' />", "width": 24, "height": 24}
        mock_warning.assert_called_once()
        assert "broken" in mock_warning.call_args[0][0]


def _write_unhealthy_icon_set(path: Path) -> Path:
    return _write_json(
        path,
        {
            "prefix": "foo",
            "lastModified": 1700000000,
            "icons": {
                "home": {"body": "<g id='home' />"},
                "home-outline": {"body": "<g id='home-outline' />"},
                "old": {"body": "<g id='old' />", "hidden": True},
            },
            "aliases": {
                "house": {"parent": "home"},
                "broken": {"parent": "missing"},
                "loop1": {"parent": "loop2"},
                "loop2": {"parent": "loop1"},
            },
            "chars": {"e000": "home", "e001": "gone"},
            "categories": {"Misc": ["home", "house", "old", "gone"]},
            "suffixes": {"outline": "Outline", "solid": "Solid"},
        },
    )


def _read_tsv(path: Path) -> list[list[str]]:
    with open(path, encoding="utf-8", newline="") as f:
        return list(csv.reader(f, delimiter="\t"))


@pytest.mark.integration
class TestReports:
    """健全性レポートとメタデータの統合テスト."""

    def test_health_checks(self, tmp_path: Path) -> None:
        icon_set_path = _write_unhealthy_icon_set(tmp_path / "foo.json")
        out_dir = tmp_path / "health"

        with patch.object(IconSetJSONAdapter, "read", autospec=True, side_effect=IconSetJSONAdapter.read) as mock_read:
            summary_path = run_health_checks(icon_set_path, out_dir)

        # ファイルは1回だけ読む
        assert mock_read.call_count == 1

        assert _read_tsv(out_dir / "unresolved_aliases.tsv")[1:] == [
            ["broken", "missing", "missing_parent"],
            ["loop1", "loop2", "cycle_or_broken_chain"],
            ["loop2", "loop1", "cycle_or_broken_chain"],
        ]
        assert _read_tsv(out_dir / "dangling_chars.tsv")[1:] == [["e001", "gone"]]
        assert _read_tsv(out_dir / "stale_category_members.tsv")[1:] == [
            ["Misc", "house", "not_icon"],
            ["Misc", "old", "hidden"],
            ["Misc", "gone", "missing"],
        ]
        assert _read_tsv(out_dir / "unthemed_icons.tsv")[1:] == [["suffix", "home"]]
        assert _read_tsv(out_dir / "empty_themes.tsv")[1:] == [["suffix", "solid", "Solid"]]

        summary = dict(_read_tsv(summary_path)[1:])
        assert summary["prefix"] == "foo"
        assert summary["total_entries"] == "7"
        assert summary["visible_icons"] == "2"
        assert summary["unresolved_aliases"] == "3"
        assert summary["empty_themes"] == "1"

    def test_generate_metadata(self, tmp_path: Path) -> None:
        icon_set_path = _write_unhealthy_icon_set(tmp_path / "foo.json")
        output_path = tmp_path / "meta" / "foo.json"

        metadata = generate_metadata(icon_set_path, output_path)

        assert metadata["statistics"] == {
            "total": 2,
            "icons": 3,
            "variations": 0,
            "aliases": 1,
            "hidden": 1,
            "unresolved": 3,
            "characters": 1,
        }
        assert metadata["categories"] == {"Misc": 1}
        assert metadata["themes"]["suffixes"] == {"outline": "Outline", "solid": "Solid"}
        assert json.loads(output_path.read_text(encoding="utf-8"))["prefix"] == "foo"
