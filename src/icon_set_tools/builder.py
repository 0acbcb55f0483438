"""アイコンセットビルダー（オーケストレーター）.

公開済みのアイコンセット JSON と再生成したアイコンセット JSON をマージし、配布用の JSON を生成する。
入力の揺れ（旧形式のエイリアス・info など）は adapter/core 側の正規化に寄せ、
ここでは「ファイル入出力」「取り込み失敗のスキップとレポート」「マージジョブの実行」を担う。
"""

from __future__ import annotations

import argparse
import json
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from loguru import logger

from icon_set_tools.adapters.json_adapter import IconSetJSONAdapter
from icon_set_tools.config import MergeJob, load_merge_config
from icon_set_tools.core.diff import diff_icon_sets, summarize_changes
from icon_set_tools.core.icon_set import CleanedSVG, IconSet
from icon_set_tools.core.merge import merge_icon_sets
from icon_set_tools.core.reports import export_merge_reports

SVGLoader = Callable[[], CleanedSVG]


def load_icon_set(path: Path | str) -> IconSet:
    """アイコンセット JSON を読み込む."""
    icon_set = IconSetJSONAdapter(path).load()
    logger.info(f"Loaded icon set '{icon_set.prefix}' from {path} ({len(icon_set.entries)} entries)")
    return icon_set


def write_icon_set(icon_set: IconSet, path: Path | str, validate: bool = True) -> dict:
    """アイコンセットをエクスポートして JSON として保存する.

    Returns:
        書き出したエクスポート辞書
    """
    path = Path(path)
    data = icon_set.export(validate)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    logger.info(f"Icon set '{icon_set.prefix}' written to {path} ({icon_set.count()} icons)")
    return data


def import_icons(
    icon_set: IconSet,
    sources: Iterable[tuple[str, SVGLoader]],
) -> list[tuple[str, str]]:
    """整形済み SVG をアイコンセットに取り込む.

    1件の整形失敗でバッチ全体を止めないため、失敗したアイコンはスキップして記録する。

    Args:
        icon_set: 取り込み先
        sources: (アイコン名, 整形済み SVG を返す関数) の列

    Returns:
        スキップした (name, reason) のリスト
    """
    skipped: list[tuple[str, str]] = []
    imported = 0
    for name, loader in sources:
        try:
            svg = loader()
            icon_set.from_svg(name, svg)
        except Exception as e:
            logger.warning(f"Skipped icon '{name}': {e}")
            skipped.append((name, str(e)))
            continue
        imported += 1

    logger.info(f"Imported {imported} icons into '{icon_set.prefix}' (skipped={len(skipped)})")
    return skipped


def merge_icon_set_files(
    old_path: Path | str,
    new_path: Path | str,
    output_path: Path | str,
    mark_as_hidden: bool = True,
    report_dir: Path | str | None = None,
    skipped: Sequence[tuple[str, str]] | None = None,
) -> IconSet:
    """2つのアイコンセット JSON をマージして保存する.

    Args:
        old_path: 公開済みアイコンセット
        new_path: 新しく生成したアイコンセット
        output_path: 出力先
        mark_as_hidden: 新アイコンセットに無い旧アイコンを hidden にするか
        report_dir: 差分レポートの出力先（None なら出力しない）
        skipped: 取り込みでスキップした (name, reason) のリスト（import_icons の戻り値）

    Returns:
        マージ結果
    """
    old_icons = load_icon_set(old_path)
    new_icons = load_icon_set(new_path)

    merged = merge_icon_sets(old_icons, new_icons, mark_as_hidden=mark_as_hidden)
    write_icon_set(merged, output_path)

    if report_dir is not None:
        changes = diff_icon_sets(old_icons, merged)
        paths = export_merge_reports(changes, report_dir, skipped=skipped)
        logger.info(
            f"Merge report: {paths['icon_changes']} {summarize_changes(changes)} "
            f"(skipped={len(skipped or [])})"
        )

    return merged


def run_merge_jobs(jobs: Iterable[MergeJob]) -> dict[str, IconSet]:
    """マージジョブを順に実行する."""
    results: dict[str, IconSet] = {}
    for job in jobs:
        logger.info(f"[{job.name}] Merging {job.old_path} + {job.new_path} -> {job.output_path}")
        results[job.name] = merge_icon_set_files(
            job.old_path,
            job.new_path,
            job.output_path,
            mark_as_hidden=job.mark_as_hidden,
            report_dir=job.report_dir,
        )
    return results


def main() -> None:
    """CLI エントリポイント."""
    parser = argparse.ArgumentParser(description="Merge and export icon sets")
    subparsers = parser.add_subparsers(dest="command", required=True)

    merge_parser = subparsers.add_parser("merge", help="Merge an old and a new icon set")
    merge_parser.add_argument("--old", type=Path, help="Published icon set JSON")
    merge_parser.add_argument("--new", type=Path, help="Newly generated icon set JSON")
    merge_parser.add_argument("--output", type=Path, help="Output icon set JSON")
    merge_parser.add_argument(
        "--keep-visible",
        action="store_true",
        help="Do not mark icons missing from the new icon set as hidden",
    )
    merge_parser.add_argument(
        "--report-dir",
        type=Path,
        default=None,
        help="Report output directory (icon_changes.csv)",
    )
    merge_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with merge jobs (replaces --old/--new/--output)",
    )

    export_parser = subparsers.add_parser("export", help="Re-export an icon set in canonical form")
    export_parser.add_argument("--input", type=Path, required=True, help="Icon set JSON")
    export_parser.add_argument("--output", type=Path, required=True, help="Output icon set JSON")
    export_parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Keep unresolved aliases in output",
    )

    diff_parser = subparsers.add_parser("diff", help="Write per-name differences between icon sets")
    diff_parser.add_argument("--old", type=Path, required=True, help="Old icon set JSON")
    diff_parser.add_argument("--new", type=Path, required=True, help="New icon set JSON")
    diff_parser.add_argument("--report-dir", type=Path, required=True, help="Report output directory")

    args = parser.parse_args()

    if args.command == "merge":
        if args.config is not None:
            run_merge_jobs(load_merge_config(args.config))
            return
        if args.old is None or args.new is None or args.output is None:
            parser.error("merge requires --old, --new and --output (or --config)")
        merge_icon_set_files(
            old_path=args.old,
            new_path=args.new,
            output_path=args.output,
            mark_as_hidden=not args.keep_visible,
            report_dir=args.report_dir,
        )
    elif args.command == "export":
        write_icon_set(load_icon_set(args.input), args.output, validate=not args.no_validate)
    elif args.command == "diff":
        changes = diff_icon_sets(load_icon_set(args.old), load_icon_set(args.new))
        export_merge_reports(changes, args.report_dir)
        logger.info(f"Changes: {summarize_changes(changes)}")


if __name__ == "__main__":
    main()
