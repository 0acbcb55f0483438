"""マージ結果のレポート出力.

アイコンセットのマージ時の差分（追加・削除・更新・役割の入れ替え）と、
取り込みでスキップしたアイコンをファイルとして出力します。
"""

from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path

import polars as pl


def export_merge_reports(
    changes: pl.DataFrame,
    output_dir: Path | str,
    skipped: Sequence[tuple[str, str]] | None = None,
) -> dict[str, Path | None]:
    """マージレポートを出力する.

    Args:
        changes: diff_icon_sets() の戻り値
        output_dir: 出力ディレクトリ
        skipped: 取り込みでスキップした (name, reason) のリスト

    Returns:
        出力したファイルのパス（該当が無ければ None）
        - "icon_changes": icon_changes.csv
        - "skipped_icons": skipped_icons.tsv
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    result_paths: dict[str, Path | None] = {}

    # 差分レポート
    changes_path = output_dir / "icon_changes.csv"
    if len(changes) > 0:
        changes.write_csv(changes_path)
        result_paths["icon_changes"] = changes_path
    else:
        result_paths["icon_changes"] = None

    # スキップレポート
    skipped_path = output_dir / "skipped_icons.tsv"
    if skipped:
        with open(skipped_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, delimiter="\t")
            writer.writerow(["name", "reason"])
            writer.writerows(skipped)
        result_paths["skipped_icons"] = skipped_path
    else:
        result_paths["skipped_icons"] = None

    return result_paths
