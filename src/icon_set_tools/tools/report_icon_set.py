"""アイコンセット JSON の健全性チェックを行い、TSVレポートを出力する。"""

from __future__ import annotations

import argparse
import csv
from collections.abc import Iterable, Sequence
from pathlib import Path

from icon_set_tools.adapters.json_adapter import IconSetJSONAdapter
from icon_set_tools.core.entries import AliasEntry, IconEntry


def _write_tsv(path: Path, header: Sequence[str], rows: Iterable[Sequence[object]]) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, delimiter="\t")
        writer.writerow(list(header))
        count = 0
        for r in rows:
            writer.writerow(["" if v is None else v for v in r])
            count += 1
    return count


def run_health_checks(icon_set_path: Path, out_dir: Path) -> Path:
    icon_set_path = Path(icon_set_path)
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    # 読み込み時に捨てられる文字マップ・カテゴリも報告するため、repair 済みの生データを残す
    adapter = IconSetJSONAdapter(icon_set_path)
    raw = adapter.repair(adapter.read())
    icon_set = adapter.to_icon_set(raw)
    entries = icon_set.entries
    tree = icon_set.get_tree()

    # Unresolved aliases（親の欠落・循環）
    unresolved_rows = []
    for name, item in entries.items():
        if isinstance(item, AliasEntry) and tree.get(name) is None:
            reason = "missing_parent" if item.parent not in entries else "cycle_or_broken_chain"
            unresolved_rows.append((name, item.parent, reason))
    unresolved_count = _write_tsv(
        out_dir / "unresolved_aliases.tsv",
        ["name", "parent", "reason"],
        unresolved_rows,
    )

    # Dangling characters（読み込み時に捨てられる文字マップ）
    raw_chars = raw.get("chars") or {}
    dangling_chars_count = _write_tsv(
        out_dir / "dangling_chars.tsv",
        ["char", "name"],
        sorted((char, name) for char, name in raw_chars.items() if name not in entries),
    )

    # Stale category members（存在しない・実アイコンでない・hidden）
    stale_rows = []
    for title, names in sorted((raw.get("categories") or {}).items()):
        if not isinstance(names, list):
            continue
        for name in names:
            item = entries.get(name)
            if item is None:
                stale_rows.append((title, name, "missing"))
            elif not isinstance(item, IconEntry):
                stale_rows.append((title, name, "not_icon"))
            elif item.hidden:
                stale_rows.append((title, name, "hidden"))
    stale_count = _write_tsv(
        out_dir / "stale_category_members.tsv",
        ["category", "name", "reason"],
        stale_rows,
    )

    # Themes: どのテーマにも該当しないアイコンと、該当アイコンの無いテーマ
    theme_rows = []
    empty_theme_rows = []
    for kind, is_prefix, themes in (
        ("prefix", True, icon_set.prefixes),
        ("suffix", False, icon_set.suffixes),
    ):
        if not themes:
            continue
        result = icon_set.check_theme(is_prefix)
        theme_rows.extend((kind, name) for name in result.invalid)
        empty_theme_rows.extend((kind, key, themes[key]) for key, names in result.valid.items() if not names)
    unthemed_count = _write_tsv(out_dir / "unthemed_icons.tsv", ["theme_kind", "name"], theme_rows)
    empty_theme_count = _write_tsv(
        out_dir / "empty_themes.tsv",
        ["theme_kind", "key", "title"],
        empty_theme_rows,
    )

    summary_out = out_dir / "icon_set_health_summary.tsv"
    _write_tsv(
        summary_out,
        ["metric", "value"],
        [
            ("icon_set_path", str(icon_set_path)),
            ("prefix", icon_set.prefix),
            ("last_modified", icon_set.last_modified),
            ("total_entries", len(entries)),
            ("visible_icons", icon_set.count()),
            ("unresolved_aliases", unresolved_count),
            ("dangling_chars", dangling_chars_count),
            ("stale_category_members", stale_count),
            ("unthemed_icons", unthemed_count),
            ("empty_themes", empty_theme_count),
        ],
    )

    return summary_out


def main() -> None:
    p = argparse.ArgumentParser(description="Check icon set JSON health and write TSV reports.")
    p.add_argument("--input", type=Path, required=True, help="Path to icon set JSON")
    p.add_argument("--out-dir", type=Path, required=True, help="Output directory for TSV reports")
    args = p.parse_args()

    summary = run_health_checks(args.input, args.out_dir)
    print(f"Wrote health reports: {summary.parent}")


if __name__ == "__main__":
    main()
