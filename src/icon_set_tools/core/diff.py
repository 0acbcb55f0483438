"""旧/新アイコンセットの差分抽出.

名前単位で added / removed / updated / role_changed を検出し、
Polars DataFrame として返します。
"""

from __future__ import annotations

import polars as pl

from .icon_set import IconSet
from .match import content_key

DIFF_SCHEMA = {
    "name": pl.String,
    "change": pl.String,
    "old_kind": pl.String,
    "new_kind": pl.String,
}


def _resolved_key(icon_set: IconSet, name: str) -> tuple[object, ...] | None:
    data = icon_set.resolve(name, full=True)
    return None if data is None else content_key(data)


def diff_icon_sets(old_icons: IconSet, new_icons: IconSet) -> pl.DataFrame:
    """名前単位の差分を抽出する.

    Args:
        old_icons: 旧アイコンセット
        new_icons: 新アイコンセット

    Returns:
        差分の DataFrame（name, change, old_kind, new_kind）。変更の無い名前は含まない。
        - added: 新アイコンセットにのみ存在
        - removed: 旧アイコンセットにのみ存在
        - role_changed: 実アイコン ↔ エイリアスが入れ替わった
        - updated: 解決結果（body/寸法/変形）が変わった

    Examples:
        >>> old = IconSet({"prefix": "foo", "icons": {"a": {"body": "<g />"}}})
        >>> new = IconSet({"prefix": "foo", "icons": {"b": {"body": "<g />"}}})
        >>> diff_icon_sets(old, new)["change"].to_list()
        ['removed', 'added']
    """
    old_entries = old_icons.entries
    new_entries = new_icons.entries
    rows: list[dict[str, str | None]] = []

    for name in sorted(set(old_entries) | set(new_entries)):
        old_item = old_entries.get(name)
        new_item = new_entries.get(name)
        old_kind = old_item.kind if old_item is not None else None
        new_kind = new_item.kind if new_item is not None else None

        if old_item is None:
            change = "added"
        elif new_item is None:
            change = "removed"
        elif (old_kind == "icon") != (new_kind == "icon"):
            change = "role_changed"
        elif _resolved_key(old_icons, name) != _resolved_key(new_icons, name):
            change = "updated"
        else:
            continue

        rows.append({"name": name, "change": change, "old_kind": old_kind, "new_kind": new_kind})

    return pl.DataFrame(rows, schema=DIFF_SCHEMA)


def summarize_changes(changes: pl.DataFrame) -> dict[str, int]:
    """変更種別ごとの件数を返す."""
    if changes.is_empty():
        return {}
    counts = changes.group_by("change").agg(pl.len().alias("count")).sort("change")
    return dict(zip(counts["change"].to_list(), counts["count"].to_list(), strict=True))
