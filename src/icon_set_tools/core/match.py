"""解決済み内容（content identity）による一致判定."""

from __future__ import annotations

from collections.abc import Mapping

from .entries import IconEntry
from .icon_set import IconSet
from .props import DEFAULT_ICON_PROPS

ContentKey = tuple[object, ...]

# 候補の優先順位: 実アイコン → variation → 単純エイリアス
KIND_ORDER = {"icon": 0, "variation": 1, "alias": 2}


def content_key(icon: Mapping[str, object]) -> ContentKey:
    """解決済みアイコンの内容キーを返す（名前・hidden は含まない）.

    Args:
        icon: resolve() の結果（full=False でもよい）
    """
    return (icon["body"],) + tuple(icon.get(prop, default) for prop, default in DEFAULT_ICON_PROPS.items())


def find_matching_icon(icon_set: IconSet, icon: Mapping[str, object]) -> str | None:
    """同じ内容に解決されるエントリ名を探す.

    表示対象のエントリを優先し、見つからない場合は hidden のエントリを返します。
    名前順に走査するため、エントリの追加順に結果が左右されません。

    Args:
        icon_set: 検索対象
        icon: 解決済みアイコンデータ

    Returns:
        一致したエントリ名（無い場合は None）
    """
    key = content_key(icon)
    body = icon["body"]
    tree = icon_set.get_tree()

    candidates = sorted(
        (name for name, parents in tree.items() if parents is not None and name in icon_set.entries),
        key=lambda name: (KIND_ORDER[icon_set.entries[name].kind], name),
    )

    hidden_match: str | None = None
    for name in candidates:
        terminal = icon_set.entries[tree[name][-1]] if tree[name] else icon_set.entries[name]
        assert isinstance(terminal, IconEntry)
        if terminal.body != body:
            continue
        data = icon_set.resolve(name, full=True)
        if data is None or content_key(data) != key:
            continue
        if icon_set.is_visible(name):
            return name
        if hidden_match is None:
            hidden_match = name

    return hidden_match
