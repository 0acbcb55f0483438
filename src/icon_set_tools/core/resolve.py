"""エイリアスチェーンの解決.

エイリアス → 親 → ... → 実アイコン の順にチェーンを辿り、変形を合成します。

設計方針:
    - 再帰ではなく訪問済み集合を持つループで辿る（チェーン長はメモリのみで制限）
    - 循環・存在しない親は「未解決」として None を返す（例外にしない）
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .entries import AliasEntry, IconEntry, IconSetEntry
from .props import full_props, merge_icon_props, strip_default_props

ParentIconsTree = dict[str, list[str] | None]


def walk_chain(entries: Mapping[str, IconSetEntry], name: str) -> list[str] | None:
    """name から実アイコンまでのチェーンを返す.

    Returns:
        [name, 親, 親の親, ..., 実アイコン] のリスト。
        name が存在しない、親が欠落している、循環している場合は None
    """
    chain: list[str] = []
    visited: set[str] = set()
    current = name
    while True:
        item = entries.get(current)
        if item is None or current in visited:
            return None
        chain.append(current)
        if isinstance(item, IconEntry):
            return chain
        visited.add(current)
        current = item.parent


def get_tree(
    entries: Mapping[str, IconSetEntry],
    names: Iterable[str] | None = None,
) -> ParentIconsTree:
    """各エントリの親リストを返す.

    親リストの先頭が直接の親、末尾が実アイコンです（自身は含まない）。

    Examples:
        'alias3': ['alias2', 'alias1', 'icon']
        'icon': []
        'bad-alias': None

    Args:
        entries: エントリ辞書
        names: 対象名（None の場合は全エントリ）

    Returns:
        名前 → 親リスト（未解決は None）
    """
    tree: ParentIconsTree = {}
    for name in entries if names is None else names:
        if name in tree:
            continue
        chain = walk_chain(entries, name)
        if chain is None:
            tree[name] = None
            continue
        # チェーン上の各要素も同じ結果から求まる
        for index, item_name in enumerate(chain):
            if item_name not in tree:
                tree[item_name] = chain[index + 1 :]
    return tree


def resolve_entry(
    entries: Mapping[str, IconSetEntry],
    name: str,
    full: bool = False,
) -> dict[str, object] | None:
    """エントリを解決して描画用データ（body + プロパティ）を返す.

    Args:
        entries: エントリ辞書
        name: 解決するエントリ名
        full: True の場合は全プロパティをデフォルト値込みで返す。
            False の場合はデフォルト値と等しいプロパティを省略する

    Returns:
        {"body": ..., "width": ..., ...} 形式の辞書。未解決の場合は None
    """
    chain = walk_chain(entries, name)
    if chain is None:
        return None

    icon = entries[chain[-1]]
    assert isinstance(icon, IconEntry)
    props: dict[str, int | float | bool] = dict(icon.props)

    # 実アイコン側から順に差分を合成する
    for alias_name in reversed(chain[:-1]):
        alias = entries[alias_name]
        assert isinstance(alias, AliasEntry)
        props = merge_icon_props(props, alias.props)

    props = full_props(props) if full else strip_default_props(props)
    return {"body": icon.body, **props}
