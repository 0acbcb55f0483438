"""アイコンデータの変更判定（Content-Identity Comparator）."""

from __future__ import annotations

from .icon_set import IconSet
from .match import ContentKey, content_key


def visible_content(icon_set: IconSet) -> set[ContentKey]:
    """表示対象エントリの解決済み内容キー集合を返す."""
    keys: set[ContentKey] = set()
    for name in icon_set.entries:
        if not icon_set.is_visible(name):
            continue
        data = icon_set.resolve(name, full=True)
        if data is not None:
            keys.add(content_key(data))
    return keys


def has_icon_data_been_modified(set1: IconSet, set2: IconSet) -> bool:
    """2つのアイコンセットで表示されるアイコン内容が変わったか判定する.

    名前やアイコン/エイリアスの役割は比較しません。表示対象の各エントリが解決する
    内容（body + 寸法 + 変形）の集合が一致すれば「変更なし」です。
    メタデータ（info, categories など）は比較しません。どちらの入力も変更しません。
    """
    return visible_content(set1) != visible_content(set2)
