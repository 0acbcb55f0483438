"""アイコンセットのマージ.

公開済みの旧アイコンセットと再生成した新アイコンセットを1つにまとめます。

- 新アイコンセットの構造とメタデータ（prefix, info, categories, themes）を基準にする
- 同じ内容のアイコンは解決結果で照合し、本体を重複させずエイリアスにする
- 旧アイコンセットにしか無い名前は hidden として残す（公開済みの名前を壊さない）
- アイコン/エイリアスの役割が入れ替わった場合は旧アイコンセットの役割に戻す
- 処理順は名前順に固定する（入力のエントリ順に結果が左右されない）

照合は内容キー → 名前の索引で行い、索引はマージ開始時に1回だけ作成して
エントリの追加に合わせて更新します。
"""

from __future__ import annotations

from collections.abc import Mapping

from loguru import logger

from .entries import AliasEntry, IconEntry, IconSetEntry
from .icon_set import IconSet
from .match import KIND_ORDER, ContentKey, content_key
from .modified import has_icon_data_been_modified
from .resolve import walk_chain


class _IconSetMerger:
    def __init__(self, old_icons: IconSet, new_icons: IconSet, mark_as_hidden: bool) -> None:
        self.old_icons = old_icons
        self.new_icons = new_icons
        self.mark_as_hidden = mark_as_hidden
        self.merged = IconSet(new_icons.export())
        self.stats = {"kept_hidden": 0, "aliased": 0, "restored": 0, "renamed": 0}

        # 内容キー → 名前、親 → 直接のエイリアス、実アイコン → カテゴリ名
        self.content_index: dict[ContentKey, set[str]] = {}
        self.children: dict[str, set[str]] = {}
        self.category_titles: dict[str, list[str]] = {}
        for name, item in self.merged.entries.items():
            self._index_entry(name, item)
        for title, members in self.merged.categories.items():
            for member in members:
                self.category_titles.setdefault(member, []).append(title)

    def run(self) -> IconSet:
        old_entries = self.old_icons.entries

        for name in sorted(old_entries):
            if isinstance(old_entries[name], IconEntry):
                self._merge_icon(name)

        for name in sorted(old_entries):
            if isinstance(old_entries[name], AliasEntry):
                self._merge_alias_chain(name)

        self._merge_chars()
        self._merge_last_modified()

        logger.info(
            f"Merged icon sets '{self.old_icons.prefix}' + '{self.new_icons.prefix}': "
            f"{len(self.merged.entries)} entries, {self.merged.count()} visible icons "
            f"(hidden={self.stats['kept_hidden']}, aliased={self.stats['aliased']}, "
            f"renamed={self.stats['renamed']}, restored={self.stats['restored']})"
        )
        return self.merged

    # ------------------------------------------------------------------
    # 索引
    # ------------------------------------------------------------------

    def _index_entry(self, name: str, item: IconSetEntry) -> None:
        if isinstance(item, AliasEntry):
            self.children.setdefault(item.parent, set()).add(name)
        data = self.merged.resolve(name, full=True)
        if data is not None:
            self.content_index.setdefault(content_key(data), set()).add(name)

    def _add_entry(self, name: str, item: IconSetEntry) -> None:
        self.merged.entries[name] = item
        self._index_entry(name, item)

    def _find_match(self, icon: Mapping[str, object]) -> str | None:
        """find_matching_icon と同じ優先順位（表示対象 → 種類 → 名前）で索引を引く."""
        names = self.content_index.get(content_key(icon))
        if not names:
            return None
        entries = self.merged.entries
        return min(
            names,
            key=lambda name: (not self.merged.is_visible(name), KIND_ORDER[entries[name].kind], name),
        )

    def _swap_roles(self, icon_name: str, alias_name: str) -> None:
        """icon_name（実アイコン）の本体を alias_name に移し、icon_name をそのエイリアスにする.

        呼び出し側で両者の解決結果が同一であることを確認しておくこと。
        内容は変わらないので内容索引は alias_name の追加のみ反映する。
        """
        entries = self.merged.entries
        icon = entries[icon_name]
        assert isinstance(icon, IconEntry)

        previous = entries.get(alias_name)
        if isinstance(previous, AliasEntry):
            self.children.get(previous.parent, set()).discard(alias_name)

        self._add_entry(alias_name, IconEntry(body=icon.body, props=dict(icon.props)))
        entries[icon_name] = AliasEntry(parent=alias_name)

        # icon_name を参照していたエイリアスを alias_name に付け替える
        dependents = self.children.pop(icon_name, set())
        dependents.discard(alias_name)
        for child in dependents:
            item = entries[child]
            assert isinstance(item, AliasEntry)
            item.parent = alias_name
        self.children.setdefault(alias_name, set()).update(dependents | {icon_name})

        categories = self.merged.categories
        titles = self.category_titles.pop(icon_name, [])
        for title in titles:
            categories[title] = [alias_name if member == icon_name else member for member in categories[title]]
        if titles:
            self.category_titles.setdefault(alias_name, []).extend(titles)

    # ------------------------------------------------------------------
    # マージ処理
    # ------------------------------------------------------------------

    def _merge_icon(self, name: str) -> None:
        old_item = self.old_icons.entries[name]
        assert isinstance(old_item, IconEntry)
        old_data = self.old_icons.resolve(name, full=True)
        assert old_data is not None
        merged = self.merged

        current = merged.entries.get(name)
        if current is not None:
            if isinstance(current, AliasEntry) and not old_item.hidden:
                self._restore_icon_role(name, old_data)
            return

        match = self._find_match(old_data)
        if match is not None:
            match_item = merged.entries[match]
            if (
                isinstance(match_item, IconEntry)
                and match not in self.old_icons.entries
                and not old_item.hidden
                and merged.is_visible(match)
            ):
                # 新しい名前で同じ内容が追加された: 旧名を実アイコンとして残す
                self._swap_roles(match, name)
                self.stats["renamed"] += 1
                logger.debug(f"'{name}': kept as icon, '{match}' becomes its alias")
                return

            self._add_entry(name, AliasEntry(parent=match, props={"hidden": True} if old_item.hidden else {}))
            self.stats["aliased"] += 1
            logger.debug(f"'{name}': identical to '{match}', added as alias")
            return

        props = dict(old_item.props)
        if self.mark_as_hidden:
            props["hidden"] = True
        self._add_entry(name, IconEntry(body=old_item.body, props=props))
        self.stats["kept_hidden"] += 1
        logger.debug(f"'{name}': missing in new icon set, kept as hidden icon")

    def _restore_icon_role(self, name: str, old_data: dict[str, object]) -> None:
        """旧アイコンセットで実アイコンだった名前が新しくエイリアスになった場合の処理.

        内容が変わっていなければ旧アイコンセットの役割（実アイコン）に戻します。
        """
        merged = self.merged
        chain = walk_chain(merged.entries, name)
        if chain is None:
            return

        key = content_key(old_data)
        terminal = chain[-1]
        current = merged.resolve(name, full=True)
        terminal_data = merged.resolve(terminal, full=True)
        if current is None or terminal_data is None:
            return
        if content_key(current) != key or content_key(terminal_data) != key:
            # 内容が変わった: 新アイコンセットの構造を優先
            return
        if isinstance(self.old_icons.entries.get(terminal), IconEntry):
            # 旧アイコンセットでも両方実アイコン
            return
        if merged.entries[name].hidden or merged.entries[terminal].hidden:
            return

        self._swap_roles(terminal, name)
        self.stats["restored"] += 1
        logger.debug(f"'{name}': role swap reverted, '{terminal}' becomes its alias")

    def _merge_alias_chain(self, name: str) -> None:
        chain = walk_chain(self.old_icons.entries, name)
        if chain is None:
            logger.debug(f"'{name}': unresolved alias in old icon set, skipped")
            return
        # 親から順に追加する（実アイコンは追加済み）
        for alias_name in reversed(chain[:-1]):
            if alias_name not in self.merged.entries:
                self._merge_alias(alias_name)

    def _merge_alias(self, name: str) -> None:
        old_item = self.old_icons.entries[name]
        assert isinstance(old_item, AliasEntry)
        merged = self.merged
        parent = old_item.parent

        if old_item.kind == "alias":
            parent_item = merged.entries[parent]
            if isinstance(parent_item, AliasEntry) and parent_item.kind == "alias":
                # エイリアスのエイリアス: 親の参照先を使う
                parent = parent_item.parent
            self._add_entry(name, AliasEntry(parent=parent, props=dict(old_item.props)))
            return

        # variation: 同じ変形結果が新アイコンセットにあればそれを参照する
        old_data = self.old_icons.resolve(name, full=True)
        assert old_data is not None
        match = self._find_match(old_data)
        if match is not None:
            self._add_entry(name, AliasEntry(parent=match, props={"hidden": True} if old_item.hidden else {}))
            self.stats["aliased"] += 1
            return

        props = dict(old_item.props)
        if self.mark_as_hidden:
            props["hidden"] = True
        self._add_entry(name, AliasEntry(parent=parent, props=props))
        self.stats["kept_hidden"] += 1
        logger.debug(f"'{name}': variation no longer produced, kept as hidden")

    def _merge_chars(self) -> None:
        merged = self.merged
        for char, name in sorted(self.old_icons.char_map.items()):
            if char in merged.char_map or name in self.new_icons.entries:
                continue
            if name in merged.entries:
                merged.char_map[char] = name

    def _merge_last_modified(self) -> None:
        old_value = self.old_icons.last_modified
        new_value = self.new_icons.last_modified
        merged = self.merged

        if old_value is None or new_value is None:
            merged.last_modified = old_value if new_value is None else new_value
            return

        if not has_icon_data_been_modified(self.old_icons, self.new_icons):
            merged.last_modified = min(old_value, new_value)
            return

        merged.last_modified = max(old_value, new_value)
        merged.update_last_modified()


def merge_icon_sets(old_icons: IconSet, new_icons: IconSet, mark_as_hidden: bool = True) -> IconSet:
    """旧アイコンセットと新アイコンセットをマージする.

    Args:
        old_icons: 公開済みのアイコンセット
        new_icons: 新しく生成したアイコンセット
        mark_as_hidden: 新アイコンセットに無い旧アイコンを hidden にするか

    Returns:
        マージ結果の新しいアイコンセット（入力は変更しない）
    """
    return _IconSetMerger(old_icons, new_icons, mark_as_hidden).run()
