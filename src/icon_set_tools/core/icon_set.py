"""アイコンセット（Icon Entry Store）.

名前 → 実アイコン/エイリアス のエントリを保持し、追加・更新・削除・リネームと
エクスポートを提供します。

設計方針:
    - エントリは名前でのみ参照する（外部からエントリオブジェクトを共有しない）
    - 内容が変わらない更新では lastModified を進めない（マージの同一判定で使う）
    - エイリアス解決は resolve モジュールに委譲する（循環・長いチェーンに耐える）
"""

from __future__ import annotations

import copy
from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Protocol

from loguru import logger

from .entries import ALL_ENTRY_KINDS, AliasEntry, CheckThemeResult, EntryKind, IconEntry, IconSetEntry
from .exceptions import IconSetValidationError
from .info import convert_icon_set_info
from .props import (
    DEFAULT_COMMON_PROPS,
    DEFAULT_ICON_DIMENSIONS,
    DEFAULT_ICON_PROPS,
    filter_alias_props,
    filter_props,
)
from .resolve import ParentIconsTree, get_tree, resolve_entry, walk_chain

THEME_KEYS = ("prefixes", "suffixes")


class CleanedSVG(Protocol):
    """マークアップ整形ステージの出力（外部コラボレータ）.

    view_box は left/top/width/height を持つマッピングです。
    """

    view_box: Mapping[str, float]

    def get_body(self) -> str: ...


def sort_theme_keys(keys: Iterable[str]) -> list[str]:
    """テーマキーを長い順（同じ長さは辞書順）に並べる."""
    return sorted(keys, key=lambda key: (-len(key), key))


def _now() -> int:
    return int(datetime.now(UTC).timestamp())


def _ordered_props(props: Mapping[str, object]) -> dict[str, object]:
    return {key: props[key] for key in DEFAULT_COMMON_PROPS if key in props}


class IconSet:
    """アイコンセット.

    Attributes:
        prefix: アイコンセット識別子
        last_modified: 最終更新時刻（epoch 秒）。未設定は None
        defaults: エントリが省略したプロパティに適用するセット共通の値
        entries: 名前 → IconEntry/AliasEntry
        info: 情報ブロック（無い場合は None）
        char_map: コードポイント → エントリ名
        categories: カテゴリ名 → 実アイコン名リスト
        prefixes: テーマキー → タイトル（名前の先頭 "key-" で判定）
        suffixes: テーマキー → タイトル（名前の末尾 "-key" で判定）
    """

    def __init__(self, data: Mapping[str, object]) -> None:
        self.load(data)

    # ------------------------------------------------------------------
    # 読み込み
    # ------------------------------------------------------------------

    def load(self, data: Mapping[str, object]) -> None:
        """エクスポート形式の辞書からアイコンセットを読み込む.

        Args:
            data: アイコンセット JSON（エイリアスは正規化済みのオブジェクト形式）

        Raises:
            IconSetValidationError: prefix/icons/body などが不正な場合
        """
        if not isinstance(data, Mapping):
            raise IconSetValidationError("", None, "icon set data must be an object")

        prefix = data.get("prefix")
        if not isinstance(prefix, str):
            raise IconSetValidationError("", None, "missing 'prefix'")
        self.prefix = prefix

        # セット共通のデフォルト値（icons に畳み込み、以後の追加にも適用する）
        self.defaults = filter_props(
            {key: data.get(key) for key in DEFAULT_ICON_PROPS},
            compare_defaults=True,
            prefix=prefix,
        )

        icons = data.get("icons")
        if not isinstance(icons, Mapping):
            raise IconSetValidationError(prefix, None, "missing 'icons'")

        self.entries: dict[str, IconSetEntry] = {}
        for name, item in icons.items():
            self.entries[name] = self._make_icon(name, item)

        aliases = data.get("aliases") or {}
        if not isinstance(aliases, Mapping):
            raise IconSetValidationError(prefix, None, "'aliases' must be an object")
        for name, item in aliases.items():
            if name in self.entries:
                # 同名のアイコンが優先
                logger.debug(f"Ignoring alias '{name}' that duplicates an icon ({prefix})")
                continue
            if not isinstance(item, Mapping) or not isinstance(item.get("parent"), str):
                raise IconSetValidationError(prefix, name, "alias must be an object with 'parent'")
            self.entries[name] = AliasEntry(
                parent=item["parent"],
                props=filter_alias_props(item, prefix=prefix, name=name),
            )

        self.info = convert_icon_set_info(data.get("info"), prefix)

        # 文字マップ（存在しないエントリは無視）
        self.char_map: dict[str, str] = {}
        chars = data.get("chars") or {}
        if isinstance(chars, Mapping):
            for char, name in chars.items():
                if isinstance(name, str) and name in self.entries:
                    self.char_map[str(char)] = name

        # カテゴリ（実アイコン以外は無視、空カテゴリは削除）
        self.categories: dict[str, list[str]] = {}
        categories = data.get("categories") or {}
        if isinstance(categories, Mapping):
            for title, names in categories.items():
                if not isinstance(names, list):
                    continue
                members: list[str] = []
                for name in names:
                    if isinstance(self.entries.get(name), IconEntry) and name not in members:
                        members.append(name)
                if members:
                    self.categories[title] = members

        # テーマ（旧形式 themes → prefixes/suffixes、明示指定で上書き）
        self.prefixes: dict[str, str] = {}
        self.suffixes: dict[str, str] = {}
        themes = data.get("themes")
        if isinstance(themes, Mapping):
            for item in themes.values():
                if not isinstance(item, Mapping):
                    continue
                title = item.get("title")
                theme_prefix = item.get("prefix")
                if isinstance(theme_prefix, str) and theme_prefix.endswith("-"):
                    self.prefixes[theme_prefix[:-1]] = title
                theme_suffix = item.get("suffix")
                if isinstance(theme_suffix, str) and theme_suffix.startswith("-"):
                    self.suffixes[theme_suffix[1:]] = title
        for prop in THEME_KEYS:
            items = data.get(prop)
            if isinstance(items, Mapping):
                setattr(self, prop, dict(items))

        last_modified = data.get("lastModified")
        if last_modified is not None and (isinstance(last_modified, bool) or not isinstance(last_modified, int)):
            raise IconSetValidationError(prefix, None, f"'lastModified' must be an integer, got {last_modified!r}")
        self.last_modified: int | None = last_modified

    def _make_icon(self, name: str, item: object) -> IconEntry:
        if not isinstance(item, Mapping):
            raise IconSetValidationError(self.prefix, name, "icon must be an object")
        body = item.get("body")
        if not isinstance(body, str):
            raise IconSetValidationError(self.prefix, name, "missing 'body'")
        props = filter_props(
            {**self.defaults, **item},
            compare_defaults=True,
            prefix=self.prefix,
            name=name,
        )
        return IconEntry(body=body, props=props)

    # ------------------------------------------------------------------
    # 参照
    # ------------------------------------------------------------------

    def exists(self, name: str) -> bool:
        """エントリが存在するか確認する."""
        return name in self.entries

    def get_tree(self, names: Iterable[str] | None = None) -> ParentIconsTree:
        """各エントリの親リストを返す（resolve.get_tree 参照）."""
        return get_tree(self.entries, names)

    def resolve(self, name: str, full: bool = False) -> dict[str, object] | None:
        """エントリを解決する.

        Args:
            name: エントリ名
            full: True の場合はデフォルト値を含めた全プロパティを返す

        Returns:
            解決済みアイコンデータ。存在しない・循環している場合は None
        """
        return resolve_entry(self.entries, name, full)

    def is_visible(self, name: str) -> bool:
        """エントリが表示対象か判定する.

        自身が hidden でなく、チェーン末端の実アイコンも hidden でない場合に True。
        """
        chain = walk_chain(self.entries, name)
        if chain is None:
            return False
        return not self.entries[name].hidden and not self.entries[chain[-1]].hidden

    def list(self, types: Iterable[EntryKind] = ALL_ENTRY_KINDS) -> list[str]:
        """解決可能なエントリ名を列挙する（hidden を含む）.

        実アイコンを先に、エイリアスを後に、それぞれ追加順で返します。
        """
        kinds = set(types)
        tree = self.get_tree()
        icons: list[str] = []
        aliases: list[str] = []
        for name, item in self.entries.items():
            if item.kind not in kinds or tree.get(name) is None:
                continue
            (icons if isinstance(item, IconEntry) else aliases).append(name)
        return icons + aliases

    def count(self) -> int:
        """表示対象の実アイコン数を返す."""
        return sum(
            1 for item in self.entries.values() if isinstance(item, IconEntry) and not item.hidden
        )

    def _visible_names(self) -> list[str]:
        # アイコンと variation（単純エイリアスは除く）
        return [
            name
            for name, item in self.entries.items()
            if item.kind != "alias" and self.is_visible(name)
        ]

    # ------------------------------------------------------------------
    # 更新
    # ------------------------------------------------------------------

    def update_last_modified(self, value: int | None = None) -> None:
        """最終更新時刻を更新する.

        value 省略時は現在時刻。現在値より前には戻さない。
        """
        if value is not None:
            self.last_modified = value
            return
        now = _now()
        if self.last_modified is not None and now <= self.last_modified:
            now = self.last_modified + 1
        self.last_modified = now

    def set_item(self, name: str, item: IconSetEntry) -> bool:
        """エントリを追加/更新する.

        エイリアスの親が存在しない場合は何もせず False を返します。
        既存エントリと同一の場合は lastModified を更新しません。
        """
        if isinstance(item, AliasEntry) and (item.parent == name or item.parent not in self.entries):
            return False
        if self.entries.get(name) == item:
            return True
        self.entries[name] = item
        self.update_last_modified()
        return True

    def set_icon(self, name: str, icon: Mapping[str, object]) -> bool:
        """実アイコンを追加/更新する（同名エントリは種類を問わず上書き）.

        Raises:
            IconSetValidationError: body が無い、プロパティの型が不正な場合
        """
        return self.set_item(name, self._make_icon(name, icon))

    def set_alias(self, name: str, parent: str) -> bool:
        """変形なしのエイリアスを追加/更新する."""
        return self.set_item(name, AliasEntry(parent=parent))

    def set_variation(self, name: str, parent: str, props: Mapping[str, object]) -> bool:
        """変形付きエイリアス（variation）を追加/更新する."""
        alias_props = filter_alias_props(props, prefix=self.prefix, name=name)
        return self.set_item(name, AliasEntry(parent=parent, props=alias_props))

    def from_svg(self, name: str, svg: CleanedSVG) -> bool:
        """整形済み SVG から実アイコンを追加/更新する.

        既存エントリの文字マップ・カテゴリはそのまま残ります。
        """
        view_box = {key: svg.view_box.get(key) for key in DEFAULT_ICON_DIMENSIONS}
        return self.set_icon(name, {"body": svg.get_body(), **view_box})

    def _forget_names(self, names: Iterable[str]) -> None:
        removed = set(names)
        self.char_map = {char: name for char, name in self.char_map.items() if name not in removed}
        for title in list(self.categories):
            members = [name for name in self.categories[title] if name not in removed]
            if members:
                self.categories[title] = members
            else:
                del self.categories[title]

    def remove(self, name: str, dependencies: bool | str = True) -> int:
        """エントリを削除する.

        Args:
            name: 削除するエントリ名
            dependencies: True の場合、name を経由するエイリアスも連鎖的に削除する。
                False の場合は name のみ削除する。
                文字列の場合、name を直接参照するエイリアスをその実アイコンへ付け替えてから削除する

        Returns:
            削除したエントリ数
        """
        entries = self.entries

        if isinstance(dependencies, str):
            if dependencies == name or not isinstance(entries.get(dependencies), IconEntry):
                return 0

        if name not in entries:
            return 0

        if isinstance(dependencies, str):
            for item in entries.values():
                if isinstance(item, AliasEntry) and item.parent == name:
                    item.parent = dependencies

        del entries[name]
        removed = [name]

        if dependencies is True:
            children: dict[str, list[str]] = {}
            for key, item in entries.items():
                if isinstance(item, AliasEntry):
                    children.setdefault(item.parent, []).append(key)

            queue = [name]
            while queue:
                parent = queue.pop()
                for child in children.get(parent, []):
                    if child in entries:
                        del entries[child]
                        removed.append(child)
                        queue.append(child)

        self._forget_names(removed)
        self.update_last_modified()
        return len(removed)

    def rename(self, old_name: str, new_name: str) -> bool:
        """エントリをリネームする.

        old_name を参照するエイリアス、文字マップ、カテゴリは新しい名前に付け替えます。
        new_name が既に存在する場合は先に削除します（old_name が new_name に依存している
        場合は何もせず False）。
        """
        entries = self.entries
        if old_name not in entries or old_name == new_name:
            return False

        if new_name in entries:
            # 未解決のチェーンも含めて親を辿る（new_name に依存していれば拒否）
            current: str | None = old_name
            visited: set[str] = set()
            while current is not None and current not in visited:
                if current == new_name:
                    return False
                visited.add(current)
                item = entries.get(current)
                current = item.parent if isinstance(item, AliasEntry) else None
            self.remove(new_name)

        entries[new_name] = entries.pop(old_name)

        for item in entries.values():
            if isinstance(item, AliasEntry) and item.parent == old_name:
                item.parent = new_name

        for char, name in self.char_map.items():
            if name == old_name:
                self.char_map[char] = new_name
        for title, members in self.categories.items():
            self.categories[title] = [new_name if name == old_name else name for name in members]

        self.update_last_modified()
        return True

    # ------------------------------------------------------------------
    # 文字マップ / カテゴリ / テーマ
    # ------------------------------------------------------------------

    def chars(self, names: Iterable[str] | None = None) -> dict[str, str]:
        """文字マップを返す（names 指定時はその名前のみ、存在しない名前は除外）."""
        allowed = set(self.entries if names is None else names)
        return {
            char: name
            for char, name in sorted(self.char_map.items())
            if name in allowed and name in self.entries
        }

    def toggle_character(self, name: str, char: str, add: bool) -> bool:
        """エントリに文字を追加/削除する. 変更があった場合 True."""
        if name not in self.entries:
            return False
        if add:
            if self.char_map.get(char) == name:
                return False
            self.char_map[char] = name
            return True
        if self.char_map.get(char) != name:
            return False
        del self.char_map[char]
        return True

    def find_category(self, title: str, add: bool) -> list[str] | None:
        """カテゴリのメンバーリストを返す（add=True なら無い場合に作成）."""
        members = self.categories.get(title)
        if members is None and add:
            members = self.categories[title] = []
        return members

    def toggle_category(self, name: str, category: str, add: bool) -> bool:
        """実アイコンをカテゴリに追加/削除する. 変更があった場合 True."""
        if not isinstance(self.entries.get(name), IconEntry):
            return False
        members = self.find_category(category, add)
        if members is None or (name in members) == add:
            return False
        if add:
            members.append(name)
        else:
            members.remove(name)
            if not members:
                del self.categories[category]
        return True

    def list_category(self, category: str) -> list[str] | None:
        """カテゴリ内の表示対象アイコン名を返す（該当なしは None）."""
        members = self.categories.get(category)
        if not members:
            return None
        names = [
            name
            for name in members
            if isinstance(self.entries.get(name), IconEntry) and not self.entries[name].hidden
        ]
        return names or None

    def check_theme(self, prefix: bool) -> CheckThemeResult:
        """テーマごとに該当する表示対象アイコンを判定する.

        Args:
            prefix: True なら prefixes（"key-name"）、False なら suffixes（"name-key"）

        Returns:
            valid: テーマキー → 該当名、invalid: どのテーマにも該当しない名前
        """
        themes = self.prefixes if prefix else self.suffixes
        keys = sort_theme_keys(themes)
        result = CheckThemeResult(valid={key: [] for key in keys})

        for name in self._visible_names():
            for key in keys:
                if key == "":
                    # 空キーは他のテーマに該当しない全アイコンに該当
                    result.valid[key].append(name)
                    break
                if (prefix and name.startswith(key + "-")) or (not prefix and name.endswith("-" + key)):
                    result.valid[key].append(name)
                    break
            else:
                result.invalid.append(name)

        return result

    # ------------------------------------------------------------------
    # エクスポート
    # ------------------------------------------------------------------

    def export(self, validate: bool = True) -> dict[str, object]:
        """エクスポート形式の辞書を生成する.

        Args:
            validate: True の場合、解決できないエイリアス（親の欠落・循環）を除外する

        Returns:
            アイコンセット JSON 互換の辞書
        """
        tree = self.get_tree() if validate else None

        icons: dict[str, dict[str, object]] = {}
        aliases: dict[str, dict[str, object]] = {}
        dropped: list[str] = []
        for name in sorted(self.entries):
            item = self.entries[name]
            if isinstance(item, IconEntry):
                icons[name] = {"body": item.body, **_ordered_props(item.props)}
                continue
            if tree is not None and tree.get(name) is None:
                dropped.append(name)
                continue
            aliases[name] = {"parent": item.parent, **_ordered_props(item.props)}

        if dropped:
            logger.warning(
                f"Dropped {len(dropped)} unresolved alias(es) from '{self.prefix}': {', '.join(dropped)}"
            )

        root_defaults = _minify_icons(icons)

        result: dict[str, object] = {"prefix": self.prefix}
        if self.info:
            info = copy.deepcopy(self.info)
            info["total"] = self.count()
            result["info"] = info
        if self.last_modified is not None:
            result["lastModified"] = self.last_modified
        result.update(root_defaults)
        result["icons"] = icons
        if aliases:
            result["aliases"] = aliases

        chars = self.chars(list(icons) + list(aliases))
        if chars:
            result["chars"] = chars

        categories: dict[str, list[str]] = {}
        for title in sorted(self.categories):
            names = self.list_category(title)
            if names:
                categories[title] = sorted(names)
        if categories:
            result["categories"] = categories

        for prop in THEME_KEYS:
            items: dict[str, str] = getattr(self, prop)
            if not items:
                continue
            tested = self.check_theme(prop == "prefixes")
            themes = {key: title for key, title in items.items() if tested.valid[key]}
            if themes:
                result[prop] = themes

        return result


def _minify_icons(icons: dict[str, dict[str, object]]) -> dict[str, object]:
    """最頻値の寸法をセット共通のデフォルト値としてルートに移す.

    icons を直接書き換え、ルートに置く値を返します。
    """
    root: dict[str, object] = {}
    if not icons:
        return root

    for prop, default in DEFAULT_ICON_DIMENSIONS.items():
        counter = Counter(icon.get(prop, default) for icon in icons.values())
        best = max(counter.values())
        candidates = [value for value, count in counter.most_common() if count == best]
        value = default if default in candidates else candidates[0]
        if value == default:
            continue
        root[prop] = value
        for icon in icons.values():
            current = icon.get(prop, default)
            if current == value:
                icon.pop(prop, None)
            else:
                icon[prop] = current

    if root:
        for name, icon in icons.items():
            icons[name] = {"body": icon["body"], **_ordered_props(icon)}

    return root


def blank_icon_set(prefix: str) -> IconSet:
    """空のアイコンセットを作成する."""
    return IconSet({"prefix": prefix, "icons": {}})
