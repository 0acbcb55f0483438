"""アイコンセットのエントリ型."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

EntryKind = Literal["icon", "variation", "alias"]

ALL_ENTRY_KINDS: tuple[EntryKind, ...] = ("icon", "variation", "alias")


@dataclass
class IconEntry:
    """実アイコン（マークアップ本体を持つエントリ）.

    props はグローバルデフォルトと等しい値を除去した状態で保持します。
    """

    body: str
    props: dict[str, int | float | bool] = field(default_factory=dict)

    @property
    def kind(self) -> EntryKind:
        return "icon"

    @property
    def hidden(self) -> bool:
        return bool(self.props.get("hidden", False))


@dataclass
class AliasEntry:
    """エイリアス（親エントリに対する差分変形のみを持つエントリ).

    props に rotate/flip/寸法のいずれかがあれば variation として扱います。
    """

    parent: str
    props: dict[str, int | float | bool] = field(default_factory=dict)

    @property
    def kind(self) -> EntryKind:
        if any(key != "hidden" for key in self.props):
            return "variation"
        return "alias"

    @property
    def hidden(self) -> bool:
        return bool(self.props.get("hidden", False))


IconSetEntry = IconEntry | AliasEntry


@dataclass
class CheckThemeResult:
    """テーマ判定結果.

    Attributes:
        valid: テーマキー → 該当アイコン名リスト
        invalid: どのテーマにも該当しないアイコン名リスト
    """

    valid: dict[str, list[str]] = field(default_factory=dict)
    invalid: list[str] = field(default_factory=list)
