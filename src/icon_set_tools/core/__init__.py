"""アイコンセットのコア処理群.

- エントリ管理（アイコン/エイリアスの追加・削除・リネーム）
- エイリアス解決（循環・長いチェーンに耐える）
- エクスポート（検証・メタデータの整理）
- 内容ベースの変更判定とマージ
"""

from .diff import diff_icon_sets, summarize_changes
from .entries import AliasEntry, CheckThemeResult, IconEntry
from .exceptions import IconSetError, IconSetValidationError
from .icon_set import IconSet, blank_icon_set, sort_theme_keys
from .match import content_key, find_matching_icon
from .merge import merge_icon_sets
from .modified import has_icon_data_been_modified

__all__ = [
    "IconSet",
    "IconEntry",
    "AliasEntry",
    "CheckThemeResult",
    "IconSetError",
    "IconSetValidationError",
    "blank_icon_set",
    "sort_theme_keys",
    "content_key",
    "find_matching_icon",
    "has_icon_data_been_modified",
    "merge_icon_sets",
    "diff_icon_sets",
    "summarize_changes",
]
