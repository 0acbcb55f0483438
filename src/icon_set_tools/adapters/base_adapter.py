"""アイコンセット入力アダプタ（基底クラス）.

各種入力（JSON ファイルなど）を共通インターフェースで扱うための抽象基底クラスを定義します。
コアはエイリアスを {"parent": ...} のオブジェクト形式でしか扱わないため、
旧形式の揺れはアダプタの repair() で吸収します。
"""

from abc import ABC, abstractmethod

from ..core.icon_set import IconSet

# エクスポート形式のトップレベルキー
STANDARD_KEYS = {
    "prefix": str,
    "lastModified": int | None,
    "icons": dict,
    "aliases": dict | None,
    "chars": dict | None,
    "categories": dict | None,
    "prefixes": dict | None,
    "suffixes": dict | None,
    "themes": dict | None,
    "info": dict | None,
}


class BaseAdapter(ABC):
    """入力ソースアダプタの基底クラス.

    全ての入力アダプタはこのクラスを継承し、read()/validate()/repair() を実装します。
    """

    @abstractmethod
    def read(self) -> dict:
        """入力を読み込み、アイコンセット JSON 互換の辞書に変換する.

        Raises:
            FileNotFoundError: ファイルが存在しない場合
            ValueError: データ形式が不正な場合
        """
        ...

    @abstractmethod
    def validate(self, data: dict) -> bool:
        """データ整合性を検証する."""
        ...

    @abstractmethod
    def repair(self, data: dict) -> dict:
        """旧形式のデータを正規化する（必要なら）."""
        ...

    def load(self) -> IconSet:
        """read → repair → IconSet の順で読み込む."""
        return self.to_icon_set(self.repair(self.read()))

    def to_icon_set(self, data: dict) -> IconSet:
        """repair 済みのデータを検証して IconSet を作る.

        Raises:
            ValueError: validate() が False を返した場合
            IconSetValidationError: アイコンセットとして不正な場合
        """
        if not self.validate(data):
            raise ValueError(f"Invalid icon set data: {self}")
        return IconSet(data)
