"""Icon set exceptions.

カスタム例外クラスを定義します。
"""


class IconSetError(Exception):
    """アイコンセット処理の基底例外."""


class IconSetValidationError(IconSetError, ValueError):
    """入力ドキュメントが不正でアイコンセットを構築できない場合の例外.

    body の欠落や数値でない寸法など、部分的なアイコンセットを安全に作れない
    入力はこの例外で呼び出し側へ返します。

    Attributes:
        prefix: 対象アイコンセットの prefix（不明な場合は空文字）
        name: 不正なエントリ名（ドキュメント全体の場合は None）
        reason: 不正内容
    """

    def __init__(self, prefix: str, name: str | None, reason: str) -> None:
        """例外初期化.

        Args:
            prefix: 対象アイコンセットの prefix
            name: 不正なエントリ名
            reason: 不正内容
        """
        self.prefix = prefix
        self.name = name
        self.reason = reason
        target = f"{prefix}:{name}" if name is not None else (prefix or "<unknown>")
        super().__init__(f"Invalid icon set data: {target} ({reason})")
