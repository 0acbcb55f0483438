"""アイコン/エイリアス共通プロパティのデフォルト値とフィルタ.

- 寸法（left/top/width/height）と変形（rotate/hFlip/vFlip）のデフォルト値
- 入力プロパティの検証とデフォルト値の除去
- エイリアスチェーン上での変形の合成
"""

from __future__ import annotations

from collections.abc import Mapping

from .exceptions import IconSetValidationError

DEFAULT_ICON_DIMENSIONS: dict[str, int] = {
    "left": 0,
    "top": 0,
    "width": 16,
    "height": 16,
}

DEFAULT_ICON_TRANSFORMATIONS: dict[str, int | bool] = {
    "rotate": 0,
    "hFlip": False,
    "vFlip": False,
}

# 描画結果に影響するプロパティ（content identity の比較対象）
DEFAULT_ICON_PROPS: dict[str, int | bool] = {
    **DEFAULT_ICON_DIMENSIONS,
    **DEFAULT_ICON_TRANSFORMATIONS,
}

# アイコンとエイリアスの共通プロパティ（hidden を含む）
DEFAULT_COMMON_PROPS: dict[str, int | bool] = {
    **DEFAULT_ICON_PROPS,
    "hidden": False,
}

_BOOL_PROPS = {"hFlip", "vFlip", "hidden"}


def _validate_value(prop: str, value: object, prefix: str, name: str | None) -> int | float | bool:
    if prop in _BOOL_PROPS:
        if not isinstance(value, bool):
            raise IconSetValidationError(prefix, name, f"'{prop}' must be boolean, got {value!r}")
        return value

    # bool は int のサブクラスなので先に除外する
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise IconSetValidationError(prefix, name, f"'{prop}' must be a number, got {value!r}")

    if prop == "rotate":
        if int(value) != value:
            raise IconSetValidationError(prefix, name, f"'rotate' must be an integer, got {value!r}")
        return int(value) % 4

    return value


def filter_props(
    data: Mapping[str, object],
    *,
    compare_defaults: bool,
    prefix: str = "",
    name: str | None = None,
) -> dict[str, int | float | bool]:
    """共通プロパティを抽出・検証する.

    None の値と未知のキーは無視します。

    Args:
        data: 入力データ（アイコン/エイリアス JSON など）
        compare_defaults: True の場合、デフォルト値と等しいプロパティを除去する
        prefix: エラーメッセージ用のアイコンセット prefix
        name: エラーメッセージ用のエントリ名

    Returns:
        検証済みプロパティ

    Raises:
        IconSetValidationError: 型が不正な場合
    """
    result: dict[str, int | float | bool] = {}
    for prop, default in DEFAULT_COMMON_PROPS.items():
        value = data.get(prop)
        if value is None:
            continue
        value = _validate_value(prop, value, prefix, name)
        if compare_defaults and value == default:
            continue
        result[prop] = value
    return result


def filter_alias_props(
    data: Mapping[str, object],
    *,
    prefix: str = "",
    name: str | None = None,
) -> dict[str, int | float | bool]:
    """エイリアスのプロパティを抽出する.

    変形（rotate/hFlip/vFlip）と hidden は差分なので、0/False は除去します。
    寸法は親の値を上書きする指定なので、デフォルト値と同じでも保持します。
    """
    props = filter_props(data, compare_defaults=False, prefix=prefix, name=name)
    for prop in ("rotate", "hFlip", "vFlip", "hidden"):
        if prop in props and props[prop] == DEFAULT_COMMON_PROPS[prop]:
            del props[prop]
    return props


def merge_icon_props(
    parent: Mapping[str, int | float | bool],
    child: Mapping[str, int | float | bool],
) -> dict[str, int | float | bool]:
    """親の解決済みプロパティにエイリアスの差分を合成する.

    - rotate: (親 + 子) mod 4
    - hFlip/vFlip: XOR
    - 寸法: 子の指定で上書き
    - hidden: 子自身の値（親の hidden は引き継がない）

    Examples:
        >>> merge_icon_props({"rotate": 3, "hFlip": True}, {"rotate": 2, "hFlip": True})
        {'rotate': 1}
    """
    result = {key: value for key, value in parent.items() if key != "hidden"}

    for prop in DEFAULT_ICON_DIMENSIONS:
        if prop in child:
            result[prop] = child[prop]

    rotate = (int(parent.get("rotate", 0)) + int(child.get("rotate", 0))) % 4
    if rotate:
        result["rotate"] = rotate
    else:
        result.pop("rotate", None)

    for prop in ("hFlip", "vFlip"):
        value = bool(parent.get(prop, False)) != bool(child.get(prop, False))
        if value:
            result[prop] = True
        else:
            result.pop(prop, None)

    if child.get("hidden"):
        result["hidden"] = True

    return result


def full_props(props: Mapping[str, int | float | bool]) -> dict[str, int | float | bool]:
    """デフォルト値で補完した完全なプロパティを返す."""
    return {**DEFAULT_COMMON_PROPS, **props}


def strip_default_props(props: Mapping[str, int | float | bool]) -> dict[str, int | float | bool]:
    """デフォルト値と等しいプロパティを除去する."""
    return {
        key: value
        for key, value in props.items()
        if key not in DEFAULT_COMMON_PROPS or value != DEFAULT_COMMON_PROPS[key]
    }
