"""アイコンセット情報ブロック（info）の変換.

旧形式（author/license が文字列、licenseID/licenseURL などのフラットなキー）を
現行形式に寄せます。
"""

from __future__ import annotations

from collections.abc import Mapping

from loguru import logger

_PALETTE_STRINGS = {
    "colorless": False,
    "colorful": True,
}


def _as_str(value: object) -> str | None:
    if isinstance(value, str):
        return value
    return None


def _as_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def convert_icon_set_info(data: object, expected_prefix: str = "") -> dict[str, object] | None:
    """info ブロックを現行形式に変換する.

    Args:
        data: 入力 info（dict 以外は None 扱い）
        expected_prefix: ログ用のアイコンセット prefix

    Returns:
        変換済み info。name が無い場合は None
    """
    if not isinstance(data, Mapping):
        return None

    name = _as_str(data.get("name"))
    if not name:
        logger.warning(f"Ignoring info block without name (prefix: {expected_prefix})")
        return None

    info: dict[str, object] = {"name": name}

    # author: {name, url} または旧形式の文字列 + url
    author_raw = data.get("author")
    author: dict[str, str] = {}
    if isinstance(author_raw, Mapping):
        author["name"] = _as_str(author_raw.get("name")) or ""
        url = _as_str(author_raw.get("url"))
        if url:
            author["url"] = url
    else:
        author["name"] = _as_str(author_raw) or ""
        url = _as_str(data.get("url"))
        if url:
            author["url"] = url
    info["author"] = author

    # license: {title, spdx, url} または旧形式
    license_raw = data.get("license")
    license_info: dict[str, str] = {}
    if isinstance(license_raw, Mapping):
        license_info["title"] = _as_str(license_raw.get("title")) or ""
        for key in ("spdx", "url"):
            value = _as_str(license_raw.get(key))
            if value:
                license_info[key] = value
    else:
        license_info["title"] = _as_str(license_raw) or ""
        spdx = _as_str(data.get("licenseSPDX")) or _as_str(data.get("licenseID"))
        if spdx:
            license_info["spdx"] = spdx
        url = _as_str(data.get("licenseURL"))
        if url:
            license_info["url"] = url
    info["license"] = license_info

    version = _as_str(data.get("version"))
    if version:
        info["version"] = version

    # height: 数値または数値リスト
    height = data.get("height")
    if isinstance(height, list):
        heights = [h for h in (_as_int(v) for v in height) if h is not None]
        if heights:
            info["height"] = heights[0] if len(heights) == 1 else heights
    else:
        parsed = _as_int(height)
        if parsed is not None:
            info["height"] = parsed

    display_height = _as_int(data.get("displayHeight"))
    if display_height is not None:
        info["displayHeight"] = display_height

    category = _as_str(data.get("category"))
    if category:
        info["category"] = category

    palette = data.get("palette")
    if isinstance(palette, bool):
        info["palette"] = palette
    elif isinstance(palette, str):
        converted = _PALETTE_STRINGS.get(palette.lower())
        if converted is not None:
            info["palette"] = converted
        else:
            logger.warning(f"Unknown palette value '{palette}' (prefix: {expected_prefix})")

    samples = data.get("samples")
    if isinstance(samples, list):
        sample_names = [s for s in samples if isinstance(s, str)]
        if sample_names:
            info["samples"] = sample_names

    total = _as_int(data.get("total"))
    if total is not None:
        info["total"] = total

    return info
