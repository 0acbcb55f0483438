"""アイコンセットのメタデータ生成.

アイコン数・エイリアス数・カテゴリ・テーマなどの統計情報を JSON として出力します。
"""

from __future__ import annotations

import argparse
import json
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from icon_set_tools.adapters.json_adapter import IconSetJSONAdapter


def generate_metadata(
    icon_set_path: Path | str,
    output_path: Path | str,
) -> dict:
    """アイコンセットのメタデータを生成する.

    Args:
        icon_set_path: アイコンセット JSON のパス
        output_path: メタデータ JSON の出力パス

    Returns:
        メタデータ辞書
    """
    icon_set_path = Path(icon_set_path)
    output_path = Path(output_path)

    logger.info(f"Generating metadata for {icon_set_path}")

    icon_set = IconSetJSONAdapter(icon_set_path).load()

    icons = icon_set.list(["icon"])
    variations = icon_set.list(["variation"])
    aliases = icon_set.list(["alias"])
    hidden = [name for name in icons + variations + aliases if not icon_set.is_visible(name)]

    metadata = {
        "prefix": icon_set.prefix,
        "generated_at": datetime.now(UTC).isoformat(),
        "last_modified": icon_set.last_modified,
        "statistics": {
            "total": icon_set.count(),
            "icons": len(icons),
            "variations": len(variations),
            "aliases": len(aliases),
            "hidden": len(hidden),
            "unresolved": len(icon_set.entries) - len(icons) - len(variations) - len(aliases),
            "characters": len(icon_set.chars()),
        },
        "categories": {
            title: len(icon_set.list_category(title) or []) for title in sorted(icon_set.categories)
        },
        "themes": {
            "prefixes": dict(icon_set.prefixes),
            "suffixes": dict(icon_set.suffixes),
        },
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(metadata, f, indent=2, ensure_ascii=False)

    logger.info(f"Metadata written to {output_path}")
    logger.info(f"Total icons: {metadata['statistics']['total']:,}")

    return metadata


def main() -> None:
    """CLI エントリポイント."""
    parser = argparse.ArgumentParser(description="Generate icon set metadata")
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Path to the icon set JSON",
    )
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Output path for metadata JSON",
    )

    args = parser.parse_args()

    generate_metadata(
        icon_set_path=args.input,
        output_path=args.output,
    )


if __name__ == "__main__":
    main()
