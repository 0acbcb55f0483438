"""Unit tests for JSON adapter."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from icon_set_tools.adapters.json_adapter import IconSetJSONAdapter
from icon_set_tools.core.exceptions import IconSetValidationError


def _write_json(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestIconSetJSONAdapter:
    """IconSetJSONAdapterのテスト."""

    def test_init_with_nonexistent_file(self, tmp_path: Path) -> None:
        """存在しないファイルでの初期化."""
        with pytest.raises(FileNotFoundError):
            IconSetJSONAdapter(tmp_path / "nonexistent.json")

    def test_load_icon_set(self, tmp_path: Path) -> None:
        """アイコンセットJSONの読み込み."""
        json_path = _write_json(
            tmp_path / "foo.json",
            {
                "prefix": "foo",
                "lastModified": 100,
                "icons": {"bar": {"body": "<g />"}},
                "aliases": {"baz": {"parent": "bar"}},
            },
        )

        icon_set = IconSetJSONAdapter(json_path).load()

        assert icon_set.prefix == "foo"
        assert icon_set.last_modified == 100
        assert icon_set.list() == ["bar", "baz"]

    def test_read_invalid_json(self, tmp_path: Path) -> None:
        """JSONとして読めない場合はValueError."""
        json_path = tmp_path / "broken.json"
        json_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError, match="Failed to read JSON"):
            IconSetJSONAdapter(json_path).read()

    def test_read_non_object_root(self, tmp_path: Path) -> None:
        """ルートがオブジェクトでない場合はValueError."""
        json_path = _write_json(tmp_path / "list.json", [{"prefix": "foo"}])

        with pytest.raises(ValueError, match="must contain an object"):
            IconSetJSONAdapter(json_path).read()

    def test_repair_legacy_aliases(self, tmp_path: Path) -> None:
        """文字列形式のエイリアスを正規化し、不正なものは捨てる."""
        json_path = _write_json(
            tmp_path / "legacy.json",
            {
                "prefix": "foo",
                "icons": {"bar": {"body": "<g />"}},
                "aliases": {"baz": "bar", "rotated": {"parent": "bar", "rotate": 1}, "broken": 42},
            },
        )
        adapter = IconSetJSONAdapter(json_path)

        with patch("icon_set_tools.adapters.json_adapter.logger.warning") as mock_warning:
            repaired = adapter.repair(adapter.read())

        assert repaired["aliases"] == {
            "baz": {"parent": "bar"},
            "rotated": {"parent": "bar", "rotate": 1},
        }
        mock_warning.assert_called_once()
        assert "broken" in mock_warning.call_args[0][0]

        icon_set = adapter.load()
        assert icon_set.resolve("baz") == {"body": "<g />"}
        assert icon_set.exists("broken") is False

    @pytest.mark.parametrize(
        "data",
        [
            {"prefix": 1, "icons": {}},
            {"prefix": "foo", "icons": []},
            {"prefix": "foo", "icons": {}, "lastModified": "yesterday"},
            {"prefix": "foo", "icons": {}, "chars": ["e000"]},
        ],
    )
    def test_validate_key_types(self, tmp_path: Path, data: dict) -> None:
        """トップレベルキーの型が不正な場合は読み込まない."""
        json_path = _write_json(tmp_path / "bad.json", data)
        adapter = IconSetJSONAdapter(json_path)

        assert adapter.validate(data) is False
        with pytest.raises(ValueError, match="Invalid icon set data"):
            adapter.load()

    def test_malformed_icon(self, tmp_path: Path) -> None:
        """body の無いアイコンは IconSetValidationError."""
        json_path = _write_json(tmp_path / "foo.json", {"prefix": "foo", "icons": {"bar": {"width": 24}}})

        with pytest.raises(IconSetValidationError):
            IconSetJSONAdapter(json_path).load()

    def test_str(self, tmp_path: Path) -> None:
        json_path = _write_json(tmp_path / "foo.json", {"prefix": "foo", "icons": {}})

        assert str(IconSetJSONAdapter(json_path)) == str(json_path)
