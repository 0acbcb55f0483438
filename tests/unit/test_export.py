"""Unit tests for icon set export."""

import json
from unittest.mock import patch

from icon_set_tools.core.icon_set import IconSet


def _sample_data() -> dict:
    return {
        "prefix": "foo",
        "lastModified": 12345,
        "icons": {
            "baz": {"body": '<g id="baz" />', "width": 24, "height": 24, "hidden": True},
            "bar": {"body": '<g id="bar" />', "width": 16, "height": 16},
        },
        "aliases": {
            "variation1": {"parent": "baz", "hFlip": True},
            "alias1": {"parent": "bar"},
            "invalid": {"parent": "missing"},
        },
        "chars": {
            "f00": "bar",
            "f01": "baz",
            "f02": "alias1",
            "f03": "variation1",
            "f04": "invalid",
        },
        "categories": {
            "To Rename": ["baz"],
            "Other": ["bar"],
        },
    }


def _sized_data() -> dict:
    return {
        "prefix": "sized",
        "icons": {
            "d": {"body": "<d />"},
            "c": {"body": "<c />", "width": 24, "height": 24, "rotate": 1},
            "b": {"body": "<b />", "width": 24, "height": 24},
            "a": {"body": "<a />", "width": 24, "height": 24},
        },
    }


class TestExport:
    """export() のテスト."""

    def test_export(self) -> None:
        """名前順に並び、未解決エイリアスと関連データを除外する."""
        icon_set = IconSet(_sample_data())

        with patch("icon_set_tools.core.icon_set.logger.warning") as mock_warning:
            result = icon_set.export()

        assert result == {
            "prefix": "foo",
            "lastModified": 12345,
            "icons": {
                "bar": {"body": '<g id="bar" />'},
                "baz": {"body": '<g id="baz" />', "width": 24, "height": 24, "hidden": True},
            },
            "aliases": {
                "alias1": {"parent": "bar"},
                "variation1": {"parent": "baz", "hFlip": True},
            },
            "chars": {
                "f00": "bar",
                "f01": "baz",
                "f02": "alias1",
                "f03": "variation1",
            },
            # hidden アイコンのみのカテゴリは出力しない
            "categories": {"Other": ["bar"]},
        }
        assert list(result) == ["prefix", "lastModified", "icons", "aliases", "chars", "categories"]
        assert list(result["icons"]) == ["bar", "baz"]
        assert list(result["aliases"]) == ["alias1", "variation1"]
        mock_warning.assert_called_once()
        assert "invalid" in mock_warning.call_args[0][0]

    def test_export_without_validation(self) -> None:
        """validate=False では未解決エイリアスも出力する."""
        result = IconSet(_sample_data()).export(validate=False)

        assert result["aliases"]["invalid"] == {"parent": "missing"}
        assert result["chars"]["f04"] == "invalid"

    def test_export_does_not_modify_icon_set(self) -> None:
        """エクスポートしてもエントリは変わらない."""
        icon_set = IconSet(_sample_data())
        icon_set.export()

        assert icon_set.exists("invalid") is True
        assert icon_set.last_modified == 12345

    def test_blank_icon_set(self) -> None:
        result = IconSet({"prefix": "empty", "icons": {}}).export()

        assert result == {"prefix": "empty", "icons": {}}


class TestRoundTrip:
    """再読み込み → 再エクスポートのテスト."""

    def test_idempotent(self) -> None:
        """2回目以降のエクスポートはバイト単位で同一."""
        first = IconSet(_sample_data()).export()

        with patch("icon_set_tools.core.icon_set.logger.warning") as mock_warning:
            second = IconSet(first).export()

        # 未解決エイリアスは1回目で除外済み
        mock_warning.assert_not_called()
        assert json.dumps(second) == json.dumps(first)
        assert json.dumps(IconSet(second).export()) == json.dumps(second)

    def test_idempotent_with_root_dimensions(self) -> None:
        """ルートに移した寸法も再読み込みで同じ結果になる."""
        first = IconSet(_sized_data()).export()
        second = IconSet(first).export()

        assert json.dumps(second) == json.dumps(first)

    def test_resolution_survives_round_trip(self) -> None:
        """再読み込み後も解決結果は変わらない."""
        icon_set = IconSet(_sized_data())
        reloaded = IconSet(icon_set.export())

        for name in icon_set.list():
            assert reloaded.resolve(name, full=True) == icon_set.resolve(name, full=True)


class TestMinify:
    """寸法のルートへの集約のテスト."""

    def test_most_common_dimensions(self) -> None:
        """最頻値をルートに移し、異なる値のアイコンは明示する."""
        result = IconSet(_sized_data()).export()

        assert result == {
            "prefix": "sized",
            "width": 24,
            "height": 24,
            "icons": {
                "a": {"body": "<a />"},
                "b": {"body": "<b />"},
                "c": {"body": "<c />", "rotate": 1},
                "d": {"body": "<d />", "width": 16, "height": 16},
            },
        }
        assert list(result) == ["prefix", "width", "height", "icons"]

    def test_tie_keeps_default(self) -> None:
        """同数の場合はデフォルト値を維持する."""
        result = IconSet(
            {
                "prefix": "foo",
                "icons": {
                    "x": {"body": "<x />", "left": -2},
                    "y": {"body": "<y />"},
                },
            }
        ).export()

        assert "left" not in result
        assert result["icons"] == {"x": {"body": "<x />", "left": -2}, "y": {"body": "<y />"}}


class TestInfo:
    """info の出力テスト."""

    def test_total_is_recalculated(self) -> None:
        """total は表示対象アイコン数で上書きし、旧形式は変換して出力する."""
        data = _sample_data()
        data["info"] = {
            "name": "Foo Icons",
            "author": "Jane",
            "url": "https://example.com/foo",
            "license": "MIT",
            "licenseID": "MIT",
            "total": 999,
        }
        icon_set = IconSet(data)
        result = icon_set.export()

        assert result["info"] == {
            "name": "Foo Icons",
            "author": {"name": "Jane", "url": "https://example.com/foo"},
            "license": {"title": "MIT", "spdx": "MIT"},
            "total": 1,
        }
        assert list(result)[:3] == ["prefix", "info", "lastModified"]
        # 元の info は変更しない
        assert icon_set.info["total"] == 999


class TestThemes:
    """テーマの判定と出力のテスト."""

    def _themed_icon_set(self) -> IconSet:
        return IconSet(
            {
                "prefix": "themed",
                "icons": {
                    "home": {"body": "<g id='home' />"},
                    "home-outline": {"body": "<g id='home-outline' />"},
                    "home-twotone": {"body": "<g id='home-twotone' />", "hidden": True},
                },
                "aliases": {"house": {"parent": "home"}},
                "suffixes": {
                    "outline": "Outline",
                    "twotone": "Two Tone",
                    "solid": "Solid",
                    "": "Regular",
                },
            }
        )

    def test_check_theme(self) -> None:
        """hidden アイコンと単純エイリアスは判定対象外、空キーは残り全てに該当."""
        result = self._themed_icon_set().check_theme(False)

        assert result.valid == {
            "outline": ["home-outline"],
            "twotone": [],
            "solid": [],
            "": ["home"],
        }
        assert result.invalid == []

    def test_check_theme_without_fallback(self) -> None:
        icon_set = self._themed_icon_set()
        del icon_set.suffixes[""]

        result = icon_set.check_theme(False)
        assert result.invalid == ["home"]

    def test_export_drops_unused_themes(self) -> None:
        """該当アイコンの無いテーマは出力しない."""
        result = self._themed_icon_set().export()

        assert result["suffixes"] == {"outline": "Outline", "": "Regular"}
        assert "prefixes" not in result
