"""
[BK-T004] tests.unit.test_loader
로컬 디스크립터 로더 단위 테스트

version: 1.0.0
created: 2026-10-15
"""

import pytest

from bazaarkit.core.exceptions import PackageNotFoundError, PackageParseError
from bazaarkit.marketplace.loader import (
    icon_json,
    kind_root,
    load_package_json,
    plugin_json,
    theme_json,
)
from bazaarkit.marketplace.models import Icon, PackageType, Plugin, Theme


class TestKindRoot:  # [BK-T004.1]
    """kind_root() 테스트."""

    def test_roots(self, config):
        assert kind_root(PackageType.THEME, config) == config.conf_dir / "appearance" / "themes"
        assert kind_root(PackageType.ICON, config) == config.conf_dir / "appearance" / "icons"
        assert kind_root(PackageType.PLUGIN, config) == config.data_dir / "plugins"
        assert kind_root(PackageType.WIDGET, config) == config.data_dir / "widgets"
        assert kind_root(PackageType.TEMPLATE, config) == config.data_dir / "templates"


class TestLoadPackageJson:  # [BK-T004.2]
    """load_package_json() 테스트."""

    def test_plugin(self, config, descriptor):
        descriptor(
            config.data_dir / "plugins",
            "foo",
            "plugin.json",
            {
                "name": "foo",
                "author": "alice",
                "url": "https://github.com/alice/foo/",
                "version": "1.2.3",
                "minAppVersion": "2.10.0",
                "displayName": {"default": "Foo", "zh_CN": "福"},
                "keywords": ["a", "b"],
                "unknownField": 1,
            },
        )
        pkg = plugin_json("foo", config)
        assert isinstance(pkg, Plugin)
        assert pkg.url == "https://github.com/alice/foo"
        assert pkg.min_app_version == "2.10.0"
        assert pkg.display_name.zh_cn == "福"
        assert pkg.keywords == ["a", "b"]
        assert pkg.identity == ("https://github.com/alice/foo", "foo", "alice")

    def test_theme_and_icon_roots(self, config, descriptor):
        descriptor(config.themes_dir, "dark", "theme.json", {"name": "dark", "modes": ["dark"]})
        descriptor(config.icons_dir, "ant", "icon.json", {"name": "ant"})
        theme = theme_json("dark", config)
        assert isinstance(theme, Theme)
        assert theme.modes == ["dark"]
        assert isinstance(icon_json("ant", config), Icon)

    def test_not_found(self, config):
        with pytest.raises(PackageNotFoundError):
            load_package_json(PackageType.WIDGET, "missing", config)

    def test_not_found_is_file_not_found(self, config):
        with pytest.raises(FileNotFoundError):
            load_package_json(PackageType.WIDGET, "missing", config)

    def test_malformed_json(self, config):
        pkg_dir = config.data_dir / "templates" / "broken"
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "template.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(PackageParseError):
            load_package_json(PackageType.TEMPLATE, "broken", config)

    def test_wrong_shape(self, config, descriptor):
        descriptor(config.data_dir / "widgets", "w", "widget.json", {"keywords": "not-a-list"})
        with pytest.raises(PackageParseError):
            load_package_json(PackageType.WIDGET, "w", config)
