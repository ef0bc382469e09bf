"""
[BK-T009] tests.unit.test_installer
설치/삭제 파이프라인 단위 테스트

version: 1.0.0
created: 2026-10-16
"""

from unittest.mock import patch

import pytest

from bazaarkit.core.exceptions import PackageInstallError, PackageUninstallError
from bazaarkit.marketplace.cache import TTLCache
from bazaarkit.marketplace.installer import (
    install_archive,
    install_package,
    uninstall_package,
    unwrap_root,
)


@pytest.fixture
def package_cache(clock) -> TTLCache:
    return TTLCache(ttl=3600, sweep_interval=600, clock=clock)


class TestInstall:  # [BK-T009.1]
    """install_package() / install_archive() 테스트."""

    def test_single_wrapper_dir_is_stripped(self, tmp_path, zip_bytes):
        data = zip_bytes({"pkg/plugin.json": "{}", "pkg/index.js": "x"})
        dest = tmp_path / "plugins" / "foo"
        install_archive(data, dest, tmp_path / "temp")
        assert (dest / "plugin.json").is_file()
        assert (dest / "index.js").is_file()
        assert not (dest / "pkg").exists()

    def test_multiple_root_entries_preserved(self, tmp_path, zip_bytes):
        data = zip_bytes({"plugin.json": "{}", "dist/index.js": "x"})
        dest = tmp_path / "plugins" / "foo"
        install_archive(data, dest, tmp_path / "temp")
        assert (dest / "plugin.json").is_file()
        assert (dest / "dist" / "index.js").is_file()

    def test_single_root_file_not_unwrapped(self, tmp_path, zip_bytes):
        data = zip_bytes({"plugin.json": "{}"})
        dest = tmp_path / "plugins" / "foo"
        install_archive(data, dest, tmp_path / "temp")
        assert (dest / "plugin.json").is_file()

    def test_replaces_existing_install(self, tmp_path, zip_bytes):
        dest = tmp_path / "plugins" / "foo"
        dest.mkdir(parents=True)
        (dest / "stale.txt").write_text("old")
        install_archive(zip_bytes({"pkg/plugin.json": "{}"}), dest, tmp_path / "temp")
        assert (dest / "plugin.json").is_file()
        assert not (dest / "stale.txt").exists()
        assert sorted(p.name for p in dest.parent.iterdir()) == ["foo"]

    def test_temp_area_cleaned(self, tmp_path, zip_bytes):
        temp = tmp_path / "temp"
        install_archive(zip_bytes({"a.txt": "a"}), tmp_path / "dest", temp)
        assert list(temp.iterdir()) == []

    def test_bad_archive_leaves_destination_untouched(self, tmp_path):
        dest = tmp_path / "plugins" / "foo"
        dest.mkdir(parents=True)
        (dest / "plugin.json").write_text("{\"version\": \"1.0.0\"}")
        with pytest.raises(PackageInstallError):
            install_archive(b"not a zip", dest, tmp_path / "temp")
        assert (dest / "plugin.json").read_text() == "{\"version\": \"1.0.0\"}"

    def test_copy_failure_leaves_destination_untouched(self, tmp_path, zip_bytes):
        dest = tmp_path / "plugins" / "foo"
        dest.mkdir(parents=True)
        (dest / "keep.txt").write_text("keep")
        with (
            patch("bazaarkit.marketplace.installer.shutil.copytree", side_effect=OSError("disk")),
            pytest.raises(PackageInstallError) as exc_info,
        ):
            install_archive(zip_bytes({"a.txt": "a"}), dest, tmp_path / "temp")
        assert (dest / "keep.txt").read_text() == "keep"
        assert "foo" in str(exc_info.value)

    @pytest.mark.parametrize(
        "error",
        [
            NotImplementedError("That compression method is not supported"),
            RuntimeError("File is encrypted, password required for extraction"),
            EOFError(),
        ],
    )
    def test_unreadable_archive_entry_is_install_error(self, tmp_path, zip_bytes, error):
        dest = tmp_path / "plugins" / "foo"
        with (
            patch("bazaarkit.marketplace.installer.zipfile.ZipFile.extractall", side_effect=error),
            pytest.raises(PackageInstallError) as exc_info,
        ):
            install_archive(zip_bytes({"a.txt": "a"}), dest, tmp_path / "temp")
        assert "foo" in str(exc_info.value)
        assert not dest.exists()

    def test_unsupported_compression_method(self, tmp_path, zip_bytes):
        data = bytearray(zip_bytes({"a.txt": "a"}))
        # 로컬 헤더(오프셋 8)와 중앙 디렉토리 항목(오프셋 10)의 압축 방식을 99 로 변경
        central = data.rfind(b"PK\x01\x02")
        data[8:10] = (99).to_bytes(2, "little")
        data[central + 10 : central + 12] = (99).to_bytes(2, "little")
        with pytest.raises(PackageInstallError):
            install_archive(bytes(data), tmp_path / "dest", tmp_path / "temp")

    def test_invalidates_package_cache_entry(self, tmp_path, zip_bytes, package_cache):
        package_cache.put("alice/foo@abc", "pkg")
        package_cache.put("bob/bar@def", "other")
        install_package(
            zip_bytes({"plugin.json": "{}"}),
            tmp_path / "plugins" / "foo",
            "https://github.com/alice/foo@abc",
            tmp_path / "temp",
            package_cache,
        )
        assert package_cache.get("alice/foo@abc") is None
        assert package_cache.get("bob/bar@def") == "other"

    def test_failure_keeps_package_cache(self, tmp_path, package_cache):
        package_cache.put("alice/foo@abc", "pkg")
        with pytest.raises(PackageInstallError):
            install_package(b"junk", tmp_path / "x", "alice/foo@abc", tmp_path / "temp", package_cache)
        assert package_cache.get("alice/foo@abc") == "pkg"

    def test_unwrap_root(self, tmp_path):
        (tmp_path / "only").mkdir()
        assert unwrap_root(tmp_path) == tmp_path / "only"
        (tmp_path / "second.txt").write_text("")
        assert unwrap_root(tmp_path) == tmp_path


class TestUninstall:  # [BK-T009.2]
    """uninstall_package() 테스트."""

    def test_removes_directory_and_flushes_cache(self, tmp_path, package_cache):
        dest = tmp_path / "plugins" / "foo"
        (dest / "sub").mkdir(parents=True)
        (dest / "sub" / "a.txt").write_text("a")
        package_cache.put("a", 1)
        package_cache.put("b", 2)
        uninstall_package(dest, package_cache)
        assert not dest.exists()
        assert len(package_cache) == 0

    def test_missing_directory_is_ok(self, tmp_path, package_cache):
        uninstall_package(tmp_path / "nothing", package_cache)

    def test_failure_message_has_only_base_name(self, tmp_path):
        dest = tmp_path / "secret" / "path" / "foo"
        dest.mkdir(parents=True)
        with (
            patch("bazaarkit.marketplace.installer.shutil.rmtree", side_effect=OSError("denied")),
            pytest.raises(PackageUninstallError) as exc_info,
        ):
            uninstall_package(dest)
        message = str(exc_info.value)
        assert "[foo]" in message
        assert "secret" not in message
