"""
[BK-M001] bazaarkit.marketplace.installer
패키지 설치/삭제 - 임시 영역에서 압축 해제 후 설치 디렉토리 교체

version: 1.0.0
created: 2026-10-13
modified: 2026-10-17
"""

from __future__ import annotations

import os
import secrets
import shutil
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from bazaarkit.core.exceptions import PackageInstallError, PackageUninstallError
from bazaarkit.marketplace.repo_ref import strip_host

if TYPE_CHECKING:
    from bazaarkit.marketplace.cache import TTLCache

logger = structlog.get_logger()


def install_package(  # [BK-M001.1]
    data: bytes,
    install_path: Path,
    repo_url_hash: str,
    temp_dir: Path,
    package_cache: TTLCache | None = None,
) -> None:
    """내려받은 아카이브를 설치하고 패키지 캐시 항목을 무효화합니다."""
    install_archive(data, install_path, temp_dir)
    if package_cache is not None:
        package_cache.delete(strip_host(repo_url_hash))
    logger.info("package_installed", repo=repo_url_hash, dir=install_path.name)


def install_archive(data: bytes, install_path: Path, temp_dir: Path) -> None:  # [BK-M001.2]
    """아카이브를 temp_dir에 풀고 install_path를 통째로 교체합니다.

    설치 디렉토리를 건드리는 것은 마지막 교체 단계뿐이며, 그 전 단계의
    실패는 임시 영역에만 흔적을 남깁니다.

    Raises:
        PackageInstallError: 쓰기/압축 해제/복사 실패
    """
    name = secrets.token_hex(4)
    archive = temp_dir / f"{name}.zip"
    unzip_dir = temp_dir / name

    try:
        temp_dir.mkdir(parents=True, exist_ok=True)
        archive.write_bytes(data)
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(unzip_dir)
        src = unwrap_root(unzip_dir)
        replace_tree(src, install_path)
    except (OSError, zipfile.BadZipFile, NotImplementedError, RuntimeError, EOFError) as e:
        logger.error("package_install_failed", dir=str(install_path), error=str(e))
        msg = f"패키지 설치 실패 [{install_path.name}]"
        raise PackageInstallError(msg) from e
    finally:
        archive.unlink(missing_ok=True)
        shutil.rmtree(unzip_dir, ignore_errors=True)


def unwrap_root(unzip_dir: Path) -> Path:  # [BK-M001.3]
    """아카이브 루트에 디렉토리 하나만 있으면 그 디렉토리를 실제 루트로 봅니다."""
    entries = list(unzip_dir.iterdir()) if unzip_dir.exists() else []
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return unzip_dir


def replace_tree(src: Path, dst: Path) -> None:  # [BK-M001.4]
    """src 트리를 dst 옆 스테이징 디렉토리로 복사한 뒤 이름 바꾸기로 교체합니다."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    token = secrets.token_hex(4)
    staging = dst.with_name(f".{dst.name}.{token}.new")
    backup = dst.with_name(f".{dst.name}.{token}.old")

    try:
        shutil.copytree(src, staging)
    except OSError:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    had_old = dst.exists()
    if had_old:
        os.replace(dst, backup)
    try:
        os.replace(staging, dst)
    except OSError:
        if had_old:
            os.replace(backup, dst)
        shutil.rmtree(staging, ignore_errors=True)
        raise

    if had_old:
        shutil.rmtree(backup, ignore_errors=True)


def uninstall_package(install_path: Path, package_cache: TTLCache | None = None) -> None:  # [BK-M001.5]
    """설치 디렉토리를 삭제하고 패키지 캐시 전체를 비웁니다.

    Raises:
        PackageUninstallError: 삭제 실패 (메시지에는 디렉토리 이름만 노출)
    """
    try:
        if install_path.exists():
            shutil.rmtree(install_path)
    except OSError as e:
        logger.error("package_uninstall_failed", path=str(install_path), error=str(e))
        msg = f"커뮤니티 패키지 [{install_path.name}] 삭제 실패"
        raise PackageUninstallError(msg) from e

    if package_cache is not None:
        package_cache.flush()
    logger.info("package_uninstalled", dir=install_path.name)
