"""
[BK-M012] bazaarkit.marketplace.manager
마켓플레이스 패키지 매니저 - 카탈로그/설치 목록/설치/삭제/README

version: 1.0.0
created: 2026-10-14
modified: 2026-10-18
dependencies: httpx>=0.28.1
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic import ValidationError

from bazaarkit import __version__
from bazaarkit.core.config import BazaarConfig
from bazaarkit.core.exceptions import (
    BazaarError,
    PackageInstallError,
    PackageNotFoundError,
    PackageParseError,
    PackageUninstallError,
)
from bazaarkit.marketplace.cache import TTLCache
from bazaarkit.marketplace.downloader import PackageDownloader, ProgressCallback
from bazaarkit.marketplace.installer import install_package, uninstall_package
from bazaarkit.marketplace.loader import kind_root, load_package_json
from bazaarkit.marketplace.locale import preferred_desc, preferred_funding, preferred_name
from bazaarkit.marketplace.locale import preferred_readme as _preferred_readme
from bazaarkit.marketplace.models import PACKAGE_MODELS, Package, PackageType, StageIndex
from bazaarkit.marketplace.outdated import flag_outdated
from bazaarkit.marketplace.repo_ref import GITHUB_PREFIX, parse_repo_ref
from bazaarkit.marketplace.stage import (
    BazaarHashResolver,
    BazaarIndexCache,
    HashResolver,
    MarkdownRenderer,
    PackageReadmeLoader,
    StageIndexCache,
    format_updated,
)
from bazaarkit.marketplace.version import is_incompatible

if TYPE_CHECKING:
    from pathlib import Path

    from bazaarkit.marketplace.models import StageRepo

logger = structlog.get_logger()


class BazaarManager:  # [BK-M012.1]
    """설정 하나로 마켓플레이스 파이프라인 전체를 묶는 진입점.

    패키지 캐시(원격 디스크립터)와 설치 크기 캐시를 소유하며,
    모든 호출은 동기식으로 네트워크/파일시스템 작업을 수행합니다.
    """

    def __init__(
        self,
        config: BazaarConfig | None = None,
        client: httpx.Client | None = None,
        hash_resolver: HashResolver | None = None,
        on_progress: ProgressCallback | None = None,
        renderer: MarkdownRenderer | None = None,
        clock: Callable[[], float] = time.monotonic,
        run_background: Callable[[Callable[[], None]], None] | None = None,
    ) -> None:
        self.config = config or BazaarConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(self.config.request_timeout),
            follow_redirects=True,
            headers={"User-Agent": f"bazaarkit/{__version__}"},
        )

        self.package_cache = TTLCache(
            self.config.package_cache_ttl,
            self.config.package_cache_sweep,
            clock=clock,
            name="package",
        )
        self.install_size_cache = TTLCache(
            self.config.install_size_cache_ttl,
            self.config.install_size_cache_sweep,
            clock=clock,
            name="install_size",
        )

        self.stage_cache = StageIndexCache(
            self.config,
            self._client,
            hash_resolver or BazaarHashResolver(self.config, self._client),
            clock=clock,
        )
        self.stats_cache = BazaarIndexCache(self.config, self._client, clock=clock)

        downloader_kwargs = {}
        if run_background is not None:
            downloader_kwargs["run_background"] = run_background
        self.downloader = PackageDownloader(
            self.config, self._client, on_progress=on_progress, **downloader_kwargs
        )
        self.readme_loader = PackageReadmeLoader(
            self.stage_cache, self.downloader, self.config.lang, renderer=renderer
        )
        logger.info("bazaar_manager_init", lang=self.config.lang, app_version=self.config.app_version)

    # ── 원격 카탈로그 ──

    def stage_index(self, kind: PackageType) -> StageIndex | None:  # [BK-M012.2]
        return self.stage_cache.get(kind.plural)

    def catalog(self, kind: PackageType, include_incompatible: bool = False) -> list[Package]:  # [BK-M012.3]
        """스테이지 인덱스의 각 저장소에서 디스크립터를 받아 패키지 목록을 만듭니다.

        디스크립터는 패키지 캐시에 owner/repo@hash 키로 보관됩니다.
        """
        index = self.stage_index(kind)
        if index is None:
            return []

        packages: list[Package] = []
        for repo in index.repos:
            pkg = self._catalog_package(kind, repo)
            if pkg is None:
                continue
            if pkg.incompatible and not include_incompatible:
                continue
            packages.append(pkg)
        return packages

    def _catalog_package(self, kind: PackageType, repo: StageRepo) -> Package | None:
        cached = self.package_cache.get(repo.url)
        if cached is not None:
            return cached

        try:
            ref = parse_repo_ref(repo.url)
            data = self.downloader.download(f"{repo.url}/{kind.descriptor}")
            pkg = PACKAGE_MODELS[kind].model_validate_json(data)
        except BazaarError as e:
            logger.warning("catalog_package_failed", repo=repo.url, error=str(e))
            return None
        except ValidationError as e:
            logger.warning("catalog_package_parse_failed", repo=repo.url, error=str(e))
            return None

        pkg.url = pkg.url.removesuffix("/")
        pkg.repo_url = f"{self.config.github_host.rstrip('/')}/{ref.repo_name}"
        pkg.repo_hash = ref.hash
        pkg.updated = repo.updated
        pkg.h_updated = format_updated(repo.updated)
        pkg.stars = repo.stars
        pkg.open_issues = repo.open_issues
        pkg.size = repo.size
        pkg.install_size = repo.install_size
        pkg.downloads = self.stats_cache.downloads(ref.repo_name)
        self._decorate(pkg)

        self.package_cache.put(repo.url, pkg)
        return pkg

    def downloads(self, repo_name: str) -> int:  # [BK-M012.4]
        """owner/repo 의 누적 다운로드 수."""
        return self.stats_cache.downloads(repo_name)

    def readme(self, kind: PackageType, repo_url: str, repo_hash: str) -> str:  # [BK-M012.5]
        self.stage_index(kind)
        return self.readme_loader.load(repo_url, repo_hash, kind.plural)

    # ── 로컬 설치본 ──

    def installed(self, kind: PackageType, check_updates: bool = False) -> list[Package]:  # [BK-M012.6]
        """kind 루트 아래 설치된 패키지 목록. check_updates 면 카탈로그와 비교합니다."""
        root = kind_root(kind, self.config)
        if not root.is_dir():
            return []

        packages: list[Package] = []
        for pkg_dir in sorted(root.iterdir()):
            if not pkg_dir.is_dir() or pkg_dir.name.startswith("."):
                continue
            try:
                pkg = load_package_json(kind, pkg_dir.name, self.config)
            except PackageNotFoundError:
                continue
            except PackageParseError as e:
                logger.warning("installed_package_skipped", dir=pkg_dir.name, error=str(e))
                continue

            pkg.installed = True
            pkg.install_size = self.install_size(pkg_dir, pkg.url)
            pkg.h_install_date = datetime.fromtimestamp(pkg_dir.stat().st_mtime).strftime("%Y-%m-%d")
            self._decorate(pkg)
            packages.append(pkg)

        if check_updates and packages:
            flag_outdated(packages, self.catalog(kind, include_incompatible=True))
        return packages

    def install_size(self, pkg_dir: Path, key: str = "") -> int:  # [BK-M012.7]
        """설치 디렉토리 크기 (바이트). 결과는 설치 크기 캐시에 보관됩니다."""
        cache_key = key or str(pkg_dir)
        cached = self.install_size_cache.get(cache_key)
        if cached is not None:
            return cached

        size = sum(p.stat().st_size for p in pkg_dir.rglob("*") if p.is_file())
        self.install_size_cache.put(cache_key, size)
        return size

    def install(  # [BK-M012.8]
        self,
        kind: PackageType,
        repo_url: str,
        repo_hash: str,
        dir_name: str,
        system_id: str = "",
        push_progress: bool = True,
    ) -> Path:
        """릴리스 아카이브를 내려받아 kind 루트/dir_name 에 설치합니다."""
        install_path = self._install_path(kind, dir_name, PackageInstallError)
        repo_url_hash = f"{repo_url.removesuffix('/')}@{repo_hash}"

        data = self.downloader.download(repo_url_hash, push_progress=push_progress, system_id=system_id)
        install_package(
            data,
            install_path,
            repo_url_hash,
            self.config.package_temp_dir,
            package_cache=self.package_cache,
        )
        self.install_size_cache.delete(repo_url.removesuffix("/"))
        return install_path

    def uninstall(self, kind: PackageType, dir_name: str) -> None:  # [BK-M012.9]
        install_path = self._install_path(kind, dir_name, PackageUninstallError)
        uninstall_package(install_path, package_cache=self.package_cache)

    def _install_path(
        self, kind: PackageType, dir_name: str, error_cls: type[BazaarError]
    ) -> Path:
        if not dir_name or dir_name in (".", "..") or "/" in dir_name or "\\" in dir_name:
            msg = f"잘못된 패키지 디렉토리 이름: {dir_name!r}"
            raise error_cls(msg)
        return kind_root(kind, self.config) / dir_name

    def _decorate(self, pkg: Package) -> None:
        lang = self.config.lang
        pkg.preferred_name = preferred_name(pkg, lang)
        pkg.preferred_desc = preferred_desc(pkg.description, lang)
        pkg.preferred_readme = _preferred_readme(pkg.readme, lang)
        pkg.preferred_funding = preferred_funding(pkg.funding)
        pkg.incompatible = is_incompatible(pkg, self.config.app_version)
        if not pkg.repo_url and pkg.url.startswith(GITHUB_PREFIX):
            pkg.repo_url = pkg.url

    def close(self) -> None:
        """직접 만든 HTTP 클라이언트를 닫습니다."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> BazaarManager:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
