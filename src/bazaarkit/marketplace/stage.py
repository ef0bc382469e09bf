"""
[BK-M003] bazaarkit.marketplace.stage
스테이지 인덱스/사용 통계 캐시 및 README 로더

version: 1.0.0
created: 2026-10-13
modified: 2026-10-17
dependencies: httpx>=0.28.1, pydantic>=2.12
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from bazaarkit.core.exceptions import BazaarError, BazaarNetworkError
from bazaarkit.marketplace.locale import preferred_readme
from bazaarkit.marketplace.models import BazaarPackageStat, StageIndex
from bazaarkit.marketplace.repo_ref import strip_host

if TYPE_CHECKING:
    from bazaarkit.core.config import BazaarConfig
    from bazaarkit.marketplace.downloader import PackageDownloader

logger = structlog.get_logger()

HashResolver = Callable[[], str]
MarkdownRenderer = Callable[[str, str], str]

_STATS_ADAPTER = TypeAdapter(dict[str, BazaarPackageStat])


class BazaarHashResolver:  # [BK-M003.1]
    """현재 마켓플레이스 커밋 해시.

    설정에 고정값이 있으면 그대로 쓰고, 없으면 마켓플레이스 저장소의
    기본 브랜치 HEAD 커밋을 조회합니다.
    """

    def __init__(self, config: BazaarConfig, client: httpx.Client) -> None:
        self.config = config
        self._client = client

    def __call__(self) -> str:
        if self.config.bazaar_hash:
            return self.config.bazaar_hash

        repo = strip_host(self.config.bazaar_repo.rstrip("/"))
        url = f"{self.config.github_api.rstrip('/')}/repos/{repo}/commits/HEAD"
        try:
            resp = self._client.get(url, headers={"Accept": "application/vnd.github+json"})
            resp.raise_for_status()
            return resp.json()["sha"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error("bazaar_hash_resolve_failed", url=url, error=str(e))
            msg = "마켓플레이스 커밋 해시를 가져오지 못했습니다"
            raise BazaarNetworkError(msg) from e


class StageIndexCache:  # [BK-M003.2]
    """패키지 유형별 스테이지 인덱스를 TTL 동안 캐시합니다.

    조회 실패는 기존 캐시를 지우지 않습니다 (오래된 값 > 빈 값).
    """

    def __init__(
        self,
        config: BazaarConfig,
        client: httpx.Client,
        hash_resolver: HashResolver,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self._client = client
        self._hash_resolver = hash_resolver
        self._clock = clock
        self._lock = threading.Lock()
        self._indexes: dict[str, StageIndex] = {}
        self._refreshed_at: dict[str, float] = {}

    def get(self, pkg_type: str) -> StageIndex | None:  # [BK-M003.3]
        """유형(themes, plugins, ...)의 스테이지 인덱스. 한 번도 성공하지 못했으면 None."""
        with self._lock:
            now = self._clock()
            cached = self._indexes.get(pkg_type)
            refreshed_at = self._refreshed_at.get(pkg_type)
            if (
                cached is not None
                and refreshed_at is not None
                and now - refreshed_at <= self.config.stage_index_ttl
            ):
                return cached

            try:
                bazaar_hash = self._hash_resolver()
            except BazaarError as e:
                logger.error("stage_index_hash_failed", pkg_type=pkg_type, error=str(e))
                return cached

            url = f"{self.config.bazaar_repo.rstrip('/')}/raw/{bazaar_hash}/stage/{pkg_type}.json"
            index = self._fetch(url)
            if index is None:
                return cached

            self._indexes[pkg_type] = index
            self._refreshed_at[pkg_type] = now
            logger.info("stage_index_refreshed", pkg_type=pkg_type, repos=len(index.repos))
            return index

    def cached(self, pkg_type: str) -> StageIndex | None:  # [BK-M003.4]
        """네트워크 조회 없이 현재 캐시된 인덱스를 반환합니다."""
        with self._lock:
            return self._indexes.get(pkg_type)

    def _fetch(self, url: str) -> StageIndex | None:
        try:
            resp = self._client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.error("stage_index_fetch_failed", url=url, error=str(e))
            return None
        if resp.status_code != 200:
            logger.error("stage_index_fetch_failed", url=url, status=resp.status_code)
            return None

        try:
            return StageIndex.model_validate_json(resp.content)
        except ValidationError as e:
            logger.error("stage_index_parse_failed", url=url, error=str(e))
            return None


class BazaarIndexCache:  # [BK-M003.5]
    """패키지 이름 → 다운로드 수 통계 인덱스 (TTL 캐시, 실패 시 이전 값 유지)."""

    def __init__(
        self,
        config: BazaarConfig,
        client: httpx.Client,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self._client = client
        self._clock = clock
        self._lock = threading.Lock()
        self._index: dict[str, BazaarPackageStat] = {}
        self._refreshed_at: float | None = None

    def get(self) -> dict[str, BazaarPackageStat]:
        with self._lock:
            now = self._clock()
            if self._refreshed_at is not None and now - self._refreshed_at <= self.config.stage_index_ttl:
                return self._index

            url = f"{self.config.stat_server.rstrip('/')}/bazaar/index.json"
            try:
                resp = self._client.get(url, follow_redirects=True)
            except httpx.HTTPError as e:
                logger.error("bazaar_index_fetch_failed", url=url, error=str(e))
                return self._index
            if resp.status_code != 200:
                logger.error("bazaar_index_fetch_failed", url=url, status=resp.status_code)
                return self._index

            try:
                self._index = _STATS_ADAPTER.validate_json(resp.content)
            except ValidationError as e:
                logger.error("bazaar_index_parse_failed", url=url, error=str(e))
                return self._index

            self._refreshed_at = now
            return self._index

    def downloads(self, name: str) -> int:
        stat = self.get().get(name)
        return stat.downloads if stat else 0


def _identity_renderer(repo_url: str, markdown: str) -> str:
    return markdown


def decode_readme(data: bytes) -> str:  # [BK-M003.6]
    """UTF-16 BOM 이 있으면 그에 맞게, 아니면 UTF-8 로 디코딩합니다."""
    if len(data) > 2:
        if data[0] == 0xFF and data[1] == 0xFE:
            return data[2:].decode("utf-16-le", errors="replace")
        if data[0] == 0xFE and data[1] == 0xFF:
            return data[2:].decode("utf-16-be", errors="replace")
    return data.decode("utf-8-sig", errors="replace")


class PackageReadmeLoader:  # [BK-M003.7]
    """스테이지 인덱스에 기록된 README 경로로 원격 README 를 가져옵니다.

    현재 언어의 README 가 실패하면 기본 README 로 한 번 더 시도합니다.
    실패는 예외가 아니라 화면에 그대로 보여줄 메시지로 반환됩니다.
    """

    def __init__(
        self,
        stage_cache: StageIndexCache,
        downloader: PackageDownloader,
        lang: str,
        renderer: MarkdownRenderer | None = None,
    ) -> None:
        self.stage_cache = stage_cache
        self.downloader = downloader
        self.lang = lang
        self.renderer = renderer or _identity_renderer

    def load(self, repo_url: str, repo_hash: str, pkg_type: str) -> str:  # [BK-M003.8]
        repo_url_hash = f"{repo_url}@{repo_hash}"
        index = self.stage_cache.cached(pkg_type)
        if index is None:
            return ""

        repo = index.find(strip_host(repo_url_hash))
        if repo is None:
            return ""

        readmes = repo.package.readme if repo.package else None
        readme = preferred_readme(readmes, self.lang)
        try:
            data = self.downloader.download(f"{repo_url_hash}/{readme}")
        except BazaarError as e:
            ret = f"Load bazaar package's README.md({readme}) failed: {e}"
            default = readmes.default.strip() if readmes else ""
            if not default or readme == default:
                return ret
            try:
                data = self.downloader.download(f"{repo_url_hash}/{default}")
            except BazaarError as e2:
                return f"{ret}<br>Load bazaar package's README.md({default}) failed: {e2}"

        return self.renderer(repo_url, decode_readme(data))


def format_updated(updated: str) -> str:  # [BK-M003.9]
    """스테이지 인덱스의 updated 값을 YYYY-MM-DD 로 표시합니다."""
    try:
        return datetime.fromisoformat(updated).strftime("%Y-%m-%d")
    except ValueError:
        if "T" in updated:
            return updated[: updated.index("T")]
        return updated.removesuffix("Z")
