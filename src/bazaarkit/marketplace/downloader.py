"""
[BK-M010] bazaarkit.marketplace.downloader
패키지/저장소 파일 다운로드 - 키별 단일 실행, 진행률, 다운로드 수 집계

version: 1.0.0
created: 2026-10-13
modified: 2026-10-17
dependencies: httpx>=0.28.1
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx
import structlog

from bazaarkit.core.exceptions import BazaarNetworkError
from bazaarkit.marketplace.release import ReleaseResolver
from bazaarkit.marketplace.repo_ref import RepoRef, parse_repo_ref, strip_host

if TYPE_CHECKING:
    from bazaarkit.core.config import BazaarConfig

logger = structlog.get_logger()

ProgressCallback = Callable[[str, float], None]

DOWNLOAD_COUNT_API = "/apis/siyuan/bazaar/addBazaarPackageDownloadCount"


def _spawn_daemon(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, daemon=True, name="bazaar-download-count").start()


class _Flight:
    """진행 중인 다운로드 하나. 대기자는 done 이후 같은 결과를 받습니다."""

    def __init__(self) -> None:
        self.done = threading.Event()
        self.result: bytes | None = None
        self.error: Exception | None = None


class PackageDownloader:  # [BK-M010.1]
    """repo_url_hash 단위로 다운로드를 직렬화하는 다운로더.

    같은 키에 대한 동시 요청은 첫 요청의 네트워크 조회 하나로 합쳐지고,
    그 결과(성공/실패)를 모두가 공유합니다. 레지스트리 항목은 조회가
    끝나면 제거되므로 진행 중인 키만 남습니다.
    """

    def __init__(
        self,
        config: BazaarConfig,
        client: httpx.Client,
        resolver: ReleaseResolver | None = None,
        on_progress: ProgressCallback | None = None,
        run_background: Callable[[Callable[[], None]], None] = _spawn_daemon,
    ) -> None:
        self.config = config
        self._client = client
        self.resolver = resolver or ReleaseResolver(config, client)
        self._on_progress = on_progress
        self._run_background = run_background
        self._flights: dict[str, _Flight] = {}
        self._flights_lock = threading.Lock()

    @property
    def in_flight(self) -> int:
        with self._flights_lock:
            return len(self._flights)

    def download(  # [BK-M010.2]
        self,
        repo_url_hash: str,
        push_progress: bool = False,
        system_id: str = "",
    ) -> bytes:
        """패키지 아카이브 또는 저장소 상대 경로 파일을 내려받습니다.

        Args:
            repo_url_hash: owner/repo@hash 또는 owner/repo@hash/README.md
                (https://github.com/ 접두어 허용)
            push_progress: 진행률 콜백 호출 여부
            system_id: 익명 설치 식별자. 비어 있으면 다운로드 수를 집계하지 않음

        Raises:
            RepoRefParseError: 참조 형식 오류
            ReleaseNotFoundError: 커밋에 해당하는 태그 없음
            BazaarNetworkError: 전송 실패 또는 비정상 상태 코드
        """
        key = strip_host(repo_url_hash)

        with self._flights_lock:
            flight = self._flights.get(key)
            leader = flight is None
            if flight is None:
                flight = _Flight()
                self._flights[key] = flight

        if not leader:
            logger.debug("package_download_waiting", key=key)
            flight.done.wait()
            if flight.error is not None:
                raise flight.error
            return flight.result  # type: ignore[return-value]

        try:
            flight.result = self._fetch(key, push_progress)
        except Exception as e:
            flight.error = e
            raise
        finally:
            with self._flights_lock:
                self._flights.pop(key, None)
            flight.done.set()

        self._report_download(key, system_id)
        return flight.result

    def resolve_url(self, ref: RepoRef) -> str:  # [BK-M010.3]
        """상대 경로가 있으면 raw 파일 URL, 없으면 릴리스 에셋 URL."""
        if ref.path:
            host = self.config.github_host.rstrip("/")
            return f"{host}/{ref.owner}/{ref.repo}/raw/{ref.hash}/{ref.path}"
        return self.resolver.download_url(ref.owner, ref.repo, ref.hash)

    def _fetch(self, key: str, push_progress: bool) -> bytes:
        ref = parse_repo_ref(key)
        try:
            url = self.resolve_url(ref)
        except Exception as e:
            logger.error("package_url_resolve_failed", key=key, error=str(e))
            raise

        buf = bytearray()
        try:
            with self._client.stream(
                "GET", url, timeout=self.config.download_timeout, follow_redirects=True
            ) as resp:
                if resp.status_code != 200:
                    logger.error("package_download_failed", url=url, status=resp.status_code)
                    msg = f"패키지를 가져오지 못했습니다: HTTP {resp.status_code}"
                    raise BazaarNetworkError(msg)

                total = int(resp.headers.get("Content-Length") or 0)
                for chunk in resp.iter_bytes():
                    buf.extend(chunk)
                    if push_progress and total > 0 and self._on_progress is not None:
                        self._on_progress(ref.base, min(len(buf) / total, 1.0))
        except httpx.HTTPError as e:
            logger.error("package_download_failed", url=url, error=str(e))
            msg = "패키지를 가져오지 못했습니다. 네트워크를 확인하세요"
            raise BazaarNetworkError(msg) from e

        logger.info("package_downloaded", key=key, size=len(buf))
        return bytes(buf)

    def _report_download(self, key: str, system_id: str) -> None:  # [BK-M010.4]
        """다운로드 수 증가를 백그라운드로 보고합니다 (응답/실패 무시)."""
        if ".md" in key or not system_id:
            return

        repo = key.split("@", 1)[0]
        self._run_background(lambda: self._post_download_count(repo, system_id))

    def _post_download_count(self, repo: str, system_id: str) -> None:
        url = self.config.cloud_server.rstrip("/") + DOWNLOAD_COUNT_API
        try:
            self._client.post(
                url,
                json={"systemID": system_id, "repo": repo},
                timeout=self.config.request_timeout,
            )
        except httpx.HTTPError as e:
            logger.debug("package_download_count_failed", repo=repo, error=str(e))
