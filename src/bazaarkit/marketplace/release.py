"""
[BK-M009] bazaarkit.marketplace.release
커밋 해시 → 태그 → 릴리스 에셋 URL 변환

version: 1.0.0
created: 2026-10-13
modified: 2026-10-16
dependencies: httpx>=0.28.1
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog

from bazaarkit.core.exceptions import BazaarNetworkError, ReleaseNotFoundError

if TYPE_CHECKING:
    from bazaarkit.core.config import BazaarConfig

logger = structlog.get_logger()

PACKAGE_ASSET = "package.zip"


class ReleaseResolver:  # [BK-M009.1]
    """GitHub 태그 목록을 페이지 단위로 훑어 커밋에 해당하는 릴리스를 찾습니다.

    REF: https://docs.github.com/en/rest/repos/repos#list-repository-tags
    """

    def __init__(self, config: BazaarConfig, client: httpx.Client) -> None:
        self.config = config
        self._client = client

    def download_url(self, owner: str, repo: str, commit_hash: str) -> str:  # [BK-M009.2]
        """package.zip 릴리스 에셋 URL을 반환합니다.

        Raises:
            ReleaseNotFoundError: 빈 페이지에 도달하거나 페이지 상한을 넘은 경우
            BazaarNetworkError: 태그 목록 조회 실패 (재시도하지 않음)
        """
        tag = self.find_tag(owner, repo, commit_hash)
        host = self.config.github_host.rstrip("/")
        return f"{host}/{owner}/{repo}/releases/download/{tag}/{PACKAGE_ASSET}"

    def find_tag(self, owner: str, repo: str, commit_hash: str) -> str:  # [BK-M009.3]
        for page in range(1, self.config.tag_max_pages + 1):
            tags = self._list_tags(owner, repo, page)
            if not tags:
                logger.warning(
                    "release_tag_not_found", owner=owner, repo=repo, hash=commit_hash, page=page
                )
                msg = "패키지를 가져오지 못했습니다. 패키지 저장소의 태그를 확인하세요"
                raise ReleaseNotFoundError(msg)

            for tag in tags:
                if (tag.get("commit") or {}).get("sha") == commit_hash:
                    return tag["name"]

        logger.warning(
            "release_tag_pages_exhausted",
            owner=owner,
            repo=repo,
            hash=commit_hash,
            max_pages=self.config.tag_max_pages,
        )
        msg = f"태그 {self.config.tag_max_pages}페이지 안에서 릴리스를 찾지 못했습니다. 패키지 저장소의 태그를 확인하세요"
        raise ReleaseNotFoundError(msg)

    def _list_tags(self, owner: str, repo: str, page: int) -> list[dict[str, Any]]:
        url = f"{self.config.github_api.rstrip('/')}/repos/{owner}/{repo}/tags"
        try:
            resp = self._client.get(
                url,
                params={"per_page": self.config.tag_page_size, "page": page},
                headers={"Accept": "application/vnd.github+json"},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "release_tags_list_failed", url=url, page=page, status=e.response.status_code
            )
            msg = f"태그 목록 조회 실패: HTTP {e.response.status_code}"
            raise BazaarNetworkError(msg) from e
        except httpx.HTTPError as e:
            logger.error("release_tags_list_failed", url=url, page=page, error=str(e))
            msg = "태그 목록 조회 실패. 네트워크를 확인하세요"
            raise BazaarNetworkError(msg) from e

        try:
            tags = resp.json()
        except ValueError as e:
            logger.error("release_tags_parse_failed", url=url, page=page, error=str(e))
            msg = "태그 목록 응답을 파싱할 수 없습니다"
            raise BazaarNetworkError(msg) from e
        return tags if isinstance(tags, list) else []
