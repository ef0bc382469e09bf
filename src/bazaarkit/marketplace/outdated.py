"""
[BK-M011] bazaarkit.marketplace.outdated
설치된 패키지의 업데이트 여부 판정

version: 1.0.0
created: 2026-10-14
modified: 2026-10-14
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from bazaarkit.marketplace.repo_ref import GITHUB_PREFIX
from bazaarkit.marketplace.version import is_newer

if TYPE_CHECKING:
    from bazaarkit.marketplace.models import Package


def is_outdated(pkg: Package, catalog: Iterable[Package], host: str = GITHUB_PREFIX) -> bool:  # [BK-M011.1]
    """카탈로그에 같은 (url, name, author) 의 더 높은 버전이 있는지 판정합니다.

    host 에 올라간 owner/repo 형태의 URL만 대상입니다. 일치하면 카탈로그
    항목의 repo_hash 를 설치본에 옮겨 적어 업데이트 다운로드에 씁니다.
    """
    if not pkg.url.startswith(host):
        return False

    parts = pkg.url.removeprefix(host).split("/")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        return False

    for candidate in catalog:
        if candidate.identity == pkg.identity and is_newer(pkg.version, candidate.version):
            pkg.repo_hash = candidate.repo_hash
            return True
    return False


def flag_outdated(installed: Sequence[Package], catalog: Sequence[Package]) -> list[Package]:  # [BK-M011.2]
    """installed 각각의 outdated 를 갱신하고, 업데이트가 있는 것만 반환합니다."""
    outdated: list[Package] = []
    for pkg in installed:
        pkg.outdated = is_outdated(pkg, catalog)
        if pkg.outdated:
            outdated.append(pkg)
    return outdated
