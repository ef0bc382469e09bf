"""
[BK-M006] bazaarkit.marketplace.version
시맨틱 버전 비교 - 업데이트 판정 및 앱 호환성 판정

version: 1.0.0
created: 2026-10-12
modified: 2026-10-19
dependencies: semver>=3.0.2
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from semver import Version

if TYPE_CHECKING:
    from bazaarkit.marketplace.models import Package

# minAppVersion이 없는 패키지에 적용할 최저 버전 (strict 모드에서만 사용)
DEFAULT_MIN_APP_VERSION = "2.9.0"


def _parse(raw: str) -> Version | None:
    # "1", "1.2" 같은 축약형은 0 으로 채움
    try:
        return Version.parse(raw.strip(), optional_minor_and_patch=True)
    except (ValueError, TypeError):
        return None


def compare_versions(a: str, b: str) -> int:  # [BK-M006.1]
    """두 버전 문자열을 비교해 -1/0/1 을 반환합니다.

    SemVer 2.0 우선순위를 따릅니다 (프리릴리스는 정식 릴리스보다 작고,
    빌드 메타데이터는 무시).
    잘못된 버전은 올바른 버전보다 작고, 잘못된 버전끼리는 같습니다.
    """
    va, vb = _parse(a), _parse(b)
    if va is None and vb is None:
        return 0
    if va is None:
        return -1
    if vb is None:
        return 1
    return va.compare(vb)


def is_newer(installed: str, catalog: str) -> bool:  # [BK-M006.2]
    """카탈로그 버전이 설치 버전보다 엄격히 큰지."""
    return compare_versions(installed, catalog) < 0


def is_incompatible(pkg: Package, app_version: str, strict: bool = False) -> bool:  # [BK-M006.3]
    """패키지가 요구하는 최소 앱 버전이 실행 중인 앱보다 높은지.

    minAppVersion이 비어 있으면 기본적으로 통과시킵니다. strict=True 이면
    DEFAULT_MIN_APP_VERSION을 대신 적용합니다.
    """
    min_app_version = pkg.min_app_version
    if not min_app_version:
        if not strict:
            return False
        min_app_version = DEFAULT_MIN_APP_VERSION
    return compare_versions(min_app_version, app_version) > 0
