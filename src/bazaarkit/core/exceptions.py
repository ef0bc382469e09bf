"""
[BK-A003] bazaarkit.core.exceptions
커스텀 예외 계층 구조

version: 1.0.0
created: 2026-10-12
modified: 2026-10-13
"""


class BazaarError(Exception):  # [BK-A003.1]
    """bazaarkit 기본 예외. 모든 커스텀 예외의 부모."""


class PackageNotFoundError(BazaarError, FileNotFoundError):  # [BK-A003.2]
    """로컬 패키지 디스크립터 파일이 없음."""


class PackageParseError(BazaarError):  # [BK-A003.3]
    """디스크립터/인덱스 JSON 파싱 실패."""


class BazaarNetworkError(BazaarError):  # [BK-A003.4]
    """전송 실패 또는 비정상 상태 코드. 메시지에는 내부 URL을 넣지 않는다."""


class ReleaseNotFoundError(BazaarError):  # [BK-A003.5]
    """커밋 해시와 일치하는 태그(릴리스)가 없음."""


class RepoRefParseError(BazaarError, ValueError):  # [BK-A003.6]
    """owner/repo@hash[/path] 형식이 아님."""


class PackageInstallError(BazaarError):  # [BK-A003.7]
    """아카이브 쓰기/압축 해제/복사 실패."""


class PackageUninstallError(BazaarError):  # [BK-A003.8]
    """설치 디렉토리 삭제 실패."""
