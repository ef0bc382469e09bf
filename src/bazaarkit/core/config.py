"""
[BK-A002] bazaarkit.core.config
pydantic-settings 기반 환경변수 설정 관리

version: 1.0.0
created: 2026-10-12
modified: 2026-10-14
dependencies: pydantic-settings>=2.13
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BazaarConfig(BaseSettings):  # [BK-A002.1]
    """마켓플레이스 클라이언트 설정.

    데이터 디렉토리, 현재 언어, 앱 버전, 원격 서버 주소 등
    프로세스 전역 설정을 한 곳에서 관리합니다.
    """

    model_config = SettingsConfigDict(
        env_prefix="BAZAAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 로컬 경로
    data_dir: Path = Field(default=Path("data"), description="plugins/widgets/templates 루트")
    conf_dir: Path = Field(default=Path("conf"), description="appearance/themes, icons 루트")
    temp_dir: Path = Field(default=Path("temp"), description="임시 디렉토리")

    # 런타임 정보
    lang: str = Field(default="en_US", description="zh_CN|zh_CHT|en_US, 그 외는 default")
    app_version: str = Field(default="3.0.0", description="실행 중인 앱 버전")

    # 원격 서버
    bazaar_repo: str = Field(default="https://github.com/siyuan-note/bazaar")
    bazaar_hash: str = Field(default="", description="고정할 마켓플레이스 커밋 해시 (빈 값 = 리졸버 사용)")
    stat_server: str = Field(default="https://stat.b3log.org")
    cloud_server: str = Field(default="https://ld246.com")
    github_host: str = Field(default="https://github.com")
    github_api: str = Field(default="https://api.github.com")

    # 네트워크
    request_timeout: float = Field(default=30.0, gt=0, description="초 단위")
    download_timeout: float = Field(default=120.0, gt=0, description="패키지 다운로드, 초 단위")
    tag_page_size: int = Field(default=32, ge=1, le=100)
    tag_max_pages: int = Field(default=64, ge=1, description="태그 페이지 조회 상한")

    # 캐시 (초 단위)
    stage_index_ttl: float = Field(default=3600.0, gt=0)
    package_cache_ttl: float = Field(default=6 * 3600.0, gt=0)
    package_cache_sweep: float = Field(default=30 * 60.0, gt=0)
    install_size_cache_ttl: float = Field(default=48 * 3600.0, gt=0)
    install_size_cache_sweep: float = Field(default=6 * 3600.0, gt=0)

    log_level: str = Field(default="INFO")

    @property
    def themes_dir(self) -> Path:
        return self.conf_dir / "appearance" / "themes"

    @property
    def icons_dir(self) -> Path:
        return self.conf_dir / "appearance" / "icons"

    @property
    def package_temp_dir(self) -> Path:
        """다운로드한 아카이브를 풀어 둘 임시 영역."""
        return self.temp_dir / "bazaar" / "package"
