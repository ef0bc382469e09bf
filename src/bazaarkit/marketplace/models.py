"""
[BK-M004] bazaarkit.marketplace.models
패키지 메타데이터 모델 - 5종 패키지 유형 + 스테이지 인덱스

version: 1.0.0
created: 2026-10-12
modified: 2026-10-15
dependencies: pydantic>=2.12
"""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class PackageType(StrEnum):  # [BK-M004.1]
    """패키지 유형 (5종)."""

    THEME = "theme"
    ICON = "icon"
    PLUGIN = "plugin"
    WIDGET = "widget"
    TEMPLATE = "template"

    @property
    def plural(self) -> str:  # [BK-M004.2]
        """설치 디렉토리 및 스테이지 인덱스 키 (themes, plugins, ...)."""
        return f"{self.value}s"

    @property
    def descriptor(self) -> str:
        """패키지 디렉토리 안의 디스크립터 파일 이름."""
        return f"{self.value}.json"


class LocalizedText(BaseModel):  # [BK-M004.3]
    """언어별 문자열 레코드 (displayName/description/readme 공통 형태)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    default: str = ""
    zh_cn: str = Field(default="", alias="zh_CN")
    zh_cht: str = Field(default="", alias="zh_CHT")
    en_us: str = Field(default="", alias="en_US")


class Funding(BaseModel):  # [BK-M004.4]
    """후원 정보."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    open_collective: str = Field(default="", alias="openCollective")
    patreon: str = ""
    github: str = ""
    custom: list[str] = Field(default_factory=list)


class Package(BaseModel):  # [BK-M004.5]
    """패키지 디스크립터 (theme.json, plugin.json 등의 공통 필드).

    식별자는 (url, name, author) 세 값입니다. version은 비교 대상이라 식별자에서 제외됩니다.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", validate_assignment=True)

    kind: ClassVar[PackageType | None] = None

    # 디스크립터 원본 필드
    name: str = ""
    author: str = ""
    url: str = ""
    version: str = ""
    min_app_version: str = Field(default="", alias="minAppVersion")
    backends: list[str] = Field(default_factory=list)
    frontends: list[str] = Field(default_factory=list)
    display_name: LocalizedText | None = Field(default=None, alias="displayName")
    description: LocalizedText | None = None
    readme: LocalizedText | None = None
    funding: Funding | None = None
    keywords: list[str] = Field(default_factory=list)

    # 화면 표시용 파생 필드
    preferred_funding: str = Field(default="", alias="preferredFunding")
    preferred_name: str = Field(default="", alias="preferredName")
    preferred_desc: str = Field(default="", alias="preferredDesc")
    preferred_readme: str = Field(default="", alias="preferredReadme")

    repo_url: str = Field(default="", alias="repoURL")
    repo_hash: str = Field(default="", alias="repoHash")
    preview_url: str = Field(default="", alias="previewURL")
    preview_url_thumb: str = Field(default="", alias="previewURLThumb")
    icon_url: str = Field(default="", alias="iconURL")

    installed: bool = False
    outdated: bool = False
    current: bool = False
    updated: str = ""
    stars: int = 0
    open_issues: int = Field(default=0, alias="openIssues")
    size: int = 0
    h_size: str = Field(default="", alias="hSize")
    install_size: int = Field(default=0, alias="installSize")
    h_install_size: str = Field(default="", alias="hInstallSize")
    h_install_date: str = Field(default="", alias="hInstallDate")
    h_updated: str = Field(default="", alias="hUpdated")
    downloads: int = 0

    incompatible: bool = False

    @property
    def identity(self) -> tuple[str, str, str]:
        """로컬 설치본과 카탈로그 항목을 맞추는 조인 키."""
        return (self.url, self.name, self.author)


class Theme(Package):  # [BK-M004.6]
    kind: ClassVar[PackageType | None] = PackageType.THEME

    modes: list[str] = Field(default_factory=list)


class Icon(Package):
    kind: ClassVar[PackageType | None] = PackageType.ICON


class Plugin(Package):
    kind: ClassVar[PackageType | None] = PackageType.PLUGIN

    enabled: bool = False


class Widget(Package):
    kind: ClassVar[PackageType | None] = PackageType.WIDGET


class Template(Package):
    kind: ClassVar[PackageType | None] = PackageType.TEMPLATE


PACKAGE_MODELS: dict[PackageType, type[Package]] = {  # [BK-M004.7]
    PackageType.THEME: Theme,
    PackageType.ICON: Icon,
    PackageType.PLUGIN: Plugin,
    PackageType.WIDGET: Widget,
    PackageType.TEMPLATE: Template,
}


class StagePackage(BaseModel):  # [BK-M004.8]
    """스테이지 인덱스에 포함된 디스크립터 요약본."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    author: str = ""
    url: str = ""
    version: str = ""
    description: LocalizedText | None = None
    readme: LocalizedText | None = None
    i18n: list[str] = Field(default_factory=list)
    funding: Funding | None = None


class StageRepo(BaseModel):  # [BK-M004.9]
    """스테이지 인덱스의 저장소 항목. 인덱스 재조회 시 통째로 교체됩니다."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    url: str
    updated: str = ""
    stars: int = 0
    open_issues: int = Field(default=0, alias="openIssues")
    size: int = 0
    install_size: int = Field(default=0, alias="installSize")
    package: StagePackage | None = None


class StageIndex(BaseModel):  # [BK-M004.10]
    """패키지 유형 하나에 대한 원격 카탈로그 스냅샷."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    repos: list[StageRepo] = Field(default_factory=list)

    def find(self, url: str) -> StageRepo | None:
        """owner/repo@hash 로 저장소 항목을 찾습니다."""
        for repo in self.repos:
            if repo.url == url:
                return repo
        return None


class BazaarPackageStat(BaseModel):  # [BK-M004.11]
    """사용 통계 인덱스 항목."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    downloads: int = 0
