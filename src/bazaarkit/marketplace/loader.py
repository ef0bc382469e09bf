"""
[BK-M002] bazaarkit.marketplace.loader
로컬 패키지 디스크립터 로더 - theme.json, plugin.json 등

version: 1.0.0
created: 2026-10-12
modified: 2026-10-14
dependencies: pydantic>=2.12
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from bazaarkit.core.exceptions import PackageNotFoundError, PackageParseError
from bazaarkit.marketplace.models import (
    PACKAGE_MODELS,
    Icon,
    Package,
    PackageType,
    Plugin,
    Template,
    Theme,
    Widget,
)

if TYPE_CHECKING:
    from pathlib import Path

    from bazaarkit.core.config import BazaarConfig

logger = structlog.get_logger()


def kind_root(kind: PackageType, config: BazaarConfig) -> Path:  # [BK-M002.1]
    """패키지 유형별 설치 루트 디렉토리."""
    if kind == PackageType.THEME:
        return config.themes_dir
    if kind == PackageType.ICON:
        return config.icons_dir
    return config.data_dir / kind.plural


def load_package_json(kind: PackageType, dir_name: str, config: BazaarConfig) -> Package:  # [BK-M002.2]
    """설치된 패키지 디렉토리에서 디스크립터를 읽습니다.

    Raises:
        PackageNotFoundError: 디스크립터 파일이 없는 경우
        PackageParseError: 읽기 실패 또는 JSON/스키마 오류
    """
    path = kind_root(kind, config) / dir_name / kind.descriptor
    if not path.is_file():
        msg = f"{kind.descriptor}을(를) 찾을 수 없습니다: {dir_name}"
        raise PackageNotFoundError(msg)

    try:
        data = path.read_bytes()
    except OSError as e:
        logger.error("package_json_read_failed", path=str(path), error=str(e))
        msg = f"{kind.descriptor} 읽기 실패: {dir_name}"
        raise PackageParseError(msg) from e

    try:
        pkg = PACKAGE_MODELS[kind].model_validate_json(data)
    except ValidationError as e:
        logger.error("package_json_parse_failed", path=str(path), error=str(e))
        msg = f"{kind.descriptor} 파싱 실패 [{dir_name}]: {e}"
        raise PackageParseError(msg) from e

    pkg.url = pkg.url.removesuffix("/")
    return pkg


def theme_json(dir_name: str, config: BazaarConfig) -> Theme:
    return load_package_json(PackageType.THEME, dir_name, config)  # type: ignore[return-value]


def icon_json(dir_name: str, config: BazaarConfig) -> Icon:
    return load_package_json(PackageType.ICON, dir_name, config)  # type: ignore[return-value]


def plugin_json(dir_name: str, config: BazaarConfig) -> Plugin:
    return load_package_json(PackageType.PLUGIN, dir_name, config)  # type: ignore[return-value]


def widget_json(dir_name: str, config: BazaarConfig) -> Widget:
    return load_package_json(PackageType.WIDGET, dir_name, config)  # type: ignore[return-value]


def template_json(dir_name: str, config: BazaarConfig) -> Template:
    return load_package_json(PackageType.TEMPLATE, dir_name, config)  # type: ignore[return-value]
