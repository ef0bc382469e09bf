"""
[BK-T000] tests.conftest
공통 테스트 픽스처

version: 1.0.0
created: 2026-10-15
"""

from __future__ import annotations

import io
import json
import zipfile
from typing import TYPE_CHECKING, Any

import pytest

from bazaarkit.core.config import BazaarConfig

if TYPE_CHECKING:
    from pathlib import Path


class FakeClock:
    """테스트에서 직접 움직이는 단조 시계."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_zip(files: dict[str, str | bytes]) -> bytes:
    """{아카이브 내 경로: 내용} 으로 zip 바이트를 만듭니다."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buf.getvalue()


def write_descriptor(root: Path, dir_name: str, filename: str, data: dict[str, Any]) -> Path:
    pkg_dir = root / dir_name
    pkg_dir.mkdir(parents=True, exist_ok=True)
    path = pkg_dir / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def config(tmp_path: Path) -> BazaarConfig:
    """테스트용 설정 (tmp_path 아래 경로, 고정 마켓플레이스 해시)."""
    return BazaarConfig(
        data_dir=tmp_path / "data",
        conf_dir=tmp_path / "conf",
        temp_dir=tmp_path / "temp",
        lang="en_US",
        app_version="3.0.0",
        bazaar_hash="bazaarhash",
        tag_max_pages=5,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def zip_bytes():
    """make_zip 헬퍼."""
    return make_zip


@pytest.fixture
def descriptor():
    """write_descriptor 헬퍼."""
    return write_descriptor
