"""
[BK-M008] bazaarkit.marketplace.repo_ref
저장소 참조 파서 - owner/repo@hash[/path]

version: 1.0.0
created: 2026-10-13
modified: 2026-10-13
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from bazaarkit.core.exceptions import RepoRefParseError

GITHUB_PREFIX = "https://github.com/"

_DELIMITERS = re.compile(r"[/@]")


@dataclass(frozen=True)
class RepoRef:  # [BK-M008.1]
    """원격 조회의 주소 단위. path가 있으면 저장소 내 파일, 없으면 릴리스 패키지."""

    owner: str
    repo: str
    hash: str
    path: str = ""

    @property
    def repo_name(self) -> str:
        """owner/repo"""
        return f"{self.owner}/{self.repo}"

    @property
    def base(self) -> str:
        """owner/repo@hash"""
        return f"{self.owner}/{self.repo}@{self.hash}"

    def __str__(self) -> str:
        if self.path:
            return f"{self.base}/{self.path}"
        return self.base


def strip_host(value: str) -> str:
    return value.removeprefix(GITHUB_PREFIX)


def parse_repo_ref(value: str) -> RepoRef:  # [BK-M008.2]
    """'owner/repo@hash' 또는 'owner/repo@hash/rel/path' 를 파싱합니다.

    앞의 https://github.com/ 은 제거하고, 빈 토큰은 무시합니다.

    Raises:
        RepoRefParseError: 토큰이 3개 미만인 경우
    """
    tokens = [t for t in _DELIMITERS.split(strip_host(value)) if t]
    if len(tokens) < 3:
        msg = f"저장소 정보를 파싱할 수 없습니다: {value}"
        raise RepoRefParseError(msg)

    owner, repo, commit_hash = tokens[:3]
    return RepoRef(owner=owner, repo=repo, hash=commit_hash, path="/".join(tokens[3:]))
