"""
[BK-M005] bazaarkit.marketplace.locale
현재 언어에 맞는 표시 이름/설명/README 선택

version: 1.0.0
created: 2026-10-12
modified: 2026-10-12
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bazaarkit.marketplace.models import Funding, LocalizedText, Package

DEFAULT_README = "README.md"


def resolve_localized(text: LocalizedText, lang: str) -> str:  # [BK-M005.1]
    """언어별 레코드에서 하나의 문자열을 고릅니다.

    zh_CHT는 zh_CN으로, 그 외 언어는 en_US로 폴백하며 마지막은 default 입니다.
    """
    ret = text.default
    if lang == "zh_CN":
        if text.zh_cn:
            ret = text.zh_cn
    elif lang == "zh_CHT":
        if text.zh_cht:
            ret = text.zh_cht
        elif text.zh_cn:
            ret = text.zh_cn
    elif text.en_us:
        # en_US 및 알 수 없는 언어
        ret = text.en_us
    return ret


def preferred_name(pkg: Package, lang: str) -> str:  # [BK-M005.2]
    """표시 이름. displayName이 없으면 패키지 이름."""
    if pkg.display_name is None:
        return pkg.name
    return resolve_localized(pkg.display_name, lang)


def preferred_desc(desc: LocalizedText | None, lang: str) -> str:  # [BK-M005.3]
    if desc is None:
        return ""
    return resolve_localized(desc, lang)


def preferred_readme(readme: LocalizedText | None, lang: str) -> str:  # [BK-M005.4]
    """README 상대 경로. 지정이 없으면 README.md."""
    if readme is None:
        return DEFAULT_README
    return resolve_localized(readme, lang)


def preferred_funding(funding: Funding | None) -> str:  # [BK-M005.5]
    """후원 링크 하나를 고릅니다 (openCollective > patreon > github > custom)."""
    if funding is None:
        return ""
    if funding.open_collective:
        return f"https://opencollective.com/{funding.open_collective}"
    if funding.patreon:
        return f"https://www.patreon.com/{funding.patreon}"
    if funding.github:
        return f"https://github.com/sponsors/{funding.github}"
    if funding.custom:
        return funding.custom[0]
    return ""
