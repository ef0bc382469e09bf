"""
[BK-A000] bazaarkit
커뮤니티 마켓플레이스(bazaar) 패키지 클라이언트 - 테마/아이콘/플러그인/위젯/템플릿

version: 1.0.0
created: 2026-10-12
modified: 2026-10-12
"""

__version__ = "1.0.0"
