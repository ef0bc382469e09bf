"""
[BK-H001] bazaarkit.cli.main
Typer CLI 엔트리포인트 - 마켓플레이스 패키지 관리

version: 1.0.0
created: 2026-10-15
modified: 2026-10-19
dependencies: typer>=0.23.1, rich>=14.3.2
"""

from __future__ import annotations

import logging
from typing import Annotated

import structlog
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bazaarkit import __version__
from bazaarkit.core.config import BazaarConfig
from bazaarkit.core.exceptions import BazaarError
from bazaarkit.marketplace.manager import BazaarManager
from bazaarkit.marketplace.models import PackageType
from bazaarkit.marketplace.repo_ref import parse_repo_ref

logger = structlog.get_logger()

app = typer.Typer(
    name="bazaarkit",
    help="bazaarkit - 커뮤니티 마켓플레이스 패키지 클라이언트",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:  # [BK-H001.1]
    """버전 정보를 출력합니다."""
    if value:
        console.print(f"bazaarkit v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", "-V", help="버전 정보 출력", callback=version_callback, is_eager=True
        ),
    ] = None,
) -> None:
    """테마/아이콘/플러그인/위젯/템플릿 설치와 업데이트 확인."""
    level = logging.getLevelName(BazaarConfig().log_level.upper())
    if isinstance(level, int):
        structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def _manager(config: BazaarConfig | None = None) -> BazaarManager:
    def show_progress(repo: str, progress: float) -> None:
        err_console.print(f"[cyan]{repo}[/cyan] {progress:.0%}", end="\r")

    return BazaarManager(config or BazaarConfig(), on_progress=show_progress)


def _fail(e: Exception) -> typer.Exit:
    err_console.print(f"오류: {e}", style="red")
    return typer.Exit(1)


@app.command()  # [BK-H001.2]
def stage(
    kind: Annotated[PackageType, typer.Argument(help="패키지 유형")],
) -> None:
    """원격 스테이지 인덱스를 출력합니다."""
    with _manager() as manager:
        index = manager.stage_index(kind)

    if index is None:
        err_console.print("스테이지 인덱스를 가져오지 못했습니다.", style="yellow")
        raise typer.Exit(1)

    table = Table(title=f"Bazaar {kind.plural}")
    table.add_column("저장소", style="cyan")
    table.add_column("버전")
    table.add_column("★", justify="right")
    table.add_column("업데이트")
    for repo in index.repos:
        version = repo.package.version if repo.package else "-"
        table.add_row(repo.url, version, str(repo.stars), repo.updated)
    console.print(table)


@app.command()  # [BK-H001.3]
def installed(
    kind: Annotated[PackageType, typer.Argument(help="패키지 유형")],
    check: Annotated[bool, typer.Option("--check", "-c", help="업데이트 확인")] = False,
) -> None:
    """설치된 패키지 목록을 출력합니다."""
    with _manager() as manager:
        packages = manager.installed(kind, check_updates=check)

    table = Table(title=f"설치된 {kind.plural}")
    table.add_column("이름", style="cyan")
    table.add_column("버전")
    table.add_column("작성자")
    table.add_column("상태", style="bold")
    for pkg in packages:
        status = "[green]최신[/green]"
        if pkg.incompatible:
            status = "[red]호환 안 됨[/red]"
        elif pkg.outdated:
            status = f"[yellow]업데이트 있음 ({pkg.repo_hash[:7]})[/yellow]"
        table.add_row(pkg.preferred_name, pkg.version, pkg.author, status)
    console.print(table)


@app.command()  # [BK-H001.4]
def install(
    kind: Annotated[PackageType, typer.Argument(help="패키지 유형")],
    ref: Annotated[str, typer.Argument(help="owner/repo@commitHash")],
    directory: Annotated[str, typer.Argument(help="설치 디렉토리 이름")],
    system_id: Annotated[str, typer.Option("--system-id", help="다운로드 수 집계용 ID")] = "",
) -> None:
    """릴리스 패키지를 내려받아 설치합니다."""
    try:
        repo_ref = parse_repo_ref(ref)
        config = BazaarConfig()
        with _manager(config) as manager:
            path = manager.install(
                kind,
                f"{config.github_host.rstrip('/')}/{repo_ref.repo_name}",
                repo_ref.hash,
                directory,
                system_id=system_id,
            )
    except BazaarError as e:
        raise _fail(e) from e

    err_console.print()
    console.print(Panel(f"[bold]{repo_ref.base}[/bold]\n→ {path}", title="설치 완료", border_style="green"))


@app.command()  # [BK-H001.5]
def uninstall(
    kind: Annotated[PackageType, typer.Argument(help="패키지 유형")],
    directory: Annotated[str, typer.Argument(help="설치 디렉토리 이름")],
) -> None:
    """설치된 패키지를 삭제합니다."""
    try:
        with _manager() as manager:
            manager.uninstall(kind, directory)
    except BazaarError as e:
        raise _fail(e) from e
    console.print(f"[green]{directory}[/green] 삭제 완료")


@app.command()  # [BK-H001.6]
def readme(
    kind: Annotated[PackageType, typer.Argument(help="패키지 유형")],
    repo_url: Annotated[str, typer.Argument(help="https://github.com/owner/repo")],
    repo_hash: Annotated[str, typer.Argument(help="커밋 해시")],
) -> None:
    """패키지 README 를 출력합니다."""
    with _manager() as manager:
        text = manager.readme(kind, repo_url, repo_hash)
    if not text:
        err_console.print("스테이지 인덱스에 없는 패키지입니다.", style="yellow")
        raise typer.Exit(1)
    console.print(text)


if __name__ == "__main__":
    app()
