"""
CLI 命令模块 - autoshutdown 的所有命令行命令定义。

本模块使用 Typer 框架定义完整的 CLI 命令体系：
- onboard：生成默认配置文件
- plan：预览下一轮关服计划
- run：以控制台宿主运行调度器，直到关服生效
- status：查看配置状态

技术栈：
- Typer：CLI 框架（基于 Click，支持类型注解自动生成帮助文档）
- Rich：终端美化输出（表格、彩色文本）
"""

import asyncio
import signal
import sys
import time
from datetime import datetime
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from autoshutdown import __logo__, __version__

app = typer.Typer(
    name="autoshutdown",
    help=f"{__logo__} autoshutdown - scheduled server shutdown with pre-announcements",
    no_args_is_help=True,  # 无参数时显示帮助信息
)

console = Console()


def _setup_logging(verbose: bool) -> None:
    """配置 loguru 输出到 stderr，verbose 时输出 DEBUG 级别。"""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")
    logger.enable("autoshutdown")


def version_callback(value: bool):
    """版本号回调：当用户传入 --version/-v 参数时，打印版本号并退出。"""
    if value:
        console.print(f"{__logo__} autoshutdown v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """autoshutdown CLI 根命令回调。处理全局选项（如 --version）。"""
    pass


# ============================================================================
# Onboard / Setup
# ============================================================================


@app.command()
def onboard(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """
    生成默认配置文件（默认 ~/.autoshutdown/config.json）。

    默认配置中 enabled 为 false，需要手动开启。
    """
    from autoshutdown.config.loader import get_config_path, save_config
    from autoshutdown.config.schema import Config

    path = config_path or get_config_path()

    if path.exists():
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(Config(), path)
    console.print(f"[green]✓[/green] Created config at {path}")
    console.print("\nNext steps:")
    console.print(f"  1. Set [cyan]enabled[/cyan] to true and adjust [cyan]time[/cyan] in {path}")
    console.print("  2. Preview: [cyan]autoshutdown plan[/cyan]")
    console.print("  3. Run: [cyan]autoshutdown run[/cyan]")


# ============================================================================
# Plan preview
# ============================================================================


@app.command()
def plan(
    now: str = typer.Option(None, "--now", help="Pretend the current local time is this (ISO format)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show runtime logs"),
):
    """
    预览关服计划。

    按当前配置计算每个目标时刻的下一次关服时间、预告时间和实际提前量，
    以表格形式展示；不会真正调度任何动作。
    """
    from autoshutdown.config.source import SettingsConfigSource
    from autoshutdown.host.console import ConsoleHost
    from autoshutdown.service.shutdown import ShutdownService
    from autoshutdown.utils.helpers import format_duration, format_timestamp

    if logs:
        _setup_logging(verbose=False)
    else:
        logger.disable("autoshutdown")

    if now:
        try:
            current = datetime.fromisoformat(now)
        except ValueError:
            console.print(f"[red]Error: invalid --now value '{now}'[/red]")
            raise typer.Exit(1)
    else:
        current = datetime.now()

    host = ConsoleHost(console=console)
    service = ShutdownService(
        SettingsConfigSource(config_path=config_path),
        announcer=host,
        world=host,
        clock=lambda: current,
    )
    service.init()

    if not service.enabled or service.plan is None:
        console.print("[yellow]AutoShutdown is disabled (or has no valid times); nothing scheduled.[/yellow]")
        raise typer.Exit(1)

    result = service.plan
    table = Table(title=f"Shutdown plan ({result.rule.describe()}) from {format_timestamp(result.now)}")
    table.add_column("Time", style="cyan")
    table.add_column("Next Shutdown")
    table.add_column("Remaining")
    table.add_column("Pre-announce")
    table.add_column("Lead")

    for entry in result.entries:
        table.add_row(
            str(entry.time),
            format_timestamp(entry.shutdown.fire_at),
            format_duration(entry.remaining_s),
            format_timestamp(entry.pre_announce.fire_at),
            format_duration(entry.lead_s),
        )
    for tod in result.skipped:
        table.add_row(str(tod), "[dim]skipped (too soon)[/dim]", "", "", "")

    console.print(table)
    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")


# ============================================================================
# Run
# ============================================================================


@app.command()
def run(
    tick_ms: int = typer.Option(1000, "--tick-ms", "-t", help="Tick interval in milliseconds"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Verbose output"),
):
    """
    以控制台宿主运行自动关服调度器。

    执行流程：
    1. 加载配置并初始化 ShutdownService
    2. 启动 StartEvents 中配置的事件
    3. 按 tick 间隔驱动调度器和宿主关服倒计时
    4. 关服生效后以宿主退出码退出

    收到 SIGHUP 时重新加载配置（在同一个事件循环中执行，不会与 tick 交错）。
    """
    from autoshutdown.config.source import SettingsConfigSource
    from autoshutdown.host.console import ConsoleHost
    from autoshutdown.service.shutdown import ShutdownService

    _setup_logging(verbose)

    if tick_ms <= 0:
        console.print("[red]Error: --tick-ms must be positive[/red]")
        raise typer.Exit(1)

    source = SettingsConfigSource(config_path=config_path)
    host = ConsoleHost(console=console)
    service = ShutdownService(source, announcer=host, world=host, events=host)

    service.init()
    if not service.enabled:
        console.print("[yellow]AutoShutdown is disabled; nothing to run.[/yellow]")
        raise typer.Exit(1)
    service.start_persistent_events()

    summary = service.status()
    console.print(f"{__logo__} AutoShutdown running: {summary['pending']} pending pre-announce(s)")

    def reload() -> None:
        source.reload()
        service.init()

    async def loop() -> int:
        event_loop = asyncio.get_running_loop()
        try:
            event_loop.add_signal_handler(signal.SIGHUP, reload)
        except (AttributeError, NotImplementedError):
            logger.debug("SIGHUP reload not supported on this platform")

        last = time.monotonic()
        while not host.stopped:
            await asyncio.sleep(tick_ms / 1000)
            diff_ms = int((time.monotonic() - last) * 1000)
            last += diff_ms / 1000
            service.on_update(diff_ms)
            host.update(diff_ms)
        return int(host.exit_code or 0)

    try:
        exit_code = asyncio.run(loop())
    except KeyboardInterrupt:
        console.print("\nStopping...")
        raise typer.Exit()

    raise typer.Exit(exit_code)


# ============================================================================
# Status
# ============================================================================


@app.command()
def status(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """
    显示配置状态：配置文件路径、是否启用、关服时间、重复规则、预告设置和启动事件。
    """
    from autoshutdown.config.loader import get_config_path, load_config
    from autoshutdown.schedule.types import RecurrenceRule

    path = config_path or get_config_path()
    config = load_config(path)

    console.print(f"{__logo__} autoshutdown Status\n")
    console.print(f"Config: {path} {'[green]✓[/green]' if path.exists() else '[red]✗[/red]'}")
    console.print(f"Enabled: {'[green]yes[/green]' if config.enabled else '[dim]no[/dim]'}")
    console.print(f"Time: {config.time}")
    console.print(f"Rule: {RecurrenceRule.from_options(config.weekday, config.every_days).describe()}")
    console.print(f"Pre-announce: {config.pre_announce.seconds}s before")
    console.print(f"Message: {config.pre_announce.message}", markup=False)
    console.print(f"Start events: {config.start_events or '[dim]none[/dim]'}")


if __name__ == "__main__":
    app()
