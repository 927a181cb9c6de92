"""
Build 命令实现

构建安装包的核心命令。
"""

import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ...config import load_config, ConfigError, ConfigValidationError, DEFAULT_CONFIG_NAME
from ...errors import AlreadyExistsError, BuildError, MissingVersionError
from ...utils import format_size
from ...utils.logging import set_log_level, set_log_file, OutputLevel


console = Console()


def build_command(
    version: Optional[str] = typer.Argument(None, help="版本号（省略时读取工作目录下的 version 文件）"),
    config: str = typer.Option(DEFAULT_CONFIG_NAME, "--config", "-c", help="配置文件路径"),
    work_dir: Optional[str] = typer.Option(None, "--work-dir", "-w", help="工作目录（默认为配置文件所在目录）"),
    keep_partial: bool = typer.Option(False, "--keep-partial", help="构建失败时保留未完成的 zip"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """构建安装包

    扫描源目录，生成 releases/sugarcrm-<id>-<version>.zip。

    示例:
        sugarpack build 1.0.0
        sugarpack build -c package.yaml --work-dir ./module
    """
    from ...build.builder import PackageAssembler

    config_path = Path(config)

    set_log_level(OutputLevel.DEBUG if verbose else OutputLevel.INFO)

    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            console.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    try:
        console.print(f"[cyan]正在加载配置文件[/cyan]: {config_path}")
        config_obj = load_config(config_path)
    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors())
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {e}")
        raise typer.Exit(1)

    root = Path(work_dir) if work_dir else config_path.resolve().parent

    assembler = PackageAssembler(
        work_dir=root,
        output_dir=config_obj.output.directory,
        compress_level=config_obj.output.compress_level,
        keep_partial=keep_partial or config_obj.output.keep_partial,
    )

    try:
        artifact = assembler.assemble(
            version,
            config_obj.package.id,
            config_obj.package.source_dir,
            config_obj.manifest,
            config_obj.installdefs,
        )
    except MissingVersionError as e:
        console.print(f"[red]✗ {e}[/red]")
        console.print(f"用法: [cyan]sugarpack build <version> -c {config_path}[/cyan]")
        raise typer.Exit(1)
    except AlreadyExistsError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    except BuildError as e:
        console.print(f"[red]✗ 构建失败[/red]: {e}")
        if log_file:
            console.print(f"[yellow]详细错误信息:[/yellow]\n{traceback.format_exc()}")
        raise typer.Exit(1)

    console.print(f"[green]✓ 安装包构建完成[/green]: {artifact.path}")
    console.print(f"[blue]打包文件[/blue]: {len(artifact.included)} 个")
    if artifact.excluded:
        console.print(f"[blue]排除文件[/blue]: {len(artifact.excluded)} 个")
    console.print(f"[blue]文件大小[/blue]: {format_size(artifact.path.stat().st_size)}")
    console.print(f"[blue]构建时间[/blue]: {artifact.build_time:.1f}秒")
