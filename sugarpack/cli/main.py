"""
sugarpack CLI 主入口

提供命令行接口，支持 build/validate/inspect/example 等命令。
"""

from typing import Optional

import typer
from rich.console import Console

from .. import __version__
from ..utils import configure_logging, OutputLevel
from .commands import build, validate, inspect


app = typer.Typer(
    name="sugarpack",
    help="sugarpack - SugarCRM Module Loadable Package 构建工具",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"sugarpack v{__version__}")
        raise typer.Exit()


def verbose_callback(verbose: bool) -> None:
    """配置详细输出"""
    configure_logging(level=OutputLevel.DEBUG if verbose else OutputLevel.INFO)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        callback=verbose_callback,
        help="启用详细输出"
    )
) -> None:
    """sugarpack - SugarCRM Module Loadable Package 构建工具

    使用 --help 查看可用命令的详细信息。
    """
    pass


app.command("build", help="构建安装包")(build.build_command)
app.command("validate", help="验证配置文件")(validate.validate_command)
app.command("inspect", help="检查安装包内容")(inspect.inspect_command)


@app.command("example")
def example_command(
    output: str = typer.Option(
        "package.yaml",
        "--output", "-o",
        help="输出配置文件路径"
    )
) -> None:
    """生成示例配置文件"""
    from ..config import ConfigError, save_config
    from ..config.schema import PackageModel, SugarPackConfig

    config = SugarPackConfig(
        package=PackageModel(id="my_module", source_dir="src"),
        manifest={
            'acceptable_sugar_versions': {'regex_matches': ['13\\..*']},
            'acceptable_sugar_flavors': ['PRO', 'ENT', 'ULT'],
            'author': 'Example Inc.',
            'description': 'Example module',
            'is_uninstallable': True,
            'name': 'My Module',
            'type': 'module',
        },
        installdefs={'id': 'my_module'},
    )

    try:
        save_config(config, output)
    except ConfigError as e:
        console.print(f"[red]生成示例配置失败: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"✓ 示例配置文件已生成: [green]{output}[/green]")
    console.print("请根据需要修改配置文件，然后运行:")
    console.print(f"  [cyan]sugarpack build 1.0.0 -c {output}[/cyan]")


if __name__ == "__main__":
    app()
