"""
Inspect 命令实现

检查已构建安装包的内容：条目列表与 manifest.php 中的描述符。
"""

import json
import zipfile
from pathlib import Path
from typing import Any, Dict

import typer
from rich.console import Console
from rich.table import Table

from ...build.archive import MANIFEST_ENTRY_NAME
from ...build.php_export import load_manifest_file
from ...errors import ManifestParseError
from ...utils import format_size


console = Console()


def inspect_command(
    package: str = typer.Argument(..., help="安装包 zip 路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式"),
    show_files: bool = typer.Option(False, "--files", help="显示 copy 指令列表"),
) -> None:
    """检查安装包内容

    显示安装包的 manifest 信息、条目数量与 copy 指令。

    示例:
        sugarpack inspect releases/sugarcrm-my_module-1.0.0.zip
        sugarpack inspect releases/sugarcrm-my_module-1.0.0.zip --json
    """
    package_path = Path(package)

    if not package_path.exists():
        console.print(f"[red]安装包不存在: {package_path}[/red]")
        raise typer.Exit(1)

    try:
        data = read_package(package_path)
    except (zipfile.BadZipFile, KeyError, ManifestParseError, UnicodeDecodeError) as e:
        console.print(f"[red]检查安装包失败: {e}[/red]")
        raise typer.Exit(1)

    if json_output:
        console.print_json(json.dumps(data, ensure_ascii=False, default=str))
    else:
        _display_package_info(package_path, data, show_files)


def read_package(package_path: Path) -> Dict[str, Any]:
    """读取安装包条目与 manifest.php

    Raises:
        zipfile.BadZipFile: 不是有效的 zip
        KeyError: 缺少 manifest.php
        ManifestParseError: manifest.php 无法解析
    """
    with zipfile.ZipFile(package_path, 'r') as zf:
        infos = zf.infolist()
        content = zf.read(MANIFEST_ENTRY_NAME).decode('utf-8')

    manifest, installdefs = load_manifest_file(content)

    return {
        'entries': [info.filename for info in infos],
        'total_size': sum(info.file_size for info in infos),
        'manifest': manifest,
        'installdefs': installdefs,
    }


def _display_package_info(package_path: Path, data: Dict[str, Any], show_files: bool) -> None:
    """以表格形式显示安装包信息"""
    console.print(f"[bold]安装包[/bold]: {package_path}")
    console.print(f"[blue]条目数量[/blue]: {len(data['entries'])}")
    console.print(f"[blue]解压后大小[/blue]: {format_size(data['total_size'])}")
    console.print()

    manifest = data['manifest']
    if isinstance(manifest, dict) and manifest:
        table = Table(title="Manifest")
        table.add_column("字段", style="cyan")
        table.add_column("值", style="green")
        for key, value in manifest.items():
            table.add_row(str(key), json.dumps(value, ensure_ascii=False))
        console.print(table)

    installdefs = data['installdefs']
    copy_list = installdefs.get('copy', []) if isinstance(installdefs, dict) else []
    console.print(f"[blue]copy 指令[/blue]: {len(copy_list)} 条")

    if show_files and copy_list:
        table = Table(title="copy 指令")
        table.add_column("from", style="cyan")
        table.add_column("to", style="green")
        for item in copy_list:
            if not isinstance(item, dict):
                continue
            table.add_row(str(item.get('from', '')), str(item.get('to', '')))
        console.print(table)
