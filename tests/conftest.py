"""
测试公共夹具
"""

from pathlib import Path

import pytest

from sugarpack.utils.logging import close_logger


@pytest.fixture(autouse=True)
def reset_logger():
    """每个测试结束后重置全局输出门面（级别、日志文件）"""
    yield
    close_logger()


@pytest.fixture
def module_tree(tmp_path) -> Path:
    """创建一个典型的模块源目录

    mymodule/foo.php
    mymodule/custom/application/Ext/bar.php
    mymodule/sub/custom/modules/Accounts/Ext/baz.php
    """
    root = tmp_path / "mymodule"
    (root / "custom" / "application" / "Ext").mkdir(parents=True)
    (root / "sub" / "custom" / "modules" / "Accounts" / "Ext").mkdir(parents=True)

    (root / "foo.php").write_text("<?php echo 'foo';\n")
    (root / "custom" / "application" / "Ext" / "bar.php").write_text("<?php // bar\n")
    (root / "sub" / "custom" / "modules" / "Accounts" / "Ext" / "baz.php").write_text("<?php // baz\n")

    return tmp_path
