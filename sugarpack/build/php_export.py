"""
PHP 描述符导出与解析

安装包中的 manifest.php 由 SugarCRM 的模块加载器直接 include，
因此描述符以 PHP ``var_export`` 的格式导出：

    <?php
    $manifest = array (
      'name' => 'Demo',
    );
    $installdefs = array (
      'copy' =>
      array (
        0 =>
        array (
          'from' => '<basepath>/src/a.php',
          'to' => 'a.php',
        ),
      ),
    );

支持的值类型（DescriptorValue）：None、bool、int、float、str、
序列（list/tuple）以及键为字符串的映射。序列按 0..n-1 的整数键导出，
解析时键恰为 0..n-1 的数组还原为 list，其余还原为 dict。
"""

import math
import re
from collections.abc import Mapping
from typing import Any, Dict, List, Tuple, Union

from ..errors import DescriptorTypeError, ManifestParseError

DescriptorValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

INDENT = "  "


def validate_descriptor(value: Any, location: str = "$") -> None:
    """检查值是否可导出

    Raises:
        DescriptorTypeError: 出现不支持的类型或非字符串键
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return

    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                raise DescriptorTypeError(f"{location}: 映射的键必须是字符串，实际为 {type(key).__name__}")
            validate_descriptor(item, f"{location}.{key}")
        return

    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            validate_descriptor(item, f"{location}[{index}]")
        return

    raise DescriptorTypeError(f"{location}: 不支持的值类型 {type(value).__name__}")


def export_string(value: str) -> str:
    return "'" + value.replace('\\', '\\\\').replace("'", "\\'") + "'"


def export_float(value: float) -> str:
    if math.isnan(value):
        return 'NAN'
    if math.isinf(value):
        return 'INF' if value > 0 else '-INF'

    text = repr(float(value))
    if 'e' in text:
        mantissa, exponent = text.split('e')
        if '.' not in mantissa:
            mantissa += '.0'
        sign = '-' if exponent.startswith('-') else '+'
        return f"{mantissa}E{sign}{exponent.lstrip('+-').lstrip('0') or '0'}"
    return text


def export_value(value: Any, level: int = 0) -> str:
    """按 PHP var_export 格式导出单个值

    Args:
        value: 要导出的值
        level: 当前嵌套层级（决定缩进）

    Returns:
        str: PHP 源码片段

    Raises:
        DescriptorTypeError: 出现不支持的类型
    """
    if value is None:
        return 'NULL'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return export_float(value)
    if isinstance(value, str):
        return export_string(value)

    if isinstance(value, Mapping):
        items = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise DescriptorTypeError(f"映射的键必须是字符串，实际为 {type(key).__name__}")
            items.append((export_string(key), item))
    elif isinstance(value, (list, tuple)):
        items = [(str(index), item) for index, item in enumerate(value)]
    else:
        raise DescriptorTypeError(f"不支持的值类型 {type(value).__name__}")

    pad = INDENT * level
    lines = ["array ("]
    for key_text, item in items:
        if _is_container(item):
            lines.append(f"{pad}{INDENT}{key_text} => ")
            lines.append(f"{pad}{INDENT}{export_value(item, level + 1)},")
        else:
            lines.append(f"{pad}{INDENT}{key_text} => {export_value(item, level + 1)},")
    lines.append(f"{pad})")
    return "\n".join(lines)


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def render_manifest_file(manifest: Any, installdefs: Any) -> str:
    """生成 manifest.php 文件内容"""
    return (
        "<?php\n"
        f"$manifest = {export_value(manifest)};\n"
        f"$installdefs = {export_value(installdefs)};\n"
    )


_TOKEN_RE = re.compile(r"""
    (?P<ws>\s+)
  | (?P<open_tag><\?php\b)
  | (?P<close_tag>\?>)
  | (?P<comment>(?://|\#)[^\n]*|/\*.*?\*/)
  | (?P<variable>\$[A-Za-z_][A-Za-z0-9_]*)
  | (?P<string>'(?:[^'\\]|\\.)*')
  | (?P<number>-?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?)
  | (?P<word>-?[A-Za-z_][A-Za-z0-9_]*)
  | (?P<arrow>=>)
  | (?P<punct>[=;,()\[\]])
""", re.VERBOSE | re.DOTALL)

_STRING_ESCAPE_RE = re.compile(r"\\([\\'])")


def _tokenize(text: str) -> List[Tuple[str, str, int]]:
    tokens = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise ManifestParseError(f"无法识别的内容（位置 {pos}）: {text[pos:pos + 20]!r}")
        kind = match.lastgroup
        if kind not in ('ws', 'comment', 'open_tag', 'close_tag'):
            tokens.append((kind, match.group(), pos))
        pos = match.end()
    return tokens


class _Parser:
    """var_export 子集的递归下降解析器"""

    def __init__(self, text: str):
        self.tokens = _tokenize(text)
        self.index = 0

    def _peek(self) -> Tuple[str, str, int]:
        if self.index >= len(self.tokens):
            return ('eof', '', -1)
        return self.tokens[self.index]

    def _next(self) -> Tuple[str, str, int]:
        token = self._peek()
        if token[0] == 'eof':
            raise ManifestParseError("内容意外结束")
        self.index += 1
        return token

    def _expect(self, text: str) -> None:
        kind, value, pos = self._next()
        if value != text:
            raise ManifestParseError(f"期望 {text!r}，实际为 {value!r}（位置 {pos}）")

    def parse_assignments(self) -> Dict[str, Any]:
        variables = {}
        while self._peek()[0] != 'eof':
            kind, name, pos = self._next()
            if kind != 'variable':
                raise ManifestParseError(f"期望变量赋值，实际为 {name!r}（位置 {pos}）")
            self._expect('=')
            variables[name[1:]] = self.parse_value()
            self._expect(';')
        return variables

    def parse_value(self) -> Any:
        kind, value, pos = self._next()

        if kind == 'string':
            return _STRING_ESCAPE_RE.sub(r'\1', value[1:-1])
        if kind == 'number':
            if any(c in value for c in '.eE'):
                return float(value)
            return int(value)
        if kind == 'word':
            word = value.lower()
            if word == 'null':
                return None
            if word == 'true':
                return True
            if word == 'false':
                return False
            if word == 'inf':
                return math.inf
            if word == '-inf':
                return -math.inf
            if word == 'nan':
                return math.nan
            if word == 'array':
                self._expect('(')
                return self._parse_array_body(')')
        if value == '[':
            return self._parse_array_body(']')

        raise ManifestParseError(f"无法解析的值 {value!r}（位置 {pos}）")

    def _parse_array_body(self, closing: str) -> Union[List[Any], Dict[Any, Any]]:
        pairs = {}
        next_index = 0
        while self._peek()[1] != closing:
            first = self.parse_value()
            if self._peek()[0] == 'arrow':
                self._next()
                key = first
                if not isinstance(key, (int, str)) or isinstance(key, bool):
                    raise ManifestParseError(f"不支持的数组键 {key!r}")
                item = self.parse_value()
            else:
                key, item = next_index, first
            pairs[key] = item
            if isinstance(key, int) and key >= next_index:
                next_index = key + 1
            if self._peek()[1] == ',':
                self._next()
            elif self._peek()[1] != closing:
                kind, value, pos = self._peek()
                raise ManifestParseError(f"期望 ',' 或 {closing!r}，实际为 {value!r}（位置 {pos}）")
        self._expect(closing)

        if list(pairs.keys()) == list(range(len(pairs))):
            return list(pairs.values())
        return pairs


def parse_value(text: str) -> Any:
    """解析单个 var_export 值"""
    parser = _Parser(text)
    value = parser.parse_value()
    if parser._peek()[0] != 'eof':
        raise ManifestParseError(f"值之后存在多余内容: {parser._peek()[1]!r}")
    return value


def load_manifest_file(text: str) -> Tuple[Any, Any]:
    """解析 manifest.php 内容

    空映射与空列表导出后相同（``array (\\n)``），解析时均还原为 ``[]``，
    因此含 ``{}`` 的描述符重新加载后不与原值相等。

    Returns:
        Tuple: (manifest, installdefs)

    Raises:
        ManifestParseError: 内容无法解析或缺少变量
    """
    variables = _Parser(text).parse_assignments()
    missing = [name for name in ('manifest', 'installdefs') if name not in variables]
    if missing:
        raise ManifestParseError(f"manifest.php 缺少变量: {', '.join('$' + m for m in missing)}")
    return variables['manifest'], variables['installdefs']
